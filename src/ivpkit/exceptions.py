"""Exceptions raised by ivpkit."""

__all__ = [
    "ConstructionError",
    "EvaluationError",
]


class ConstructionError(TypeError):
    """Raises when a right-hand side cannot be turned into a derivative bundle.

    This happens at construction time, e.g. when the calling convention of a
    function cannot be determined from its signature.
    """


class EvaluationError(RuntimeError):
    """Raises when a derivative or Jacobian evaluation fails inside ivpkit.

    Examples are buffers with the wrong shape, a scratch buffer sharing memory
    with the Jacobian output, or a function that the differentiation backend
    cannot handle. Exceptions raised by user code itself are not wrapped.
    """
