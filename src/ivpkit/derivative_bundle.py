"""Provides the DerivativeBundle class.

A bundle holds the four forms of one right-hand side that integrators use:

* ``functional_derivative(u, t) -> du``
* ``inplace_derivative(du, u, t)``
* ``functional_jacobian(u, t) -> J``
* ``inplace_jacobian(J, du, u, t)``

Users supply a single function in either calling convention, and the
missing forms are derived. Both Jacobian forms always come from a Jacobian
backend (forward-mode autodiff by default), so right-hand sides never have to
be differentiated by hand.

Typical usage examples:

>>> import numpy as np
>>> from ivpkit.derivative_bundle import DerivativeBundle
>>>
>>> def decay(du, u, t):
...     du[:] = -2.0 * u
>>>
>>> rhs = DerivativeBundle.from_inplace(decay)
>>> rhs.functional_derivative(np.array([1.0]), 0.0)
array([-2.])
>>> rhs.functional_jacobian(np.array([1.0]), 0.0)
array([[-2.]])
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Callable

import numpy as np

from ivpkit.conventions import Convention, as_convention, detect_convention
from ivpkit.exceptions import ConstructionError, EvaluationError
from ivpkit.jacobian.registry import JacobianBackend, resolve_backend
from ivpkit.utils.types import FunctionalRHS, MutatingRHS
from ivpkit.utils.validate import inexact_dtype

__all__ = [
    "DerivativeBundle",
    "as_derivative_bundle",
]


def _require_callable(f: Any) -> None:
    if not callable(f):
        raise ConstructionError(f"right-hand side must be callable; got {type(f).__name__}.")


@dataclass(frozen=True)
class DerivativeBundle:
    """Functional and in-place forms of a right-hand side and its Jacobian.

    All four callables describe the same derivative function. The bundle is
    immutable and holds no state of its own, so it can be shared between
    problems and threads; only the buffers passed to the in-place forms are
    written to.

    The constructor takes all four forms directly. Use
    :meth:`from_function`, :meth:`from_inplace` or :meth:`from_callable` to
    derive them from a single function.

    Attributes:
        functional_derivative: ``(u, t) -> du``; allocates the result.
        inplace_derivative: ``(du, u, t) -> None``; writes into ``du``.
        functional_jacobian: ``(u, t) -> J``; allocates an ``(n, n)`` matrix.
        inplace_jacobian: ``(J, du, u, t) -> None``; writes into ``J`` and may
            use ``du`` as scratch space. ``du`` must not alias ``J``.
    """

    functional_derivative: Callable[[Any, float], Any]
    inplace_derivative: Callable[[Any, Any, float], Any]
    functional_jacobian: Callable[[Any, float], np.ndarray]
    inplace_jacobian: Callable[[np.ndarray, Any, Any, float], Any]

    def __post_init__(self):
        for field in fields(self):
            if not callable(getattr(self, field.name)):
                raise ConstructionError(
                    f"{field.name} must be callable; "
                    f"got {type(getattr(self, field.name)).__name__}."
                )

    @classmethod
    def from_function(
        cls,
        f: FunctionalRHS,
        *,
        backend: str | JacobianBackend | None = None,
    ) -> DerivativeBundle:
        """Builds a bundle from a functional right-hand side ``f(u, t) -> du``.

        Args:
            f: Right-hand side returning a new derivative vector.
            backend: Jacobian backend name or instance; ``None`` selects the
                default backend.

        Returns:
            The bundle. ``functional_derivative`` is ``f`` itself.
        """
        _require_callable(f)
        jac_backend = resolve_backend(backend)

        def inplace_derivative(du, u, t):
            value = f(u, t)
            if np.size(value) != np.size(du):
                raise EvaluationError(
                    f"inplace_derivative: f(u, t) returned {np.size(value)} values "
                    f"for a buffer of shape {np.shape(du)}."
                )
            du[...] = np.reshape(value, np.shape(du))

        def functional_jacobian(u, t):
            return jac_backend.jacobian(lambda x: f(x, t), u)

        def inplace_jacobian(J, du, u, t):
            jac_backend.jacobian_into(J, lambda x: f(x, t), u)

        return cls(f, inplace_derivative, functional_jacobian, inplace_jacobian)

    @classmethod
    def from_inplace(
        cls,
        f: MutatingRHS,
        *,
        backend: str | JacobianBackend | None = None,
    ) -> DerivativeBundle:
        """Builds a bundle from a mutating right-hand side ``f(du, u, t)``.

        The derived ``functional_derivative`` allocates a new buffer on every
        call. It is meant for setup and diagnostics; integrators should call
        ``inplace_derivative`` in their inner loops.

        Args:
            f: Right-hand side writing the derivative into its first argument.
            backend: Jacobian backend name or instance; ``None`` selects the
                default backend.

        Returns:
            The bundle. ``inplace_derivative`` is ``f`` itself.
        """
        _require_callable(f)
        jac_backend = resolve_backend(backend)

        def functional_derivative(u, t):
            u = np.asarray(u)
            du = np.empty_like(u, dtype=inexact_dtype(u))
            f(du, u, t)
            return du

        def functional_jacobian(u, t):
            scratch = np.empty_like(u, dtype=inexact_dtype(u))
            return jac_backend.mutating_jacobian(lambda y, x: f(y, x, t), scratch, u)

        def inplace_jacobian(J, du, u, t):
            jac_backend.mutating_jacobian_into(J, lambda y, x: f(y, x, t), du, u)

        return cls(functional_derivative, f, functional_jacobian, inplace_jacobian)

    @classmethod
    def from_callable(
        cls,
        f: Callable[..., Any],
        *,
        convention: Convention | str | None = None,
        backend: str | JacobianBackend | None = None,
    ) -> DerivativeBundle:
        """Builds a bundle from a right-hand side in either calling convention.

        Args:
            f: Right-hand side, ``f(u, t)`` or ``f(du, u, t)``.
            convention: The calling convention of ``f``. If None, it is
                detected from the signature of ``f`` (``f`` is not called).
            backend: Jacobian backend name or instance.

        Returns:
            The bundle.

        Raises:
            ConstructionError: If the convention is invalid or cannot be
                determined.
        """
        if convention is None:
            convention = detect_convention(f)
        else:
            convention = as_convention(convention)
        if convention is Convention.FUNCTIONAL:
            return cls.from_function(f, backend=backend)
        return cls.from_inplace(f, backend=backend)


def as_derivative_bundle(
    rhs: DerivativeBundle | Callable[..., Any],
    *,
    convention: Convention | str | None = None,
    backend: str | JacobianBackend | None = None,
) -> DerivativeBundle:
    """Returns ``rhs`` if it is already a bundle, otherwise builds one from it.

    Args:
        rhs: A bundle or a raw right-hand-side function.
        convention: Calling convention of a raw function (see
            :meth:`DerivativeBundle.from_callable`). Ignored for bundles.
        backend: Jacobian backend for a raw function. Ignored for bundles.

    Returns:
        A derivative bundle.

    Raises:
        ConstructionError: If ``rhs`` is a function whose convention cannot
            be determined.
    """
    if isinstance(rhs, DerivativeBundle):
        return rhs
    return DerivativeBundle.from_callable(rhs, convention=convention, backend=backend)
