r"""JAX-based forward-mode Jacobian backend.

Jacobians are computed with ``jax.jacfwd``, which is the natural choice for
the small-to-moderate state dimensions of ODE right-hand sides (one JVP per
state component).

Shape conventions:

- ``jacobian``: :math:`f:\mathbb{R}^n\mapsto\mathbb{R}^m` returns an array of
  shape ``(m, n)``, where ``m = prod(out_shape)``.
- ``mutating_jacobian``: the output length ``m`` is taken from the shape of
  the buffer ``y``.

Use only with JAX-traceable functions, i.e. use ``jax.numpy`` instead of
``numpy`` for transcendental functions inside the right-hand side. For
arbitrary numpy code, prefer the ``"finite"`` backend.

Example:
--------

    >>> import jax.numpy as jnp
    >>> from ivpkit.jacobian.forward import ForwardModeJacobian
    >>> backend = ForwardModeJacobian()
    >>> backend.jacobian(lambda x: jnp.array([x[0] * x[1], jnp.sin(x[1])]), [2.0, 0.0])
    array([[0., 2.],
           [0., 1.]])
"""

from __future__ import annotations

from typing import Any, Callable

import jax
import jax.numpy as jnp
import numpy as np

from ivpkit.exceptions import EvaluationError
from ivpkit.jacobian.jax_utils import (
    TRACE_ERRORS,
    TraceBuffer,
    to_jax_output,
    to_jax_state,
)
from ivpkit.utils.validate import (
    check_buffer_shape,
    check_finite_jacobian,
    check_no_alias,
)

__all__ = [
    "ForwardModeJacobian",
]


def _require_real(x: jnp.ndarray, *, where: str) -> None:
    """Raises if the state is complex; ``jax.jacfwd`` only differentiates real inputs."""
    if jnp.iscomplexobj(x):
        raise EvaluationError(
            f"{where}: forward-mode Jacobians need a real state; got dtype {x.dtype}. "
            "Use backend='finite' for complex states."
        )


class ForwardModeJacobian:
    """Jacobian backend using JAX forward-mode automatic differentiation."""

    def jacobian(self, function: Callable[[Any], Any], x: Any) -> np.ndarray:
        """Calculates the Jacobian of ``function`` at ``x``.

        Args:
            function: Function mapping a state vector to an output vector.
            x: Point at which to evaluate the Jacobian.

        Returns:
            A Jacobian matrix as a 2D numpy.ndarray with shape (m, n).

        Raises:
            EvaluationError: If ``x`` is complex, the function cannot be traced
                by JAX, or the Jacobian is not finite.
        """
        x_jax = to_jax_state(x)
        _require_real(x_jax, where="jacobian")

        def traced(z):
            return to_jax_output(function(z))

        try:
            jac = jax.jacfwd(traced)(x_jax)
        except TRACE_ERRORS as exc:
            raise EvaluationError(
                "jacobian: function is not JAX-differentiable. "
                "Use jax.numpy inside the right-hand side or the 'finite' backend."
            ) from exc

        jac_np = np.asarray(jac)
        jac_np = jac_np.reshape(-1, x_jax.size)
        check_finite_jacobian(jac_np, where="jacobian")
        return jac_np

    def jacobian_into(self, out: np.ndarray, function: Callable[[Any], Any], x: Any) -> None:
        """Writes the Jacobian of ``function`` at ``x`` into ``out``.

        Raises:
            EvaluationError: If ``out`` has the wrong shape, or as for
                :meth:`jacobian`.
        """
        jac = self.jacobian(function, x)
        check_buffer_shape(out, jac.shape, where="jacobian_into")
        out[...] = jac

    def mutating_jacobian(
        self, function: Callable[[Any, Any], Any], y: np.ndarray, x: Any
    ) -> np.ndarray:
        """Calculates the Jacobian of a function that writes its output into ``y``.

        While tracing, ``function`` receives a :class:`TraceBuffer` in place of
        ``y``. On return ``y`` holds ``function(x)``.

        Args:
            function: Function ``function(y, x)`` writing its result into ``y``.
            y: Output buffer; its shape fixes the output dimension.
            x: Point at which to evaluate the Jacobian.

        Returns:
            A Jacobian matrix as a 2D numpy.ndarray with shape (y.size, x.size).

        Raises:
            EvaluationError: If ``x`` is complex, the function cannot be traced
                by JAX, or the Jacobian is not finite.
        """
        x_jax = to_jax_state(x)
        _require_real(x_jax, where="mutating_jacobian")
        out_shape = np.shape(y)

        def traced(z):
            buffer = TraceBuffer(jnp.zeros(out_shape, dtype=z.dtype))
            function(buffer, z)
            return buffer.data, buffer.data

        try:
            jac, value = jax.jacfwd(traced, has_aux=True)(x_jax)
        except TRACE_ERRORS as exc:
            raise EvaluationError(
                "mutating_jacobian: function is not JAX-differentiable. "
                "Use jax.numpy inside the right-hand side or the 'finite' backend."
            ) from exc

        y[...] = np.asarray(value)
        jac_np = np.asarray(jac).reshape(-1, x_jax.size)
        check_finite_jacobian(jac_np, where="mutating_jacobian")
        return jac_np

    def mutating_jacobian_into(
        self,
        out: np.ndarray,
        function: Callable[[Any, Any], Any],
        y: np.ndarray,
        x: Any,
    ) -> None:
        """Writes the Jacobian of a mutating ``function`` into ``out``.

        ``y`` is used as scratch space and holds ``function(x)`` on return. It
        must not share memory with ``out``.

        Raises:
            EvaluationError: If ``out`` has the wrong shape or aliases ``y``,
                or as for :meth:`mutating_jacobian`.
        """
        check_no_alias(out, y, where="mutating_jacobian_into")
        check_buffer_shape(out, (np.size(y), np.size(x)), where="mutating_jacobian_into")
        out[...] = self.mutating_jacobian(function, y, x)
