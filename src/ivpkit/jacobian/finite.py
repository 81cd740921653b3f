"""Central finite-difference Jacobian backend.

This backend needs nothing beyond numpy and works with any right-hand side,
including ones written with plain numpy functions that JAX cannot trace.
Each Jacobian column is a central difference along one state component::

    J[:, j] ~ sum_k c_k f(x + k h_j e_j) / h_j,    h_j = stepsize * max(1, |x_j|)

with the first-derivative coefficients ``c_k`` of a 3-, 5-, 7- or 9-point
stencil.

Examples:
--------
>>> import numpy as np
>>> from ivpkit.jacobian.finite import FiniteDifferenceJacobian
>>> backend = FiniteDifferenceJacobian(stepsize=1e-3, num_points=5)
>>> jac = backend.jacobian(lambda x: np.array([x[0] ** 2, x[0] * x[1]]), [1.0, 2.0])
>>> np.allclose(jac, [[2.0, 0.0], [2.0, 1.0]])
True
"""

from __future__ import annotations

import math
from typing import Any, Callable

import numpy as np
from numpy.typing import NDArray

from ivpkit.logger import ivpkit_logger
from ivpkit.utils.validate import (
    check_buffer_shape,
    check_finite_jacobian,
    check_no_alias,
    inexact_dtype,
)

__all__ = [
    "STENCILS",
    "first_derivative_coefficients",
    "FiniteDifferenceJacobian",
]

#: A list of supported stencil sizes.
STENCILS = (3, 5, 7, 9)


def _central_offsets(num_points: int) -> NDArray[np.float64]:
    """Creates a grid of central offset values for a desired number of points.

    Args:
        num_points: Number of points desired in the grid.

    Returns:
        An array of offset values centered at zero.
    """
    half = num_points // 2
    return np.arange(-half, half + 1, dtype=np.float64)


def first_derivative_coefficients(
    num_points: int,
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Computes first-derivative central-difference coefficients for unit step.

    The coefficients solve the Taylor-matching system
    ``sum_k c_k k^j / j! = delta_{j1}`` for ``j = 0 .. num_points - 1``.

    Args:
        num_points: Number of points in the stencil. Must be one of :data:`STENCILS`.

    Returns:
        A pair ``(offsets, coeffs)`` of equal-length arrays.

    Raises:
        ValueError: If ``num_points`` is not supported.
    """
    if num_points not in STENCILS:
        raise ValueError(
            f"Unsupported stencil size: {num_points}. Must be one of {list(STENCILS)}."
        )
    offsets = _central_offsets(num_points)
    n = offsets.size

    matrix = np.zeros((n, n), dtype=float)
    b = np.zeros(n, dtype=float)
    for k in range(n):
        matrix[k, :] = offsets**k / math.factorial(k)
    b[1] = 1.0

    coeffs = np.linalg.solve(matrix, b)
    # the centre coefficient is exactly zero for central stencils
    coeffs[n // 2] = 0.0
    return offsets, coeffs


class FiniteDifferenceJacobian:
    """Jacobian backend using central finite differences.

    Attributes:
        stepsize: Relative step size; the step along component ``j`` is
            ``stepsize * max(1, |x_j|)``.
        num_points: Number of points in the stencil.
    """

    def __init__(self, stepsize: float = 1e-3, num_points: int = 5) -> None:
        """Initialises the backend.

        Args:
            stepsize: Relative step size. Must be positive.
            num_points: Stencil size, one of 3, 5, 7 or 9.

        Raises:
            ValueError: If ``stepsize`` is not positive or ``num_points`` is
                not supported.
        """
        if not stepsize > 0:
            raise ValueError(f"stepsize must be positive; got {stepsize}.")
        if stepsize < 1e-8:
            ivpkit_logger.warning(
                "FiniteDifferenceJacobian with stepsize %g: round-off error "
                "is likely to dominate the truncation error.",
                stepsize,
            )
        self.stepsize = float(stepsize)
        self.num_points = int(num_points)
        self._offsets, self._coeffs = first_derivative_coefficients(self.num_points)

    def __repr__(self) -> str:
        return f"FiniteDifferenceJacobian(stepsize={self.stepsize}, num_points={self.num_points})"

    def _columns(
        self,
        evaluate: Callable[[np.ndarray], np.ndarray],
        x: np.ndarray,
        m: int,
    ) -> np.ndarray:
        """Assembles the Jacobian column by column from stencil evaluations."""
        n = x.size
        jac = np.zeros((m, n), dtype=np.result_type(x.dtype, np.float64))
        for j in range(n):
            h = self.stepsize * max(1.0, abs(x[j]))
            for k, c in zip(self._offsets, self._coeffs):
                if c == 0.0:
                    continue
                xp = x.copy()
                xp[j] += k * h
                jac[:, j] += c * evaluate(xp)
            jac[:, j] /= h
        return jac

    def jacobian(self, function: Callable[[Any], Any], x: Any) -> np.ndarray:
        """Calculates the Jacobian of ``function`` at ``x``.

        Args:
            function: Function mapping a state vector to an output vector.
            x: Point at which to evaluate the Jacobian.

        Returns:
            A Jacobian matrix as a 2D numpy.ndarray with shape (m, n).

        Raises:
            EvaluationError: If the Jacobian is not finite.
        """
        x_arr = np.array(x, dtype=inexact_dtype(x)).reshape(-1)
        m = np.size(function(x_arr.copy()))

        def evaluate(xp):
            return np.asarray(function(xp)).reshape(-1)

        jac = self._columns(evaluate, x_arr, m)
        check_finite_jacobian(jac, where="jacobian")
        return jac

    def jacobian_into(self, out: np.ndarray, function: Callable[[Any], Any], x: Any) -> None:
        """Writes the Jacobian of ``function`` at ``x`` into ``out``.

        Raises:
            EvaluationError: If ``out`` has the wrong shape or the Jacobian is
                not finite.
        """
        jac = self.jacobian(function, x)
        check_buffer_shape(out, jac.shape, where="jacobian_into")
        out[...] = jac

    def mutating_jacobian(
        self, function: Callable[[Any, Any], Any], y: np.ndarray, x: Any
    ) -> np.ndarray:
        """Calculates the Jacobian of a function that writes its output into ``y``.

        ``y`` is reused for every stencil evaluation and holds ``function(x)``
        on return.

        Args:
            function: Function ``function(y, x)`` writing its result into ``y``.
            y: Output buffer; its shape fixes the output dimension.
            x: Point at which to evaluate the Jacobian.

        Returns:
            A Jacobian matrix as a 2D numpy.ndarray with shape (y.size, x.size).

        Raises:
            EvaluationError: If the Jacobian is not finite.
        """
        x_arr = np.array(x, dtype=inexact_dtype(x)).reshape(-1)

        def evaluate(xp):
            function(y, xp)
            return np.asarray(y).reshape(-1)

        jac = self._columns(evaluate, x_arr, np.size(y))
        function(y, x_arr.copy())
        check_finite_jacobian(jac, where="mutating_jacobian")
        return jac

    def mutating_jacobian_into(
        self,
        out: np.ndarray,
        function: Callable[[Any, Any], Any],
        y: np.ndarray,
        x: Any,
    ) -> None:
        """Writes the Jacobian of a mutating ``function`` into ``out``.

        ``y`` must not share memory with ``out``.

        Raises:
            EvaluationError: If ``out`` has the wrong shape or aliases ``y``,
                or the Jacobian is not finite.
        """
        check_no_alias(out, y, where="mutating_jacobian_into")
        check_buffer_shape(out, (np.size(y), np.size(x)), where="mutating_jacobian_into")
        out[...] = self.mutating_jacobian(function, y, x)
