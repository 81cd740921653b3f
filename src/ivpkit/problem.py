"""Provides the InitialValueProblem class.

An initial value problem is the triple of a right-hand side (normalized to a
:class:`~ivpkit.derivative_bundle.DerivativeBundle`), an initial state and a
time span. It is what integrators consume.

Typical usage examples:

>>> import numpy as np
>>> from ivpkit.problem import IVP
>>>
>>> def f(u, t):
...     return -u
>>>
>>> problem = IVP(f, 1.0, (0.0, 2.0))
>>> problem.initial_state
array([1.])
>>> problem.time_span
(0.0, 2.0)
>>> same = IVP(f, [1.0, 0.5], 0.0, 2.0)
>>> same.dimension
2
"""

from __future__ import annotations

from typing import Any, Callable

import numpy as np
from numpy.typing import NDArray

from ivpkit.conventions import Convention
from ivpkit.derivative_bundle import DerivativeBundle, as_derivative_bundle
from ivpkit.jacobian.registry import JacobianBackend
from ivpkit.utils.types import StateLike, TimeSpan
from ivpkit.utils.validate import as_state_vector, as_time_span

__all__ = [
    "InitialValueProblem",
    "IVP",
]


class InitialValueProblem:
    """An ODE initial value problem ``du/dt = f(u, t)``, ``u(t0) = u0``.

    The problem owns its initial state and time span. The derivative bundle
    is immutable and may be shared with other problems, e.g. through
    :meth:`copy`.

    Attributes:
        derivative: The normalized right-hand side.
        initial_state: The state at ``t0`` as a 1D numpy array. Scalars are
            stored as length-1 vectors.
        time_span: The time domain ``(t0, tN)``. ``t0 < tN`` is not required.
    """

    def __init__(
        self,
        derivative: DerivativeBundle | Callable[..., Any],
        initial_state: StateLike,
        *time: Any,
        convention: Convention | str | None = None,
        backend: str | JacobianBackend | None = None,
    ):
        """Initializes the problem.

        Args:
            derivative: A :class:`DerivativeBundle`, or a raw right-hand side
                ``f(u, t)`` / ``f(du, u, t)`` that is normalized into one.
            initial_state: Scalar or 1D array-like initial condition.
            *time: Either the time span ``(t0, tN)`` or the two endpoints
                ``t0, tN``.
            convention: Calling convention of a raw ``derivative``; detected
                from its signature when None.
            backend: Jacobian backend for a raw ``derivative``.

        Raises:
            ConstructionError: If the calling convention of a raw
                ``derivative`` cannot be determined.
            ValueError: If the initial state or time arguments are malformed.
        """
        self.derivative = as_derivative_bundle(
            derivative, convention=convention, backend=backend
        )
        self.initial_state = initial_state
        self._time_span = as_time_span(time)

    @property
    def derivative(self) -> DerivativeBundle:
        return self._derivative

    @derivative.setter
    def derivative(self, value: DerivativeBundle) -> None:
        if not isinstance(value, DerivativeBundle):
            raise TypeError(
                f"derivative must be a DerivativeBundle; got {type(value).__name__}."
            )
        self._derivative = value

    @property
    def initial_state(self) -> NDArray[np.inexact]:
        return self._initial_state

    @initial_state.setter
    def initial_state(self, value: StateLike) -> None:
        self._initial_state = as_state_vector(value)

    @property
    def time_span(self) -> TimeSpan:
        return self._time_span

    @time_span.setter
    def time_span(self, value: Any) -> None:
        self._time_span = as_time_span((value,))

    @property
    def dimension(self) -> int:
        """Number of state components."""
        return self._initial_state.size

    def copy(self) -> InitialValueProblem:
        """Returns a copy sharing the derivative bundle but owning its own state.

        Mutating the copy's ``initial_state`` never affects this problem.
        """
        return type(self)(self.derivative, self.initial_state, self.time_span)

    def __copy__(self) -> InitialValueProblem:
        return self.copy()

    def __repr__(self) -> str:
        return (
            f"InitialValueProblem(dimension={self.dimension}, "
            f"initial_state={self.initial_state!r}, time_span={self.time_span!r})"
        )


IVP = InitialValueProblem
