"""Catalog of classic initial value problems.

Each factory writes the right-hand side in the in-place form ``f(du, u, t)``
and wraps it in an :class:`~ivpkit.problem.InitialValueProblem`. The
right-hand sides use ``jax.numpy`` for transcendental functions so that they
work with both the ``"forward"`` and the ``"finite"`` Jacobian backends.

>>> from ivpkit.catalog import lorenz
>>> problem = lorenz()
>>> problem.derivative.functional_derivative(problem.initial_state, 0.0)
array([10.        , 81.        , 43.33333333])
"""

from __future__ import annotations

import math

import jax.numpy as jnp

from ivpkit.jacobian.registry import JacobianBackend
from ivpkit.problem import InitialValueProblem
from ivpkit.utils.types import StateLike, TimeSpan

__all__ = [
    "dahlquist",
    "logistic",
    "riccati",
    "simple_pendulum",
    "van_der_pol",
    "lorenz",
    "rossler",
]

Backend = str | JacobianBackend | None


def dahlquist(
    u0: StateLike = 1.0,
    tspan: TimeSpan = (0.0, 1.0),
    lam: float = 1.0,
    *,
    backend: Backend = None,
) -> InitialValueProblem:
    """Returns the Dahlquist test equation ``du/dt = lam * u``."""

    def f(du, u, t):
        du[:] = lam * u

    return InitialValueProblem(f, u0, tspan, backend=backend)


def logistic(
    u0: StateLike = 0.5,
    tspan: TimeSpan = (0.0, 5.0),
    lam: float = 1.0,
    *,
    backend: Backend = None,
) -> InitialValueProblem:
    """Returns the logistic equation ``du/dt = lam * u * (1 - u)``."""

    def f(du, u, t):
        du[:] = lam * u * (1.0 - u)

    return InitialValueProblem(f, u0, tspan, backend=backend)


def riccati(
    u0: StateLike = 0.0,
    tspan: TimeSpan = (0.0, 5.0),
    *,
    backend: Backend = None,
) -> InitialValueProblem:
    """Returns the Riccati equation ``du/dt = u - t * u**2 + t``."""

    def f(du, u, t):
        du[:] = u - t * u**2 + t

    return InitialValueProblem(f, u0, tspan, backend=backend)


def simple_pendulum(
    u0: StateLike = (0.0, math.pi / 2),
    tspan: TimeSpan = (0.0, 2 * math.pi),
    g: float = 1.0,
    length: float = 1.0,
    *,
    backend: Backend = None,
) -> InitialValueProblem:
    """Returns the simple pendulum with state ``(angle, angular velocity)``.

    Args:
        u0: Initial angle and angular velocity.
        tspan: Time domain.
        g: Gravitational acceleration.
        length: Pendulum length.
        backend: Jacobian backend.
    """

    def f(du, u, t):
        du[0] = u[1]
        du[1] = -g / length * jnp.sin(u[0])

    return InitialValueProblem(f, u0, tspan, backend=backend)


def van_der_pol(
    u0: StateLike = (1.0, 0.0),
    tspan: TimeSpan = (0.0, 5.0),
    mu: float = 1.0,
    *,
    backend: Backend = None,
) -> InitialValueProblem:
    """Returns the Van der Pol oscillator in first-order form.

    ``x'' - mu (1 - x^2) x' + x = 0`` with state ``(x, x')``.
    """

    def f(du, u, t):
        du[0] = u[1]
        du[1] = mu * (1.0 - u[0] ** 2) * u[1] - u[0]

    return InitialValueProblem(f, u0, tspan, backend=backend)


def lorenz(
    u0: StateLike = (2.0, 3.0, -14.0),
    tspan: TimeSpan = (0.0, 10.0),
    sigma: float = 10.0,
    beta: float = 8 / 3,
    rho: float = 28.0,
    *,
    backend: Backend = None,
) -> InitialValueProblem:
    """Returns the Lorenz system."""

    def f(du, u, t):
        du[0] = sigma * (u[1] - u[0])
        du[1] = u[0] * (rho - u[2]) - u[1]
        du[2] = u[0] * u[1] - beta * u[2]

    return InitialValueProblem(f, u0, tspan, backend=backend)


def rossler(
    u0: StateLike = (2.0, 0.0, 0.0),
    tspan: TimeSpan = (0.0, 10.0),
    a: float = 0.2,
    b: float = 0.2,
    c: float = 5.7,
    *,
    backend: Backend = None,
) -> InitialValueProblem:
    """Returns the Rössler system."""

    def f(du, u, t):
        du[0] = -u[1] - u[2]
        du[1] = u[0] + a * u[1]
        du[2] = b + u[2] * (u[0] - c)

    return InitialValueProblem(f, u0, tspan, backend=backend)
