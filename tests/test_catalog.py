"""Unit tests for ivpkit.catalog."""

from __future__ import annotations

import numpy as np
import pytest

from ivpkit import catalog
from ivpkit.problem import InitialValueProblem


def lorenz_jacobian(u, sigma=10.0, beta=8 / 3, rho=28.0):
    """Closed-form Jacobian of the Lorenz system."""
    x, y, z = u
    return np.array([[-sigma, sigma, 0.0], [rho - z, -1.0, -x], [y, x, -beta]])


def rossler_jacobian(u, a=0.2, c=5.7):
    """Closed-form Jacobian of the Rössler system."""
    x, _, z = u
    return np.array([[0.0, -1.0, -1.0], [1.0, a, 0.0], [z, 0.0, x - c]])


def van_der_pol_jacobian(u, mu=1.0):
    """Closed-form Jacobian of the Van der Pol oscillator."""
    x, y = u
    return np.array([[0.0, 1.0], [-2.0 * mu * x * y - 1.0, mu * (1.0 - x**2)]])


def pendulum_jacobian(u, g=1.0, length=1.0):
    """Closed-form Jacobian of the simple pendulum."""
    return np.array([[0.0, 1.0], [-g / length * np.cos(u[0]), 0.0]])


def both_jacobians(problem, u, t):
    """Evaluates the functional and in-place Jacobian forms."""
    rhs = problem.derivative
    out = np.empty((u.size, u.size))
    rhs.inplace_jacobian(out, np.empty(u.size), u, t)
    return rhs.functional_jacobian(u, t), out


def test_dahlquist_scenario(backend):
    """Tests the Dahlquist example with its default parameters."""
    problem = catalog.dahlquist(u0=1.0, tspan=(0.0, 1.0), lam=1.0, backend=backend)
    assert isinstance(problem, InitialValueProblem)
    assert np.array_equal(problem.initial_state, [1.0])
    assert problem.time_span == (0.0, 1.0)
    assert np.allclose(problem.derivative.functional_derivative([1.0], 0.0), [1.0])
    for u, t in [(np.array([1.0]), 0.0), (np.array([-3.2]), 0.7), (np.array([12.0]), 5.0)]:
        for jac in both_jacobians(problem, u, t):
            assert jac.shape == (1, 1)
            assert jac[0, 0] == pytest.approx(1.0, abs=1e-9)


def test_logistic_jacobian(backend):
    """Tests the logistic equation against J = lam (1 - 2u)."""
    problem = catalog.logistic(lam=2.0, backend=backend)
    u = problem.initial_state
    assert np.allclose(problem.derivative.functional_derivative(u, 0.0), [0.5])
    for jac in both_jacobians(problem, np.array([0.3]), 0.0):
        assert jac[0, 0] == pytest.approx(2.0 * (1.0 - 0.6), abs=1e-8)


def test_riccati_jacobian(backend):
    """Tests the Riccati equation against J = 1 - 2 t u."""
    problem = catalog.riccati(backend=backend)
    assert np.allclose(problem.derivative.functional_derivative(np.array([0.0]), 2.0), [2.0])
    for jac in both_jacobians(problem, np.array([0.5]), 2.0):
        assert jac[0, 0] == pytest.approx(1.0 - 2.0 * 2.0 * 0.5, abs=1e-8)


def test_simple_pendulum_jacobian(backend):
    """Tests the simple pendulum against its closed-form Jacobian."""
    problem = catalog.simple_pendulum(backend=backend)
    u = problem.initial_state
    assert np.allclose(problem.derivative.functional_derivative(u, 0.0), [np.pi / 2, 0.0])
    state = np.array([0.4, -0.1])
    for jac in both_jacobians(problem, state, 0.0):
        assert np.allclose(jac, pendulum_jacobian(state), atol=1e-8)


def test_van_der_pol_jacobian(backend):
    """Tests the Van der Pol oscillator against its closed-form Jacobian."""
    problem = catalog.van_der_pol(mu=1.0, backend=backend)
    state = np.array([1.5, -0.5])
    for jac in both_jacobians(problem, state, 0.0):
        assert np.allclose(jac, van_der_pol_jacobian(state), atol=1e-8)


def test_lorenz_jacobian(backend):
    """Tests the Lorenz system at its initial state."""
    problem = catalog.lorenz(backend=backend)
    u = problem.initial_state
    assert np.allclose(
        problem.derivative.functional_derivative(u, 0.0), [10.0, 81.0, 6.0 + 14.0 * 8 / 3]
    )
    for jac in both_jacobians(problem, u, 0.0):
        assert np.allclose(jac, lorenz_jacobian(u), atol=1e-7)


def test_rossler_jacobian(backend):
    """Tests the Rössler system against its closed-form Jacobian."""
    problem = catalog.rossler(backend=backend)
    state = np.array([1.0, -2.0, 0.5])
    for jac in both_jacobians(problem, state, 0.0):
        assert np.allclose(jac, rossler_jacobian(state), atol=1e-8)


def test_backends_agree_on_catalog_problems():
    """Tests that forward-mode and finite-difference Jacobians agree."""
    for factory in (catalog.simple_pendulum, catalog.van_der_pol, catalog.lorenz, catalog.rossler):
        fwd = factory(backend="forward")
        fd = factory(backend="finite")
        u = fwd.initial_state + 0.1
        assert np.allclose(
            fwd.derivative.functional_jacobian(u, 0.5),
            fd.derivative.functional_jacobian(u, 0.5),
            atol=1e-7,
        )


def test_catalog_problems_are_copyable():
    """Tests that catalog problems copy with a shared bundle."""
    problem = catalog.lorenz()
    duplicate = problem.copy()
    duplicate.initial_state[:] = 0.0
    assert np.array_equal(problem.initial_state, [2.0, 3.0, -14.0])
    assert duplicate.derivative is problem.derivative
