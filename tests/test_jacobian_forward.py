"""Unit tests for ivpkit.jacobian.forward."""

from __future__ import annotations

import jax.numpy as jnp
import numpy as np
import pytest

from ivpkit.exceptions import EvaluationError
from ivpkit.jacobian.forward import ForwardModeJacobian


def jac_func(x):
    """Function with known Jacobian: f(x) = [x0 + x1, x0 * x1, sin(x1)]."""
    return jnp.array([x[0] + x[1], x[0] * x[1], jnp.sin(x[1])])


def jac_func_inplace(y, x):
    """Mutating version of jac_func."""
    y[0] = x[0] + x[1]
    y[1] = x[0] * x[1]
    y[2] = jnp.sin(x[1])


def jac_expected(x):
    """Closed-form Jacobian of jac_func."""
    return np.array([[1.0, 1.0], [x[1], x[0]], [0.0, np.cos(x[1])]])


def test_jacobian_simple():
    """Tests that jacobian computes a rectangular Jacobian correctly."""
    x = np.array([2.0, 3.0])
    jac = ForwardModeJacobian().jacobian(jac_func, x)
    assert jac.shape == (3, 2)
    assert jac.dtype == np.float64
    assert np.allclose(jac, jac_expected(x), atol=1e-15, rtol=0.0)


def test_jacobian_is_exact_to_machine_precision():
    """Tests that 64-bit autodiff recovers coefficients without rounding to float32."""
    jac = ForwardModeJacobian().jacobian(lambda x: (1.0 / 3.0) * x, np.array([1.0]))
    assert jac[0, 0] == 1.0 / 3.0


def test_jacobian_into_writes_buffer():
    """Tests that jacobian_into fills the caller's matrix."""
    x = np.array([0.5, -1.0])
    out = np.zeros((3, 2))
    ForwardModeJacobian().jacobian_into(out, jac_func, x)
    assert np.allclose(out, jac_expected(x))


def test_mutating_jacobian_writes_value_into_buffer():
    """Tests that mutating_jacobian returns J and leaves f(x) in y."""
    x = np.array([2.0, 3.0])
    y = np.zeros(3)
    jac = ForwardModeJacobian().mutating_jacobian(jac_func_inplace, y, x)
    assert np.allclose(jac, jac_expected(x))
    assert np.allclose(y, [5.0, 6.0, np.sin(3.0)])


def test_mutating_jacobian_supports_slice_assignment():
    """Tests that whole-buffer writes work while tracing."""

    def f(y, x):
        y[:] = x**2

    jac = ForwardModeJacobian().mutating_jacobian(f, np.zeros(2), np.array([1.0, -2.0]))
    assert np.allclose(jac, np.diag([2.0, -4.0]))


def test_mutating_jacobian_into_checks_shape_and_alias():
    """Tests the output buffer checks of mutating_jacobian_into."""
    backend = ForwardModeJacobian()
    x = np.array([2.0, 3.0])
    with pytest.raises(EvaluationError):
        backend.mutating_jacobian_into(np.zeros((2, 2)), jac_func_inplace, np.zeros(3), x)

    block = np.zeros((3, 3))
    with pytest.raises(EvaluationError, match="alias"):
        backend.mutating_jacobian_into(block[:, :2], jac_func_inplace, block[:, 2], x)


def test_plain_numpy_function_raises_evaluation_error():
    """Tests that functions JAX cannot trace raise EvaluationError."""
    with pytest.raises(EvaluationError, match="JAX-differentiable"):
        ForwardModeJacobian().jacobian(lambda x: np.array([np.sin(x[0])]), np.array([1.0]))


def test_branching_on_state_raises_evaluation_error():
    """Tests that Python control flow on traced values raises EvaluationError."""

    def f(y, x):
        y[0] = x[0] if x[0] > 0 else -x[0]

    with pytest.raises(EvaluationError):
        ForwardModeJacobian().mutating_jacobian(f, np.zeros(1), np.array([1.0]))


def test_integer_state_is_promoted_to_float():
    """Tests that integer states are differentiated in float64."""
    jac = ForwardModeJacobian().jacobian(lambda x: 2.0 * x, np.array([1, 2]))
    assert jac.dtype == np.float64
    assert np.allclose(jac, 2.0 * np.eye(2))


def test_complex_state_raises_evaluation_error():
    """Tests that complex states are rejected before tracing."""
    backend = ForwardModeJacobian()
    x = np.array([1.0 + 1.0j])
    with pytest.raises(EvaluationError, match="real state"):
        backend.jacobian(lambda z: 2.0 * z, x)

    def f(y, z):
        y[:] = 2.0 * z

    with pytest.raises(EvaluationError, match="real state"):
        backend.mutating_jacobian(f, np.zeros(1, dtype=complex), x)
