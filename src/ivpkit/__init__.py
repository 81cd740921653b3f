"""Canonical initial value problems for ODE integrators.

Importing ivpkit enables JAX 64-bit mode (``jax_enable_x64``) for the whole
process, so forward-mode Jacobians are computed in float64. Code running in
the same process that relies on float32 defaults for JAX should request
``dtype=jnp.float32`` explicitly.
"""

from importlib.metadata import PackageNotFoundError, version

from ivpkit.conventions import Convention, detect_convention
from ivpkit.derivative_bundle import DerivativeBundle, as_derivative_bundle
from ivpkit.exceptions import ConstructionError, EvaluationError
from ivpkit.jacobian import (
    FiniteDifferenceJacobian,
    ForwardModeJacobian,
    JacobianBackend,
    available_backends,
    register_backend,
    resolve_backend,
)
from ivpkit.problem import IVP, InitialValueProblem

try:
    __version__ = version("ivpkit")
except PackageNotFoundError:
    pass

__all__ = [
    "ConstructionError",
    "Convention",
    "DerivativeBundle",
    "EvaluationError",
    "FiniteDifferenceJacobian",
    "ForwardModeJacobian",
    "IVP",
    "InitialValueProblem",
    "JacobianBackend",
    "as_derivative_bundle",
    "available_backends",
    "detect_convention",
    "register_backend",
    "resolve_backend",
]
