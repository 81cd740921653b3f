"""Jacobian backends.

A backend computes Jacobians of state-to-derivative maps for
:class:`~ivpkit.derivative_bundle.DerivativeBundle`. Two are built in:
``"forward"`` (JAX forward-mode autodiff, the default) and ``"finite"``
(central finite differences).
"""

from .finite import FiniteDifferenceJacobian
from .forward import ForwardModeJacobian
from .registry import (
    DEFAULT_BACKEND,
    JacobianBackend,
    available_backends,
    register_backend,
    resolve_backend,
)

__all__ = [
    "DEFAULT_BACKEND",
    "FiniteDifferenceJacobian",
    "ForwardModeJacobian",
    "JacobianBackend",
    "available_backends",
    "register_backend",
    "resolve_backend",
]
