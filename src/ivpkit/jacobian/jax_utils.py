"""Utilities for JAX-based forward-mode Jacobians in ivpkit.

Importing this module switches JAX to 64-bit floats (``jax_enable_x64``),
so that autodiff Jacobians agree with numpy evaluations to machine precision.
"""

from __future__ import annotations

from typing import Any

import jax
import jax.numpy as jnp
import numpy as np

from ivpkit.utils.validate import inexact_dtype

jax.config.update("jax_enable_x64", True)

__all__ = [
    "TRACE_ERRORS",
    "TraceBuffer",
    "to_jax_state",
    "to_jax_output",
]

#: JAX errors signalling that a function cannot be traced (e.g. it calls
#: plain numpy or branches on traced values).
TRACE_ERRORS = (
    jax.errors.ConcretizationTypeError,
    jax.errors.TracerArrayConversionError,
    jax.errors.TracerIntegerConversionError,
)


class TraceBuffer:
    """Mutable stand-in for an output buffer while a function is being traced.

    JAX arrays are immutable, so an in-place right-hand side ``f(du, u, t)``
    cannot write into one directly. A ``TraceBuffer`` looks enough like a 1D
    numpy buffer for the usual ``du[i] = ...``, ``du[:] = ...`` and ``du *= ...``
    statements, and records each write as a functional JAX update.

    Attributes:
        data: The current contents as a JAX array.
    """

    __slots__ = ("data",)

    def __init__(self, data: jnp.ndarray):
        """Initializes the buffer with its starting contents."""
        self.data = data

    @property
    def shape(self) -> tuple[int, ...]:
        return self.data.shape

    @property
    def dtype(self):
        return self.data.dtype

    @property
    def ndim(self) -> int:
        return self.data.ndim

    @property
    def size(self) -> int:
        return self.data.size

    def __len__(self) -> int:
        return self.data.shape[0]

    def __iter__(self):
        return iter(self.data)

    def __getitem__(self, index):
        return self.data[index]

    def __setitem__(self, index, value) -> None:
        self.data = self.data.at[index].set(value)

    def fill(self, value) -> None:
        """Sets every entry to ``value``, like :meth:`numpy.ndarray.fill`."""
        self.data = jnp.full_like(self.data, value)

    def __iadd__(self, value) -> TraceBuffer:
        self.data = self.data + value
        return self

    def __isub__(self, value) -> TraceBuffer:
        self.data = self.data - value
        return self

    def __imul__(self, value) -> TraceBuffer:
        self.data = self.data * value
        return self

    def __itruediv__(self, value) -> TraceBuffer:
        self.data = self.data / value
        return self

    def __repr__(self) -> str:
        return f"TraceBuffer(shape={self.shape}, dtype={self.dtype})"


def to_jax_state(x: Any) -> jnp.ndarray:
    """Converts a state vector to a JAX array with an inexact dtype.

    Args:
        x: Array-like state.

    Returns:
        JAX array with the same shape as ``x``.
    """
    return jnp.asarray(np.asarray(x, dtype=inexact_dtype(x)))


def to_jax_output(y: Any) -> jnp.ndarray:
    """Returns a function output as a JAX array with at least one dimension."""
    return jnp.atleast_1d(jnp.asarray(y))
