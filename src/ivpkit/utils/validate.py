"""Validation utilities for ivpkit."""

from __future__ import annotations

from typing import Any, Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ivpkit.exceptions import EvaluationError
from ivpkit.utils.types import TimeSpan

__all__ = [
    "as_state_vector",
    "as_time_span",
    "inexact_dtype",
    "check_buffer_shape",
    "check_no_alias",
    "check_finite_jacobian",
]


def inexact_dtype(x: ArrayLike) -> np.dtype:
    """Returns the dtype of ``x`` promoted to an inexact (float or complex) type."""
    return np.result_type(np.asarray(x).dtype, np.float64)


def as_state_vector(u0: ArrayLike) -> NDArray[np.inexact]:
    """Validates an initial condition and converts it to an owned 1D array.

    Scalars are wrapped into a length-1 vector. Integer input is promoted to
    float, while float and complex dtypes are preserved. The returned array
    never shares memory with ``u0``.

    Args:
        u0: Scalar or 1D array-like initial state.

    Returns:
        A fresh 1D numpy array.

    Raises:
        ValueError: If ``u0`` has more than one dimension or is empty.
    """
    arr = np.array(u0, dtype=inexact_dtype(u0), copy=True)
    if arr.ndim == 0:
        arr = arr.reshape(1)
    if arr.ndim != 1:
        raise ValueError(
            f"initial_state must be a scalar or a 1D array; got shape {arr.shape}."
        )
    if arr.size == 0:
        raise ValueError("initial_state must be non-empty.")
    return arr


def as_time_span(time: Sequence[Any]) -> TimeSpan:
    """Normalizes a time domain to a ``(t0, tN)`` tuple of floats.

    Accepts either a single pair ``((t0, tN),)`` or two scalars ``(t0, tN)``,
    which is how the positional time arguments of a problem arrive.
    No ordering between ``t0`` and ``tN`` is enforced.

    Args:
        time: Positional time arguments.

    Returns:
        The time span as a tuple of two floats.

    Raises:
        ValueError: If the arguments do not describe exactly two scalar endpoints.
    """
    if len(time) == 1:
        (span,) = time
        if np.ndim(span) != 1 or len(span) != 2:
            raise ValueError(f"time_span must be a pair (t0, tN); got {span!r}.")
        t0, tn = span
    elif len(time) == 2:
        t0, tn = time
    else:
        raise ValueError(
            "expected a time span (t0, tN) or two endpoints t0, tN; "
            f"got {len(time)} time arguments."
        )
    if np.ndim(t0) != 0 or np.ndim(tn) != 0:
        raise ValueError(f"time endpoints must be scalars; got {t0!r} and {tn!r}.")
    return float(t0), float(tn)


def check_buffer_shape(buffer: Any, shape: tuple[int, ...], *, where: str) -> None:
    """Raises if an output buffer does not have the expected shape.

    Args:
        buffer: The caller-supplied buffer.
        shape: Expected shape.
        where: Context string for error messages.

    Raises:
        EvaluationError: If the shapes differ.
    """
    got = tuple(np.shape(buffer))
    if got != tuple(shape):
        raise EvaluationError(f"{where}: expected buffer of shape {tuple(shape)}; got {got}.")


def check_no_alias(out: np.ndarray, scratch: np.ndarray, *, where: str) -> None:
    """Raises if the scratch buffer shares memory with the Jacobian output."""
    if np.may_share_memory(out, scratch):
        raise EvaluationError(
            f"{where}: the scratch derivative buffer must not alias the Jacobian output."
        )


def check_finite_jacobian(jac: np.ndarray, *, where: str) -> None:
    """Raises if a Jacobian contains non-finite entries.

    Non-finite entries mean that the function is not differentiable at the
    evaluation point (or overflowed there).
    """
    if not np.isfinite(jac).all():
        raise EvaluationError(f"{where}: non-finite values in the Jacobian.")
