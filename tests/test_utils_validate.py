"""Unit tests for ivpkit.utils.validate."""

from __future__ import annotations

import numpy as np
import pytest

from ivpkit.exceptions import EvaluationError
from ivpkit.utils.validate import (
    as_state_vector,
    as_time_span,
    check_buffer_shape,
    check_finite_jacobian,
    check_no_alias,
    inexact_dtype,
)


def test_inexact_dtype():
    """Tests promotion of integer dtypes and preservation of inexact ones."""
    assert inexact_dtype([1, 2]) == np.float64
    assert inexact_dtype(np.array([1.0], dtype=np.float32)) == np.float64
    assert inexact_dtype([1j]) == np.complex128


def test_as_state_vector_wraps_scalars_and_copies():
    """Tests that scalars become length-1 vectors and arrays are copied."""
    assert as_state_vector(2.5).shape == (1,)
    src = np.array([1.0, 2.0])
    out = as_state_vector(src)
    assert not np.shares_memory(out, src)


def test_as_time_span_forms():
    """Tests both accepted time argument forms."""
    assert as_time_span(((0, 1),)) == (0.0, 1.0)
    assert as_time_span((0, 1)) == (0.0, 1.0)
    assert as_time_span((np.array([2.0, 3.0]),)) == (2.0, 3.0)


def test_as_time_span_rejects_non_scalar_endpoints():
    """Tests that endpoints must be scalars."""
    with pytest.raises(ValueError):
        as_time_span(((0.0, [1.0]),))


def test_check_buffer_shape():
    """Tests the shape check."""
    check_buffer_shape(np.zeros((2, 2)), (2, 2), where="test")
    with pytest.raises(EvaluationError, match="test"):
        check_buffer_shape(np.zeros(3), (2,), where="test")


def test_check_no_alias():
    """Tests the aliasing check."""
    check_no_alias(np.zeros((2, 2)), np.zeros(2), where="test")
    block = np.zeros((2, 3))
    with pytest.raises(EvaluationError):
        check_no_alias(block[:, :2], block[:, 2], where="test")


def test_check_finite_jacobian():
    """Tests the finiteness check."""
    check_finite_jacobian(np.eye(2), where="test")
    with pytest.raises(EvaluationError):
        check_finite_jacobian(np.array([[np.inf]]), where="test")
