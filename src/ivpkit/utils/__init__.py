"""Utility functions for the ivpkit package."""

from .validate import (
    as_state_vector,
    as_time_span,
    check_buffer_shape,
)

__all__ = [
    "as_state_vector",
    "as_time_span",
    "check_buffer_shape",
]
