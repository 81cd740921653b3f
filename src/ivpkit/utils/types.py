"""Shared typing aliases for ivpkit."""

from __future__ import annotations

from typing import Any, Callable, Sequence, TypeAlias

import numpy as np
from numpy.typing import NDArray

StateLike: TypeAlias = float | complex | Sequence[float] | NDArray[np.number]
TimeSpan: TypeAlias = tuple[float, float]

FunctionalRHS: TypeAlias = Callable[[Any, float], Any]
MutatingRHS: TypeAlias = Callable[[Any, Any, float], Any]
