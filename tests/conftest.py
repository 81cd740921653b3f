"""Pytest configuration file with shared fixtures for ivpkit tests."""

import os

import pytest


@pytest.fixture(autouse=True, scope="session")
def _limit_blas_threads():
    os.environ.setdefault("OMP_NUM_THREADS", "1")
    os.environ.setdefault("OPENBLAS_NUM_THREADS", "1")
    os.environ.setdefault("MKL_NUM_THREADS", "1")


@pytest.fixture(params=["forward", "finite"])
def backend(request):
    """Name of each built-in Jacobian backend."""
    return request.param


@pytest.fixture
def rng():
    """Random number generator with fixed seed (42) for reproducibility."""
    import numpy as np

    return np.random.default_rng(seed=42)
