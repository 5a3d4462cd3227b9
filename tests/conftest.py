"""Shared fixtures for apengine tests."""

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest


@pytest.fixture
def two_groups():
    """Two well-separated groups of three 2D points each."""
    return np.array(
        [
            [0.0, 0.0],
            [0.0, 1.0],
            [1.0, 0.0],
            [10.0, 10.0],
            [10.0, 11.0],
            [11.0, 10.0],
        ]
    )


@pytest.fixture
def flat_similarity():
    """3x3 precomputed matrix with identical off-diagonal similarities."""
    sim = np.full((3, 3), 0.5)
    np.fill_diagonal(sim, 0.0)
    return sim


@pytest.fixture
def random_vectors():
    return np.random.default_rng(42).normal(size=(30, 4))
