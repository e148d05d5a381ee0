"""
Pytest configuration and shared fixtures for the birdbrain project.

This module provides fixtures for:
- Seeded random sources
- Common network shapes
"""
import pytest

from birdbrain.rng import make_generator


@pytest.fixture
def seed():
    """Fixed seed shared by tests that need reproducible draws."""
    return 1234


@pytest.fixture
def generator(seed):
    """Return a seeded torch.Generator."""
    return make_generator(seed)


@pytest.fixture
def small_shape():
    """The small shape used by the end-to-end scenarios."""
    return (2, 3, 1)
