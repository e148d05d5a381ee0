"""
Pytest fixtures for birdbrain tests.

Provides fixtures for:
- Network builders and hand-made networks
- Evolution configurations
- World configurations
"""
import pytest

from birdbrain.evolution import EvolutionConfig
from birdbrain.networks import NetworkBuilder
from birdbrain.simulation import WorldConfig


@pytest.fixture
def builder():
    """Return a NetworkBuilder with default input handling."""
    return NetworkBuilder()


@pytest.fixture
def hand_parameters():
    """
    Explicit parameters for a [2, 2, 1] network.

    Values are chosen so every edge term is distinct.
    """
    return {
        'shape': [2, 2, 1],
        'layers': [
            {'biases': [0.1, -0.2], 'weights': [[0.5, -1.0], [2.0, 0.25]]},
            {'biases': [0.3, 0.4], 'weights': [[1.0], [-0.5]]},
            {'biases': [0.0], 'weights': []},
        ],
    }


@pytest.fixture
def small_config(small_shape):
    """Four agents of shape [2, 3, 1]: 1 elite, 2 offspring, 1 fresh."""
    return EvolutionConfig(population_size=4, shape=small_shape, seed=7)


@pytest.fixture
def flappy_config():
    """A small flappy population."""
    return EvolutionConfig(population_size=20, seed=11)


@pytest.fixture
def world_config():
    """A flappy world with a short tick cap."""
    return WorldConfig(max_ticks=120, seed=5)
