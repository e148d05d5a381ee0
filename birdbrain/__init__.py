"""
Neuroevolution of small feedforward networks for reflex agents.

Submodules:
- networks: layered sigmoid networks, builders and preset shapes
- evolution: mutation, blend crossover, selection and the generational cycle
- simulation: a headless flappy-bird world that drives a population
- visualization: fitness plots, weight histograms and text summaries

Example usage:
    from birdbrain import EvolutionConfig, Population

    def fitness(network):
        network.process([1.0, 0.0, 1.0])
        return sum(network.output())

    pop = Population(EvolutionConfig(population_size=100, shape=(3, 10, 3), seed=7))
    pop.evolve(fitness, generations=20)
"""
from .exceptions import (
    BirdbrainError,
    ConfigurationError,
    InputSizeError,
    InvalidShapeError,
    PopulationNotExhaustedError,
    ShapeMismatchError,
)
from .networks import Network, NetworkBuilder
from .evolution import (
    Agent,
    BlendCrossover,
    EvolutionConfig,
    GenerationStats,
    Mutator,
    Population,
)

__version__ = '0.1.0'

__all__ = [
    # Errors
    'BirdbrainError',
    'ConfigurationError',
    'InputSizeError',
    'InvalidShapeError',
    'PopulationNotExhaustedError',
    'ShapeMismatchError',

    # Networks
    'Network',
    'NetworkBuilder',

    # Evolution
    'Agent',
    'BlendCrossover',
    'EvolutionConfig',
    'GenerationStats',
    'Mutator',
    'Population',
]
