"""
Neuroevolution module for evolving reflex-agent networks.

Implements a strictly generational genetic algorithm over fixed-shape
networks.

This module provides:
- Mutation operator (per-node scale-and-shift of biases and weights)
- Blend crossover for combining same-shaped networks
- Elite selection and partner choice
- Population management with a dead-pool and generation statistics

Example usage:
    from birdbrain.evolution import Population, EvolutionConfig

    # Configure evolution
    config = EvolutionConfig(
        population_size=100,
        shape=(2, 3, 1),
        elite_fraction=0.1,
        offspring_fraction=0.4,
        seed=42,
    )

    # Create population
    pop = Population(config)
    pop.initialize_random()

    # Run evolution with a fitness function
    def fitness(network):
        network.process([0.5, 0.5])
        return network.output()[0]

    for stats in pop.evolve(fitness, generations=50):
        print(f"Gen {stats.generation}: best={stats.best_fitness:.3f}")
"""
from .mutations import Mutator
from .crossover import (
    BlendCrossover,
    blend_networks,
)
from .selection import (
    Agent,
    EliteSelection,
    PartnerSelection,
    rank_agents,
)
from .population import (
    EvolutionConfig,
    GenerationStats,
    Population,
)

__all__ = [
    # Mutations
    'Mutator',

    # Crossover
    'BlendCrossover',
    'blend_networks',

    # Selection
    'Agent',
    'EliteSelection',
    'PartnerSelection',
    'rank_agents',

    # Population management
    'EvolutionConfig',
    'GenerationStats',
    'Population',
]
