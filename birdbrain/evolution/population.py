"""
Population management for the generational cycle.

Handles the lifecycle of a population of networks:
- Initialization with random networks
- Death reports from the simulation (the dead-pool)
- Evolution (elite cut, blend crossover, mutation, fresh fill)
- Generation advancement and statistics

The population manager is the main interface for running evolutionary
experiments, either driven by a simulation or by a plain fitness
function through ``evolve``.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np
import torch

from ..exceptions import ConfigurationError, PopulationNotExhaustedError
from ..networks import Network, flappy_shape, validate_shape
from ..rng import make_generator
from .crossover import BlendCrossover
from .mutations import Mutator
from .selection import Agent, EliteSelection, PartnerSelection, rank_agents

logger = logging.getLogger(__name__)


@dataclass
class EvolutionConfig:
    """
    Configuration for an evolution experiment.

    The next generation is split into three groups whose sizes derive
    from the fractions below:

        elite     K = max(1, round(N * elite_fraction))
        offspring K * M, with M = round(N * offspring_fraction) // K
        fresh     N - K - K * M

    The defaults reproduce a 1000-agent run with 50 elite, 450 offspring
    (the elite replicated 9 times) and 500 fresh networks.
    """

    # Population
    population_size: int = 1000
    shape: Tuple[int, ...] = field(default_factory=flappy_shape)

    # Selection
    elite_fraction: float = 0.05
    offspring_fraction: float = 0.45
    partner_strategy: str = 'best'  # 'best', 'random'

    # Mutation
    mutation_threshold: int = 80

    # Forward propagation
    retain_unset_inputs: bool = False

    # Evolution limits
    max_generations: int = 100
    target_fitness: Optional[float] = None

    # Reproducibility
    seed: Optional[int] = None

    def __post_init__(self):
        try:
            self.shape = validate_shape(self.shape)
        except ValueError as e:
            raise ConfigurationError(str(e))

        if isinstance(self.population_size, bool) or not isinstance(self.population_size, int):
            raise ConfigurationError(
                f"population_size must be an integer, got {self.population_size!r}"
            )
        if self.population_size < 1:
            raise ConfigurationError(
                f"population_size must be at least 1, got {self.population_size}"
            )
        if not 0.0 <= self.elite_fraction <= 1.0:
            raise ConfigurationError(f"elite_fraction must be in [0, 1], got {self.elite_fraction}")
        if not 0.0 <= self.offspring_fraction <= 1.0:
            raise ConfigurationError(
                f"offspring_fraction must be in [0, 1], got {self.offspring_fraction}"
            )
        if self.elite_fraction + self.offspring_fraction > 1.0 + 1e-9:
            raise ConfigurationError(
                "elite_fraction + offspring_fraction must not exceed 1.0, got "
                f"{self.elite_fraction + self.offspring_fraction}"
            )
        if self.partner_strategy not in PartnerSelection.STRATEGIES:
            raise ConfigurationError(f"Unknown partner strategy: {self.partner_strategy}")
        if self.max_generations < 0:
            raise ConfigurationError(f"max_generations must be >= 0, got {self.max_generations}")

    @property
    def fresh_fraction(self) -> float:
        return 1.0 - self.elite_fraction - self.offspring_fraction

    @property
    def elite_count(self) -> int:
        """Number of elite agents kept each generation (K)."""
        return min(self.population_size, max(1, round(self.population_size * self.elite_fraction)))

    @property
    def offspring_multiplier(self) -> int:
        """How many times the elite is replicated into offspring (M)."""
        k = self.elite_count
        m = round(self.population_size * self.offspring_fraction) // k
        # Keep K + K*M within the population
        return max(0, min(m, (self.population_size - k) // k))

    @property
    def offspring_count(self) -> int:
        return self.elite_count * self.offspring_multiplier

    @property
    def fresh_count(self) -> int:
        return self.population_size - self.elite_count - self.offspring_count


@dataclass
class GenerationStats:
    """Statistics for a completed generation."""
    generation: int = 0
    best_fitness: float = 0.0
    avg_fitness: float = 0.0
    min_fitness: float = 0.0
    fitness_std: float = 0.0
    num_elite: int = 0
    num_offspring: int = 0
    num_fresh: int = 0
    num_mutated_nodes: int = 0


class Population:
    """
    Manages a population of evolving networks.

    Handles the complete generational cycle:
    1. Initialize N agents with random networks
    2. The simulation runs agents and reports each death with a fitness
    3. Once the dead-pool holds N agents, rank it
    4. Keep the elite, breed offspring from the elite (crossover + mutation)
    5. Fill the remainder with fresh random networks
    6. Repeat

    Example:
        config = EvolutionConfig(population_size=100, shape=(5, 10, 2), seed=1)
        pop = Population(config)
        pop.initialize_random()

        # Inside a simulation loop
        for agent in pop.live_agents():
            ...
            pop.report_death(agent, fitness)

        if pop.is_exhausted:
            stats = pop.evolve_generation()
    """

    def __init__(
        self,
        config: EvolutionConfig,
        generator: Optional[torch.Generator] = None,
    ):
        """
        Initialize the population manager.

        Args:
            config: Evolution configuration.
            generator: Random source for initialization and breeding.
                       If None, one is created from ``config.seed``.
        """
        self.config = config
        self.generator = generator if generator is not None else make_generator(config.seed)

        # Population state
        self.agents: List[Agent] = []
        self.dead_pool: List[Agent] = []
        self.generation = 0
        self.best_ever: Optional[Agent] = None

        # Evolution operators
        self.mutator = Mutator(threshold=config.mutation_threshold)
        self.crossover = BlendCrossover()
        self.elite_selection = EliteSelection(elite_count=config.elite_count)
        self.partner_selection = PartnerSelection(strategy=config.partner_strategy)

        # Statistics
        self.stats_history: List[GenerationStats] = []

    def _random_network(self) -> Network:
        return Network.random(
            self.config.shape,
            self.generator,
            retain_unset_inputs=self.config.retain_unset_inputs,
        )

    def initialize_random(self) -> None:
        """Fill the population with N randomly initialized networks."""
        self.agents = [
            Agent(
                network=self._random_network(),
                generation=0,
                id=f"gen0_ind_{i:04d}",
            )
            for i in range(self.config.population_size)
        ]
        self.dead_pool = []
        self.generation = 0

        logger.info(
            f"Initialized population of {len(self.agents)} networks with shape "
            f"{list(self.config.shape)}"
        )

    def live_agents(self) -> List[Agent]:
        """Agents still owned by the simulation."""
        return list(self.agents)

    @property
    def is_exhausted(self) -> bool:
        """True once every agent of the generation has reported its death."""
        return len(self.dead_pool) >= self.config.population_size

    def report_death(self, agent: Agent, fitness: Optional[float] = None) -> None:
        """
        Move an agent from the live population to the dead-pool.

        Args:
            agent: A live agent of the current generation.
            fitness: Final fitness. If None, ``agent.fitness`` is kept.

        Raises:
            ValueError: If the agent is not alive in this population, or
                        its fitness is NaN or infinite.
        """
        if not agent.alive or not any(a is agent for a in self.agents):
            raise ValueError(f"Agent {agent.id} is not alive in this population")

        value = agent.fitness if fitness is None else float(fitness)
        # rank_agents needs a total order
        if not math.isfinite(value):
            raise ValueError(f"Agent {agent.id} reported non-finite fitness {value}")
        agent.fitness = value

        agent.alive = False
        self.agents = [a for a in self.agents if a is not agent]
        self.dead_pool.append(agent)

        logger.debug(f"Agent {agent.id} died with fitness {agent.fitness:.3f}")

    def evaluate_all(
        self,
        fitness_function: Callable[[Network], float],
    ) -> None:
        """
        Score every live agent with a fitness function and retire it.

        Args:
            fitness_function: Maps a network to a scalar fitness.
        """
        for agent in list(self.agents):
            self.report_death(agent, fitness_function(agent.network))

    def evolve_generation(self) -> GenerationStats:
        """
        Breed the next generation from the dead-pool.

        Returns:
            Statistics for the generation that just ended.

        Raises:
            PopulationNotExhaustedError: If the dead-pool holds fewer than
                                         ``population_size`` agents.
        """
        size = self.config.population_size
        if len(self.dead_pool) < size:
            raise PopulationNotExhaustedError(
                f"Dead pool holds {len(self.dead_pool)} of {size} agents"
            )

        ranked = rank_agents(self.dead_pool)
        stats = self._compute_stats(ranked)
        self._update_best(ranked[0])

        next_generation = self.generation + 1
        new_agents: List[Agent] = []

        # Preserve elite
        elite = self.elite_selection.get_elite(ranked)
        for ind in elite:
            ind.network.reset()
            new_agents.append(Agent(
                network=ind.network,
                generation=next_generation,
                parent_ids=[ind.id],
                origin='elite',
                id=f"gen{next_generation}_elite_{len(new_agents):03d}",
            ))
        stats.num_elite = len(elite)

        # Replicate the elite into offspring
        for _ in range(self.config.offspring_multiplier):
            for parent in elite:
                partner = self.partner_selection.select(elite, self.generator)
                child = self.crossover.crossover(parent.network, partner.network)
                stats.num_mutated_nodes += self.mutator.mutate(child, self.generator)
                new_agents.append(Agent(
                    network=child,
                    generation=next_generation,
                    parent_ids=[parent.id, partner.id],
                    origin='offspring',
                    id=f"gen{next_generation}_child_{len(new_agents):04d}",
                ))
                stats.num_offspring += 1

        # Fill the remainder with fresh networks
        while len(new_agents) < size:
            new_agents.append(Agent(
                network=self._random_network(),
                generation=next_generation,
                id=f"gen{next_generation}_ind_{len(new_agents):04d}",
            ))
            stats.num_fresh += 1

        for agent in new_agents:
            agent.reset()

        # Replace population
        self.agents = new_agents
        self.dead_pool = []
        self.generation = next_generation
        self.stats_history.append(stats)

        logger.info(
            f"Generation {stats.generation}: best={stats.best_fitness:.3f} "
            f"avg={stats.avg_fitness:.3f} min={stats.min_fitness:.3f} | "
            f"next: {stats.num_elite} elite, {stats.num_offspring} offspring, "
            f"{stats.num_fresh} fresh"
        )

        return stats

    def evolve(
        self,
        fitness_function: Callable[[Network], float],
        generations: Optional[int] = None,
        progress_callback: Optional[Callable[[int, GenerationStats], None]] = None,
    ) -> List[GenerationStats]:
        """
        Run the full loop with a plain fitness function.

        Args:
            fitness_function: Maps a network to a scalar fitness.
            generations: Number of generations (uses config if None).
            progress_callback: Called with (generation, stats) each gen.

        Returns:
            List of generation statistics.
        """
        if generations is None:
            generations = self.config.max_generations
        if not self.agents and not self.dead_pool:
            self.initialize_random()

        all_stats = []
        for _ in range(generations):
            self.evaluate_all(fitness_function)
            stats = self.evolve_generation()
            all_stats.append(stats)

            if progress_callback:
                progress_callback(stats.generation, stats)

            target = self.config.target_fitness
            if target is not None and stats.best_fitness >= target:
                logger.info(f"Target fitness {target} reached at generation {stats.generation}")
                break

        return all_stats

    def get_best(self) -> Agent:
        """Get the best agent among the current live agents and dead-pool."""
        return max(self.agents + self.dead_pool, key=lambda a: a.fitness)

    def get_top_n(self, n: int) -> List[Agent]:
        """Get the top n agents by fitness."""
        return rank_agents(self.agents + self.dead_pool)[:n]

    @property
    def best_fitness(self) -> float:
        """Best fitness among agents of the current generation."""
        members = self.agents + self.dead_pool
        return max(a.fitness for a in members) if members else 0.0

    @property
    def avg_fitness(self) -> float:
        members = self.agents + self.dead_pool
        if not members:
            return 0.0
        return sum(a.fitness for a in members) / len(members)

    def _update_best(self, candidate: Agent) -> None:
        if self.best_ever is None or candidate.fitness > self.best_ever.fitness:
            self.best_ever = Agent(
                network=candidate.network.clone(),
                fitness=candidate.fitness,
                generation=candidate.generation,
                parent_ids=list(candidate.parent_ids),
                origin=candidate.origin,
                alive=False,
                id=candidate.id,
            )

    def _compute_stats(self, ranked: Sequence[Agent]) -> GenerationStats:
        fitnesses = np.array([a.fitness for a in ranked], dtype=np.float64)
        return GenerationStats(
            generation=self.generation,
            best_fitness=float(fitnesses.max()),
            avg_fitness=float(fitnesses.mean()),
            min_fitness=float(fitnesses.min()),
            fitness_std=float(fitnesses.std()),
        )
