"""
Selection strategies for the generational cycle.

Selection pressure comes entirely from a fixed elite cut: the dead-pool
is ranked by fitness and the top K survive and breed. Breeding pairs
each elite member with a partner drawn from the elite.

All strategies work with Agent records.
"""
import uuid
from dataclasses import dataclass, field
from typing import List, Optional

import torch

from ..exceptions import ConfigurationError
from ..networks import Network
from ..rng import randrange


@dataclass(eq=False)
class Agent:
    """
    An evolving agent: a network plus the fitness it earned.

    The simulation owns an agent while it is alive. Once reported dead,
    the record belongs to the population's dead-pool until the next
    generation is bred.
    """
    network: Network
    fitness: float = 0.0
    generation: int = 0
    parent_ids: List[str] = field(default_factory=list)
    origin: str = 'random'  # 'random', 'elite', 'offspring'
    alive: bool = True
    id: str = ''

    def __post_init__(self):
        if not self.id:
            self.id = str(uuid.uuid4())[:8]

    def reset(self) -> None:
        """Clear transient state before handing the agent to a simulation."""
        self.fitness = 0.0
        self.alive = True
        self.network.reset()


def rank_agents(agents: List[Agent]) -> List[Agent]:
    """
    Sort agents by fitness, best first.

    The sort is stable, so agents with equal fitness keep their order.
    """
    return sorted(agents, key=lambda agent: agent.fitness, reverse=True)


class EliteSelection:
    """
    Elitism: keep the best agents.

    The elite go straight into the next generation with their networks
    unchanged, and they are the only parents offspring are bred from.
    """

    def __init__(
        self,
        elite_count: int = 50,
    ):
        """
        Initialize elite selection.

        Args:
            elite_count: Number of elite agents to keep.
        """
        if elite_count < 1:
            raise ConfigurationError(f"elite_count must be at least 1, got {elite_count}")
        self.elite_count = elite_count

    def get_elite(
        self,
        agents: List[Agent],
    ) -> List[Agent]:
        """
        Get the elite agents from a pool.

        Args:
            agents: Evaluated agents.

        Returns:
            Up to ``elite_count`` agents, best first.
        """
        if not agents:
            return []

        return rank_agents(agents)[:self.elite_count]


class PartnerSelection:
    """
    Choose the second parent for each offspring.

    Strategies:
    - best: always pair with the top elite member
    - random: pair with a uniformly drawn elite member
    """

    STRATEGIES = ('best', 'random')

    def __init__(self, strategy: str = 'best'):
        if strategy not in self.STRATEGIES:
            raise ConfigurationError(
                f"Unknown partner strategy: {strategy} (expected one of {', '.join(self.STRATEGIES)})"
            )
        self.strategy = strategy

    def select(
        self,
        elite: List[Agent],
        generator: Optional[torch.Generator] = None,
    ) -> Agent:
        """
        Pick a partner from the elite.

        Args:
            elite: Elite agents, best first.
            generator: Random source, required for the 'random' strategy.

        Returns:
            The chosen partner.
        """
        if not elite:
            raise ValueError("Cannot select a partner from an empty elite")

        if self.strategy == 'best':
            return elite[0]

        if generator is None:
            raise ValueError("The 'random' partner strategy needs a generator")
        return elite[randrange(generator, len(elite))]
