"""
Headless flappy world that drives a population.

Each tick the world spawns and scrolls pipes, feeds every live bird's
sensors through its network, applies the output gates, accrues fitness
and retires birds that hit a pipe or leave the arena. When the whole
generation has died, the world clears the pipes, asks the population to
evolve and respawns the new generation.
"""
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

import torch

from ..evolution import GenerationStats, Population
from ..exceptions import ConfigurationError
from ..networks import FLAPPY_SENSORS
from ..rng import make_generator, uniform
from .entities import Bird, Pipe

logger = logging.getLogger(__name__)


@dataclass
class WorldConfig:
    """Physical and scoring settings for the flappy world."""

    # Arena
    width: float = 1280.0
    height: float = 960.0

    # Time
    dt: float = 1.0 / 60.0
    reference_rate: float = 60.0
    max_ticks: int = 3600  # per generation, 0 = unlimited

    # Bird
    bird_size: float = 64.0
    gravity: float = 1.0
    flap_velocity: float = 15.0
    horizontal_speed: float = 1.0
    action_threshold: float = 0.62

    # Fitness per second survived
    forward_multiplier: float = 1.0
    backward_multiplier: float = -0.5

    # Pipes
    pipe_width: float = 128.0
    pipe_gap: float = 320.0
    pipe_speed: float = 3.0
    pipe_interval: float = 2.5

    # Reproducibility
    seed: Optional[int] = None

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError("Arena width and height must be positive")
        if self.dt <= 0:
            raise ConfigurationError(f"dt must be positive, got {self.dt}")
        if not 0 < self.pipe_gap < self.height:
            raise ConfigurationError(
                f"pipe_gap must be between 0 and the arena height, got {self.pipe_gap}"
            )
        if self.max_ticks < 0:
            raise ConfigurationError(f"max_ticks must be >= 0, got {self.max_ticks}")

    @property
    def delta(self) -> float:
        """Time step relative to the reference frame rate."""
        return self.dt * self.reference_rate


class FlappyWorld:
    """
    Simulation host for a Population.

    Example:
        pop = Population(EvolutionConfig(population_size=50, seed=3))
        pop.initialize_random()
        world = FlappyWorld(pop, WorldConfig(seed=3))
        history = world.run(generations=10)
    """

    def __init__(
        self,
        population: Population,
        config: Optional[WorldConfig] = None,
        generator: Optional[torch.Generator] = None,
    ):
        """
        Initialize the world.

        Args:
            population: Population to evaluate. Initialized if empty.
            config: World settings.
            generator: Random source for spawn positions and pipe gaps.
                       Kept separate from the population's generator.
        """
        self.population = population
        self.config = config or WorldConfig()
        self.generator = generator if generator is not None else make_generator(self.config.seed)

        shape = population.config.shape
        if shape[0] < FLAPPY_SENSORS:
            raise ConfigurationError(
                f"Network input layer has {shape[0]} nodes, the world provides "
                f"{FLAPPY_SENSORS} sensors"
            )

        if not population.agents and not population.dead_pool:
            population.initialize_random()

        self.birds: List[Bird] = []
        self.pipes: List[Pipe] = []
        self.spawn_timer = 0.0
        self.generation_ticks = 0
        self.total_ticks = 0

        self.reset()

    def reset(self) -> None:
        """Clear the arena and spawn a bird for every live agent."""
        self.pipes = []
        # First pair spawns on the next tick
        self.spawn_timer = self.config.pipe_interval
        self.generation_ticks = 0
        self.birds = [self._spawn_bird(agent) for agent in self.population.live_agents()]

    def _spawn_bird(self, agent) -> Bird:
        x = uniform(self.generator, -self.config.width / 2, 0.0, 1).item()
        return Bird(agent=agent, x=x, y=0.0, size=self.config.bird_size)

    def _spawn_pipes(self) -> None:
        c = self.config
        offset = uniform(self.generator, 0.0, c.height - c.pipe_gap, 1).item()
        x = (c.width + c.pipe_width) / 2

        self.pipes.append(Pipe('bottom', x, -c.height + offset, c.pipe_width, c.height))
        self.pipes.append(Pipe('top', x, offset + c.pipe_gap, c.pipe_width, c.height))

    def step(self) -> Optional[GenerationStats]:
        """
        Advance the world by one tick.

        Returns:
            Statistics if this tick ended a generation, otherwise None.
        """
        c = self.config
        delta = c.delta

        # Pipes
        self.spawn_timer += c.dt
        if self.spawn_timer > c.pipe_interval:
            self.spawn_timer = 0.0
            self._spawn_pipes()

        for pipe in self.pipes:
            pipe.move(c.pipe_speed * delta)
        self.pipes = [p for p in self.pipes if not p.is_off_screen(c.width)]

        # Birds
        for bird in self.birds:
            bird.think(self.pipes, c)
            bird.act(c, delta)
            bird.accrue(c.dt)

        self.generation_ticks += 1
        self.total_ticks += 1

        timed_out = c.max_ticks and self.generation_ticks >= c.max_ticks
        survivors = []
        for bird in self.birds:
            if timed_out or bird.out_of_bounds(c) or bird.first_collision(self.pipes):
                self.population.report_death(bird.agent)
            else:
                survivors.append(bird)
        self.birds = survivors

        if timed_out:
            logger.debug(f"Generation {self.population.generation} hit the {c.max_ticks} tick cap")

        if self.population.is_exhausted:
            stats = self.population.evolve_generation()
            self.reset()
            return stats

        return None

    def run_generation(self) -> GenerationStats:
        """Step until the current generation has died and been evolved."""
        while True:
            stats = self.step()
            if stats is not None:
                return stats

    def run(
        self,
        generations: int,
        progress_callback: Optional[Callable[[int, GenerationStats], None]] = None,
    ) -> List[GenerationStats]:
        """
        Run several generations.

        Args:
            generations: Number of generations to complete.
            progress_callback: Called with (generation, stats) each gen.

        Returns:
            List of generation statistics.
        """
        history = []
        for _ in range(generations):
            stats = self.run_generation()
            history.append(stats)
            if progress_callback:
                progress_callback(stats.generation, stats)
        return history
