"""
Bodies that live in the flappy world.

Coordinates are centred on the arena with y pointing up, so the arena
spans [-width/2, width/2] x [-height/2, height/2].
"""
from dataclasses import dataclass
from typing import List, Optional, Sequence, TYPE_CHECKING

from ..evolution import Agent
from ..networks import Network

if TYPE_CHECKING:
    from .world import WorldConfig


@dataclass(eq=False)
class Pipe:
    """
    One half of a pipe pair.

    A 'top' pipe hangs from above and its gap edge is its lower side; a
    'bottom' pipe rises from below and its gap edge is its upper side.
    """
    kind: str  # 'top', 'bottom'
    x: float
    y: float
    width: float
    height: float

    @property
    def gap_edge(self) -> float:
        """Y coordinate of the side facing the gap."""
        if self.kind == 'top':
            return self.y - self.height / 2
        return self.y + self.height / 2

    def move(self, distance: float) -> None:
        self.x -= distance

    def is_off_screen(self, arena_width: float) -> bool:
        return self.x < (-arena_width - self.width) / 2


@dataclass(eq=False)
class Bird:
    """
    A flapping agent body driven by its network.

    Output gates:
        output[0] > threshold: flap (vertical velocity jumps up)
        output[1] > threshold: move right and earn full fitness per second;
                               otherwise drift left and lose fitness
    """
    agent: Agent
    x: float
    y: float = 0.0
    velocity_y: float = 0.0
    multiplier: float = 0.0
    size: float = 64.0

    @property
    def network(self) -> Network:
        return self.agent.network

    def sense(self, pipes: Sequence[Pipe], config: 'WorldConfig') -> List[float]:
        """
        Build the sensor vector.

        Returns:
            [height, vertical speed, next top edge, next bottom edge, gap centre],
            positions normalized by arena height and speed by flap velocity.
        """
        top, bottom = 0.0, 0.0
        upcoming = self._next_pair(pipes)
        if upcoming is not None:
            top_pipe, bottom_pipe = upcoming
            top = top_pipe.gap_edge / config.height
            bottom = bottom_pipe.gap_edge / config.height

        return [
            self.y / config.height,
            self.velocity_y / config.flap_velocity,
            top,
            bottom,
            (top + bottom) / 2,
        ]

    def _next_pair(self, pipes: Sequence[Pipe]):
        ahead = [p for p in pipes if p.x + p.width > self.x]
        if not ahead:
            return None

        nearest_x = min(p.x for p in ahead)
        pair = [p for p in ahead if p.x == nearest_x]
        top = next((p for p in pair if p.kind == 'top'), None)
        bottom = next((p for p in pair if p.kind == 'bottom'), None)
        if top is None or bottom is None:
            return None
        return top, bottom

    def think(self, pipes: Sequence[Pipe], config: 'WorldConfig') -> None:
        """Feed the current sensors through the network."""
        self.network.process(self.sense(pipes, config))

    def act(self, config: 'WorldConfig', delta: float) -> None:
        """
        Apply gravity and the network's action gates.

        Args:
            config: World settings.
            delta: Frame-rate normalized time step (1.0 at the reference rate).
        """
        self.velocity_y -= config.gravity * delta
        self.y += self.velocity_y * delta

        output = self.network.output()

        if output[0] > config.action_threshold:
            self.velocity_y = config.flap_velocity

        if len(output) > 1 and output[1] > config.action_threshold:
            self.x += config.horizontal_speed * delta
            self.multiplier = config.forward_multiplier
        else:
            self.x -= config.horizontal_speed * delta
            self.multiplier = config.backward_multiplier

    def accrue(self, seconds: float) -> None:
        """Add fitness for time survived."""
        self.agent.fitness += seconds * self.multiplier

    def collides(self, pipe: Pipe) -> bool:
        """Axis-aligned box overlap test."""
        overlap_x = abs(self.x - pipe.x) < (self.size + pipe.width) / 2
        overlap_y = abs(self.y - pipe.y) < (self.size + pipe.height) / 2
        return overlap_x and overlap_y

    def out_of_bounds(self, config: 'WorldConfig') -> bool:
        return (
            abs(self.y) > config.height / 2
            or abs(self.x) > config.width / 2
        )

    def first_collision(self, pipes: Sequence[Pipe]) -> Optional[Pipe]:
        return next((p for p in pipes if self.collides(p)), None)
