"""
Reference simulation for evolving reflex agents.

A headless flappy-bird world: birds fall under gravity, flap and steer
through their networks' output gates, and earn fitness for time spent
moving forward between scrolling pipe pairs. It is a thin consumer of
the engine: it feeds sensors into networks, reads their outputs and
reports each bird's fitness to the population when it dies.
"""
from .entities import Bird, Pipe
from .world import FlappyWorld, WorldConfig

__all__ = [
    'Bird',
    'Pipe',
    'FlappyWorld',
    'WorldConfig',
]
