"""
Preset network shapes for reflex agents.

A shape is the sequence of layer sizes, input layer first. Every preset
returns a plain tuple that can be passed to ``Network.random`` or
``EvolutionConfig(shape=...)``.
"""
from typing import List, Tuple

# [height, vertical speed, next top edge, next bottom edge, gap centre]
FLAPPY_SENSORS = 5
# [flap, move right]
FLAPPY_ACTIONS = 2


def flappy_shape(hidden_size: int = 10) -> Tuple[int, ...]:
    """
    Shape used by the flappy world.

    Architecture:
        Input (5 sensors) -> Hidden (10) -> Output (2 action gates)

    Args:
        hidden_size: Number of hidden nodes.

    Returns:
        Layer sizes.
    """
    return (FLAPPY_SENSORS, hidden_size, FLAPPY_ACTIONS)


def create_mlp_shape(
    input_size: int,
    output_size: int,
    hidden_sizes: List[int] = None,
) -> Tuple[int, ...]:
    """
    Create a generic shape with any number of hidden layers.

    Example:
        shape = create_mlp_shape(3, 3, hidden_sizes=[10])  # (3, 10, 3)
    """
    hidden_sizes = hidden_sizes or []
    return (input_size, *hidden_sizes, output_size)


def minimal_shape(input_size: int = 2, output_size: int = 1) -> Tuple[int, ...]:
    """
    Minimal shape for testing: inputs wired straight to outputs.
    """
    return (input_size, output_size)


def parse_shape(text: str) -> Tuple[int, ...]:
    """
    Parse a shape written as comma separated sizes, e.g. ``"5,10,2"``.

    Raises:
        ValueError: If any entry is not an integer.
    """
    parts = [part.strip() for part in text.split(',') if part.strip()]
    try:
        return tuple(int(part) for part in parts)
    except ValueError:
        raise ValueError(f"Invalid shape {text!r}: expected comma separated integers")
