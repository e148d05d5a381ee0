"""
Random source helpers.

Every operator that needs randomness takes an explicit ``torch.Generator``
so runs can be seeded and replayed. These helpers wrap the handful of
draws the engine makes.
"""
from typing import Optional, Sequence, Union

import torch

Size = Union[int, Sequence[int]]


def make_generator(seed: Optional[int] = None) -> torch.Generator:
    """
    Create a CPU generator.

    Args:
        seed: Fixed seed for reproducible runs. If None, the generator
              is seeded from system entropy.

    Returns:
        A new torch.Generator.
    """
    generator = torch.Generator()
    if seed is None:
        generator.seed()
    else:
        generator.manual_seed(seed)
    return generator


def _as_size(size: Size) -> tuple:
    if isinstance(size, int):
        return (size,)
    return tuple(size)


def uniform(
    generator: torch.Generator,
    low: float,
    high: float,
    size: Size,
    dtype: torch.dtype = torch.float64,
) -> torch.Tensor:
    """Draw a tensor of floats uniformly from ``[low, high)``."""
    draws = torch.rand(_as_size(size), generator=generator, dtype=dtype)
    return low + draws * (high - low)


def randint(
    generator: torch.Generator,
    low: int,
    high: int,
    size: Size,
) -> torch.Tensor:
    """Draw a tensor of integers uniformly from ``[low, high)``."""
    return torch.randint(low, high, _as_size(size), generator=generator)


def randrange(generator: torch.Generator, high: int) -> int:
    """Draw a single integer from ``[0, high)``."""
    return int(torch.randint(0, high, (1,), generator=generator).item())
