"""
Network mutation operator for neuroevolution.

Mutation works node by node. Each node rolls an integer in [0, 100) and
mutates when the roll is above a threshold (80 by default, i.e. a 19%
chance). A mutating node has its bias scaled and shifted, and every one
of its outgoing weights scaled by its own random factor. Topology is
never touched.
"""
from typing import Tuple, TYPE_CHECKING

import torch

from ..exceptions import ConfigurationError
from ..rng import randint, uniform

if TYPE_CHECKING:
    from ..networks import Network


class Mutator:
    """
    Scale-and-shift mutation operator.

    For a mutating node:
        bias   = bias * U[bias_scale) + U[bias_shift)
        weight = weight * U[weight_scale)   (fresh draw per weight)

    Output-layer nodes take part as well; they have no weights so only
    their bias changes.

    Attributes:
        threshold: A node mutates when its roll in [0, 100) exceeds this.
        bias_scale: Range of the multiplicative bias factor.
        bias_shift: Range of the additive bias offset.
        weight_scale: Range of the multiplicative weight factor.

    Example:
        mutator = Mutator(threshold=80)
        mutated_nodes = mutator.mutate(network, generator)
    """

    ROLL_RANGE = 100

    def __init__(
        self,
        threshold: int = 80,
        bias_scale: Tuple[float, float] = (0.5, 1.0),
        bias_shift: Tuple[float, float] = (0.0, 0.1),
        weight_scale: Tuple[float, float] = (0.5, 1.0),
    ):
        """
        Initialize the mutator.

        Args:
            threshold: Roll threshold in [-1, 99].
                       99 = never mutate
                       -1 = always mutate
            bias_scale: (low, high) for the bias factor.
            bias_shift: (low, high) for the bias offset.
            weight_scale: (low, high) for each weight factor.
        """
        if not -1 <= threshold <= self.ROLL_RANGE - 1:
            raise ConfigurationError(
                f"Mutation threshold must be in [-1, {self.ROLL_RANGE - 1}], got {threshold}"
            )
        for name, (low, high) in (
            ('bias_scale', bias_scale),
            ('bias_shift', bias_shift),
            ('weight_scale', weight_scale),
        ):
            if low > high:
                raise ConfigurationError(f"{name} range is inverted: ({low}, {high})")

        self.threshold = threshold
        self.bias_scale = bias_scale
        self.bias_shift = bias_shift
        self.weight_scale = weight_scale

    @property
    def probability(self) -> float:
        """Per-node mutation probability."""
        return (self.ROLL_RANGE - 1 - self.threshold) / self.ROLL_RANGE

    def mutate(
        self,
        network: 'Network',
        generator: torch.Generator,
    ) -> int:
        """
        Mutate a network in place.

        Args:
            network: The network to mutate.
            generator: Random source.

        Returns:
            Number of nodes that mutated.
        """
        mutated = 0

        for layer in network.layers:
            size = layer.size
            gate = randint(generator, 0, self.ROLL_RANGE, size) > self.threshold

            bias_factor = uniform(generator, *self.bias_scale, size, dtype=layer.biases.dtype)
            bias_offset = uniform(generator, *self.bias_shift, size, dtype=layer.biases.dtype)
            weight_factor = uniform(
                generator, *self.weight_scale, tuple(layer.weights.shape),
                dtype=layer.weights.dtype,
            )

            layer.biases = torch.where(
                gate, layer.biases * bias_factor + bias_offset, layer.biases
            )
            layer.weights = torch.where(
                gate.unsqueeze(1), layer.weights * weight_factor, layer.weights
            )
            mutated += int(gate.sum().item())

        return mutated

    def mutated_copy(
        self,
        network: 'Network',
        generator: torch.Generator,
    ) -> 'Network':
        """Return a mutated clone, leaving ``network`` untouched."""
        child = network.clone()
        self.mutate(child, generator)
        return child
