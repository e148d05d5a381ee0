"""
Crossover operators for network evolution.

Parents are combined by blending: every bias and weight of the child is
the arithmetic mean of the corresponding values in the parents, paired
by layer and node position. This is neither single-point nor uniform
crossover; no gene is picked from one parent over the other.
"""
from typing import List, Optional, TYPE_CHECKING

import torch

from ..exceptions import ShapeMismatchError

if TYPE_CHECKING:
    from ..networks import Network


class BlendCrossover:
    """
    Blend crossover for two networks of identical shape.

    The child's activations start at zero and its storage is independent
    of both parents.

    Example:
        crossover = BlendCrossover()
        child = crossover.crossover(parent_a, parent_b)
    """

    def crossover(
        self,
        parent_a: 'Network',
        parent_b: 'Network',
    ) -> 'Network':
        """
        Create a child from two parent networks.

        Args:
            parent_a: First parent network.
            parent_b: Second parent network.

        Returns:
            Child network with averaged biases and weights.

        Raises:
            ShapeMismatchError: If parents have different shapes.
        """
        from ..networks import Layer, Network

        self._check_compatible(parent_a, parent_b)

        layers = []
        for layer_a, layer_b in zip(parent_a.layers, parent_b.layers):
            layers.append(Layer(
                biases=(layer_a.biases + layer_b.biases) / 2,
                weights=(layer_a.weights + layer_b.weights) / 2,
            ))

        return Network(layers, retain_unset_inputs=parent_a.retain_unset_inputs)

    def _check_compatible(
        self,
        net_a: 'Network',
        net_b: 'Network',
    ) -> None:
        """Raise unless both networks have the same shape."""
        if net_a.shape != net_b.shape:
            raise ShapeMismatchError(
                f"Parents must have identical shapes: {list(net_a.shape)} != {list(net_b.shape)}"
            )


def blend_networks(
    networks: List['Network'],
    weights: Optional[List[float]] = None,
) -> 'Network':
    """
    Blend several networks into one.

    Creates a new network whose biases and weights are a weighted average
    of the input networks. All networks must have identical shape.

    Args:
        networks: List of networks to blend.
        weights: Optional weights for each network (normalized to sum
                 to 1). If None, equal weights are used.

    Returns:
        Blended network with zero activations.

    Raises:
        ValueError: If no networks are given or the weights are unusable.
        ShapeMismatchError: If networks have different shapes.
    """
    from ..networks import Layer, Network

    if not networks:
        raise ValueError("Need at least one network to blend")

    shape = networks[0].shape
    for net in networks[1:]:
        if net.shape != shape:
            raise ShapeMismatchError(
                f"Incompatible network: {list(net.shape)} != {list(shape)}"
            )

    if weights is None:
        weights = [1.0 / len(networks)] * len(networks)
    else:
        if len(weights) != len(networks):
            raise ValueError("Need exactly one blend weight per network")
        total = sum(weights)
        if total <= 0:
            raise ValueError("Blend weights must sum to a positive value")
        weights = [w / total for w in weights]

    layers = []
    for position, template in enumerate(networks[0].layers):
        biases = torch.zeros_like(template.biases)
        layer_weights = torch.zeros_like(template.weights)
        for net, weight in zip(networks, weights):
            biases += weight * net.layers[position].biases
            layer_weights += weight * net.layers[position].weights
        layers.append(Layer(biases, layer_weights))

    return Network(layers, retain_unset_inputs=networks[0].retain_unset_inputs)
