"""
Network builder for constructing networks from explicit parameters.

This module provides:
- Random networks from a shape (the population's initializer)
- Networks from explicit bias/weight values
- Constant-valued networks (handy for checking operators by hand)
- Parameter export and cloning
"""
from typing import Any, Dict, List, Optional, Sequence

import torch

from ..exceptions import InvalidShapeError
from .network import DTYPE, Layer, Network, validate_shape


class NetworkBuilder:
    """
    Build networks from shapes or explicit parameter values.

    Parameter Format:
        {
            "shape": [2, 3, 1],
            "layers": [
                {"biases": [b0, b1], "weights": [[w00, w01, w02], [w10, w11, w12]]},
                {"biases": [b0, b1, b2], "weights": [[w0], [w1], [w2]]},
                {"biases": [0.0], "weights": [[]]}
            ]
        }

    Example:
        builder = NetworkBuilder()
        network = builder.random([2, 3, 1], generator)
        params = builder.to_parameters(network)
        copy = builder.from_parameters(params)
    """

    def __init__(self, retain_unset_inputs: bool = False):
        """
        Initialize the builder.

        Args:
            retain_unset_inputs: Input handling flag applied to every
                                 network the builder creates.
        """
        self.retain_unset_inputs = retain_unset_inputs

    def random(
        self,
        shape: Sequence[int],
        generator: torch.Generator,
    ) -> Network:
        """Create a randomly initialized network of ``shape``."""
        return Network.random(
            shape, generator, retain_unset_inputs=self.retain_unset_inputs
        )

    def constant(
        self,
        shape: Sequence[int],
        bias: float = 0.0,
        weight: float = 0.0,
        output_bias: Optional[float] = None,
    ) -> Network:
        """
        Create a network whose biases and weights are all constants.

        Args:
            shape: Layer sizes, input first.
            bias: Bias for every non-output node.
            weight: Value of every weight.
            output_bias: Bias for output nodes. Defaults to ``bias``.

        Returns:
            A new Network.
        """
        shape = validate_shape(shape)
        if output_bias is None:
            output_bias = bias

        layers = []
        for i, size in enumerate(shape):
            fan_out = shape[i + 1] if i + 1 < len(shape) else 0
            layer_bias = output_bias if fan_out == 0 else bias
            layers.append(Layer(
                torch.full((size,), layer_bias, dtype=DTYPE),
                torch.full((size, fan_out), weight, dtype=DTYPE),
            ))

        return Network(layers, retain_unset_inputs=self.retain_unset_inputs)

    def from_parameters(self, parameters: Dict[str, Any]) -> Network:
        """
        Build a network from explicit parameter values.

        Args:
            parameters: Dictionary with a 'layers' list, each entry holding
                        'biases' and 'weights'. Output layer weights may be
                        omitted or empty.

        Returns:
            A new Network.

        Raises:
            InvalidShapeError: If the parameters are malformed or the
                               layers do not chain together.
        """
        self._validate_parameters(parameters)

        layers = []
        entries = parameters['layers']
        for i, entry in enumerate(entries):
            biases = torch.as_tensor(entry['biases'], dtype=DTYPE)
            weights = entry.get('weights')
            if i == len(entries) - 1 and (weights is None or len(weights) == 0):
                weights = torch.zeros((biases.numel(), 0), dtype=DTYPE)
            layers.append(Layer(
                biases,
                torch.as_tensor(weights, dtype=DTYPE),
                entry.get('activations'),
            ))

        network = Network(layers, retain_unset_inputs=self.retain_unset_inputs)

        expected = parameters.get('shape')
        if expected is not None and tuple(expected) != network.shape:
            raise InvalidShapeError(
                f"Declared shape {list(expected)} does not match layers {list(network.shape)}"
            )

        return network

    def _validate_parameters(self, parameters: Dict[str, Any]) -> None:
        """Validate that a parameter dictionary is well-formed."""
        if not isinstance(parameters, dict):
            raise InvalidShapeError("Parameters must be a dictionary")

        if 'layers' not in parameters:
            raise InvalidShapeError("Parameters must have 'layers' key")

        if not isinstance(parameters['layers'], list):
            raise InvalidShapeError("'layers' must be a list")

        last = len(parameters['layers']) - 1
        for i, layer in enumerate(parameters['layers']):
            if not isinstance(layer, dict):
                raise InvalidShapeError(f"Layer {i} must be a dictionary")
            if 'biases' not in layer:
                raise InvalidShapeError(f"Layer {i} must have 'biases' key")
            if i != last and 'weights' not in layer:
                raise InvalidShapeError(f"Layer {i} must have 'weights' key")

    def to_parameters(self, network: Network) -> Dict[str, Any]:
        """
        Export a network's parameters as plain Python values.

        Args:
            network: Network to export.

        Returns:
            Parameter dictionary accepted by ``from_parameters``.
        """
        layers: List[Dict[str, Any]] = []
        for layer in network.layers:
            layers.append({
                'biases': layer.biases.tolist(),
                'weights': layer.weights.tolist(),
                'activations': layer.activations.tolist(),
            })

        return {
            'shape': list(network.shape),
            'layers': layers,
        }

    def clone(self, network: Network) -> Network:
        """Create a deep copy of a network."""
        return network.clone()
