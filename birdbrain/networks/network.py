"""
Layered feedforward network evolved by the genetic algorithm.

A network is an ordered list of layers. Each layer stores, for its nodes,
the current activation, a bias, and the weights toward every node of the
next layer. The output layer has no outgoing weights.

Forward propagation follows a fixed arithmetic contract: when computing
node ``j`` of layer ``i``, every source node ``p`` of layer ``i - 1``
contributes ``activation[p] * weights[p][j] + bias[p]``. The source bias
is therefore added once per outgoing edge, not once per destination node.
The summed value is squashed with the logistic sigmoid.

Example:
    generator = make_generator(seed=7)
    network = Network.random((5, 10, 2), generator)
    network.process([0.1, -0.3, 0.5, 0.2, 0.35])
    jump, move = network.output()
"""
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

import torch

from ..exceptions import InputSizeError, InvalidShapeError
from ..rng import uniform

if TYPE_CHECKING:
    from ..evolution.crossover import BlendCrossover
    from ..evolution.mutations import Mutator

logger = logging.getLogger(__name__)

DTYPE = torch.float64


def sigmoid(x: torch.Tensor) -> torch.Tensor:
    """Logistic sigmoid, 1 / (1 + e^-x)."""
    return torch.sigmoid(x)


@dataclass(frozen=True)
class Node:
    """Read-only snapshot of a single node."""
    activation: float
    bias: float
    weights: Tuple[float, ...]


class Layer:
    """
    Storage for one layer of nodes.

    Attributes:
        activations: Current activation per node, shape ``[n]``.
        biases: Bias per node, shape ``[n]``.
        weights: Outgoing weights, shape ``[n, m]`` where ``m`` is the size
                 of the next layer (0 for the output layer).
    """

    def __init__(
        self,
        biases: torch.Tensor,
        weights: torch.Tensor,
        activations: Optional[torch.Tensor] = None,
    ):
        biases = torch.as_tensor(biases, dtype=DTYPE)
        weights = torch.as_tensor(weights, dtype=DTYPE)

        if biases.dim() != 1:
            raise InvalidShapeError("Layer biases must be one-dimensional")
        if biases.numel() < 1:
            raise InvalidShapeError("Layer must have at least one node")
        if weights.dim() != 2 or weights.shape[0] != biases.shape[0]:
            raise InvalidShapeError(
                f"Layer weights must have shape [{biases.shape[0]}, fan_out], "
                f"got {list(weights.shape)}"
            )

        if activations is None:
            activations = torch.zeros_like(biases)
        else:
            activations = torch.as_tensor(activations, dtype=DTYPE)
            if activations.shape != biases.shape:
                raise InvalidShapeError("Layer activations must match biases")

        self.biases = biases.clone()
        self.weights = weights.clone()
        self.activations = activations.clone()

    @property
    def size(self) -> int:
        """Number of nodes in the layer."""
        return self.biases.shape[0]

    @property
    def fan_out(self) -> int:
        """Number of outgoing weights per node."""
        return self.weights.shape[1]

    def node(self, index: int) -> Node:
        """Return a snapshot of the node at ``index``."""
        return Node(
            activation=self.activations[index].item(),
            bias=self.biases[index].item(),
            weights=tuple(self.weights[index].tolist()),
        )

    @property
    def nodes(self) -> List[Node]:
        return [self.node(i) for i in range(self.size)]

    def reset(self) -> None:
        """Zero every activation."""
        self.activations = torch.zeros_like(self.biases)

    def clone(self) -> 'Layer':
        return Layer(self.biases, self.weights, self.activations)

    def __repr__(self) -> str:
        return f"Layer(size={self.size}, fan_out={self.fan_out})"


class Network:
    """
    Fixed-shape feedforward network with mutable weights.

    The shape (sequence of layer sizes) never changes after construction.
    Weights, biases and activations are mutated in place by the genetic
    operators and by forward propagation.

    Attributes:
        retain_unset_inputs: If True, input nodes not covered by a short
                             input vector keep their previous activation.
                             If False (default), they are reset to 0.
    """

    def __init__(
        self,
        layers: Sequence[Layer],
        retain_unset_inputs: bool = False,
    ):
        """
        Build a network from existing layers.

        Args:
            layers: Layers in input-to-output order. The network takes
                    ownership of them.
            retain_unset_inputs: Behaviour for short input vectors.

        Raises:
            InvalidShapeError: If the layers do not chain together.
        """
        layers = list(layers)
        self._validate_layers(layers)
        self._layers = layers
        self.retain_unset_inputs = retain_unset_inputs

    @staticmethod
    def _validate_layers(layers: List[Layer]) -> None:
        if len(layers) < 2:
            raise InvalidShapeError(
                f"Network needs at least 2 layers (input and output), got {len(layers)}"
            )

        for i, (current, following) in enumerate(zip(layers, layers[1:])):
            if current.fan_out != following.size:
                raise InvalidShapeError(
                    f"Layer {i} has {current.fan_out} outgoing weights per node "
                    f"but layer {i + 1} has {following.size} nodes"
                )

        if layers[-1].fan_out != 0:
            raise InvalidShapeError("Output layer nodes must not have weights")

    @classmethod
    def random(
        cls,
        shape: Sequence[int],
        generator: torch.Generator,
        retain_unset_inputs: bool = False,
    ) -> 'Network':
        """
        Create a randomly initialized network.

        Every non-output node gets a bias and outgoing weights drawn
        uniformly from [-1, 1). Output nodes get zero bias and no weights.

        Args:
            shape: Layer sizes, input first. At least two entries.
            generator: Random source.
            retain_unset_inputs: Behaviour for short input vectors.

        Returns:
            A new Network.

        Raises:
            InvalidShapeError: If the shape is malformed.
        """
        shape = validate_shape(shape)

        layers = []
        for amount_nodes, amount_weights in zip(shape, shape[1:]):
            biases = uniform(generator, -1.0, 1.0, amount_nodes, dtype=DTYPE)
            weights = uniform(
                generator, -1.0, 1.0, (amount_nodes, amount_weights), dtype=DTYPE
            )
            layers.append(Layer(biases, weights))

        output_size = shape[-1]
        layers.append(Layer(
            torch.zeros(output_size, dtype=DTYPE),
            torch.zeros((output_size, 0), dtype=DTYPE),
        ))

        return cls(layers, retain_unset_inputs=retain_unset_inputs)

    @property
    def layers(self) -> List[Layer]:
        """The network's layers, input first."""
        return self._layers

    @property
    def shape(self) -> Tuple[int, ...]:
        """Layer sizes, input first."""
        return tuple(layer.size for layer in self._layers)

    @property
    def input_size(self) -> int:
        return self._layers[0].size

    @property
    def output_size(self) -> int:
        return self._layers[-1].size

    @property
    def num_parameters(self) -> int:
        """Total number of biases and weights."""
        return sum(layer.size + layer.weights.numel() for layer in self._layers)

    def node(self, layer: int, index: int) -> Node:
        """Snapshot of node ``index`` in layer ``layer``."""
        return self._layers[layer].node(index)

    def process(self, inputs: Sequence[float]) -> None:
        """
        Run forward propagation on an input vector.

        The result is read back with ``output()``.

        Args:
            inputs: Sensor values, at most ``input_size`` of them.

        Raises:
            InputSizeError: If more values are passed than there are
                            input nodes.
        """
        values = torch.as_tensor(inputs, dtype=DTYPE).flatten()
        input_layer = self._layers[0]
        count = values.numel()

        if count > input_layer.size:
            raise InputSizeError(
                f"Too much input passed: got {count} values "
                f"for {input_layer.size} input nodes"
            )

        if count < input_layer.size:
            logger.debug(
                f"Short input: {count} of {input_layer.size} values, "
                f"{'retaining' if self.retain_unset_inputs else 'zeroing'} the rest"
            )
            if not self.retain_unset_inputs:
                input_layer.activations[count:] = 0.0

        input_layer.activations[:count] = values

        for previous, current in zip(self._layers, self._layers[1:]):
            # [n_prev, n_cur]: one term per edge, source bias included in each
            edge_terms = (
                previous.activations.unsqueeze(1) * previous.weights
                + previous.biases.unsqueeze(1)
            )
            current.activations = sigmoid(edge_terms.sum(dim=0))

    def output(self) -> List[float]:
        """Return a copy of the output layer's activations."""
        return self._layers[-1].activations.tolist()

    def reset(self) -> None:
        """Zero all activations."""
        for layer in self._layers:
            layer.reset()

    def mutate(
        self,
        generator: torch.Generator,
        mutator: Optional['Mutator'] = None,
    ) -> None:
        """
        Mutate this network in place.

        Args:
            generator: Random source.
            mutator: Operator to use. Defaults to ``Mutator()``.
        """
        from ..evolution.mutations import Mutator

        (mutator or Mutator()).mutate(self, generator)

    def crossover(
        self,
        other: 'Network',
        crossover: Optional['BlendCrossover'] = None,
    ) -> 'Network':
        """
        Blend this network with another of the same shape.

        Returns:
            A new child network.

        Raises:
            ShapeMismatchError: If the shapes differ.
        """
        from ..evolution.crossover import BlendCrossover

        return (crossover or BlendCrossover()).crossover(self, other)

    def clone(self) -> 'Network':
        """Deep copy, including activations."""
        return Network(
            [layer.clone() for layer in self._layers],
            retain_unset_inputs=self.retain_unset_inputs,
        )

    def __repr__(self) -> str:
        return f"Network(shape={self.shape})"


def validate_shape(shape: Sequence[int]) -> Tuple[int, ...]:
    """
    Check a network shape and return it as a tuple.

    Raises:
        InvalidShapeError: If there are fewer than two layers or any
                           layer size is not a positive integer.
    """
    try:
        shape = tuple(shape)
    except TypeError:
        raise InvalidShapeError(f"Shape must be a sequence of sizes, got {shape!r}")

    if len(shape) < 2:
        raise InvalidShapeError(
            f"Shape needs at least 2 layers (input and output), got {list(shape)}"
        )

    for size in shape:
        if isinstance(size, bool) or not isinstance(size, int) or size < 1:
            raise InvalidShapeError(f"Layer sizes must be positive integers, got {list(shape)}")

    return shape
