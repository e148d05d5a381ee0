"""
Tests for network construction and forward propagation.

Tests the network layer for:
- Shape invariants and initialization ranges
- The per-edge source bias in forward propagation
- Input size handling
- Builder parameter validation and export
- Preset shapes
"""
import logging
import math

import pytest
import torch

from birdbrain.exceptions import InputSizeError, InvalidShapeError
from birdbrain.networks import (
    Layer,
    Network,
    NetworkBuilder,
    create_mlp_shape,
    flappy_shape,
    minimal_shape,
    parse_shape,
    validate_shape,
)

from birdbrain.tests.factories import FlappyNetworkFactory, NetworkFactory


def _sigmoid(x):
    return 1.0 / (1.0 + math.exp(-x))


class TestNetworkConstruction:
    """Tests for Network.random and the shape invariant."""

    @pytest.mark.parametrize('shape', [(1, 1), (2, 3, 1), (5, 10, 2), (3, 4, 4, 3)])
    def test_shape_invariant(self, shape, generator):
        """Test that layer count and output length follow the shape."""
        network = Network.random(shape, generator)

        assert network.shape == shape
        assert len(network.layers) == len(shape)

        network.process([0.0] * shape[0])
        assert len(network.output()) == shape[-1]

    def test_weight_matrix_shapes(self, generator):
        """Test that each layer holds weights toward the next layer."""
        network = Network.random((5, 10, 2), generator)

        assert tuple(network.layers[0].weights.shape) == (5, 10)
        assert tuple(network.layers[1].weights.shape) == (10, 2)
        assert tuple(network.layers[2].weights.shape) == (2, 0)

    def test_output_layer_starts_empty(self, generator):
        """Test that output nodes have zero bias and no weights."""
        network = Network.random((3, 4, 3), generator)
        output = network.layers[-1]

        assert torch.equal(output.biases, torch.zeros(3, dtype=torch.float64))
        assert output.fan_out == 0

    def test_initialization_range(self, generator):
        """Test that biases and weights are drawn from [-1, 1)."""
        network = Network.random((5, 10, 2), generator)

        for layer in network.layers[:-1]:
            assert layer.biases.min() >= -1.0
            assert layer.biases.max() < 1.0
            assert layer.weights.min() >= -1.0
            assert layer.weights.max() < 1.0

    def test_activations_start_at_zero(self, generator):
        """Test that a new network has no stale activations."""
        network = Network.random((2, 3, 1), generator)

        for layer in network.layers:
            assert torch.count_nonzero(layer.activations) == 0

    def test_same_seed_same_network(self):
        """Test that identical seeds produce identical networks."""
        a = NetworkFactory(seed=3)
        b = NetworkFactory(seed=3)

        for layer_a, layer_b in zip(a.layers, b.layers):
            assert torch.equal(layer_a.biases, layer_b.biases)
            assert torch.equal(layer_a.weights, layer_b.weights)

    @pytest.mark.parametrize('shape', [
        [],
        [3],
        [3, 0],
        [2, -1],
        [2.5, 1],
        [True, 1],
    ])
    def test_invalid_shape(self, shape, generator):
        """Test that malformed shapes are rejected."""
        with pytest.raises(InvalidShapeError):
            Network.random(shape, generator)

    def test_invalid_shape_is_value_error(self):
        """Test that shape errors can be caught as ValueError."""
        with pytest.raises(ValueError, match="at least 2 layers"):
            validate_shape([4])

    def test_num_parameters(self, generator):
        """Test the bias and weight count."""
        network = Network.random((2, 3, 1), generator)

        # biases 2 + 3 + 1, weights 6 + 3
        assert network.num_parameters == 15

    def test_node_snapshot(self, generator):
        """Test reading a single node."""
        network = Network.random((2, 3, 1), generator)
        node = network.node(0, 1)

        assert len(node.weights) == 3
        assert node.bias == network.layers[0].biases[1].item()
        assert node.activation == 0.0

    def test_chaining_validation(self):
        """Test that layers must chain together."""
        layers = [
            Layer(torch.zeros(2), torch.zeros(2, 3)),
            Layer(torch.zeros(2), torch.zeros(2, 0)),
        ]

        with pytest.raises(InvalidShapeError, match="Layer 0 has 3 outgoing"):
            Network(layers)

    def test_output_layer_must_not_have_weights(self):
        """Test that the last layer has no outgoing weights."""
        layers = [
            Layer(torch.zeros(2), torch.zeros(2, 1)),
            Layer(torch.zeros(1), torch.zeros(1, 1)),
        ]

        with pytest.raises(InvalidShapeError, match="Output layer"):
            Network(layers)

    def test_single_layer_rejected(self):
        """Test that a network needs input and output layers."""
        with pytest.raises(InvalidShapeError):
            Network([Layer(torch.zeros(2), torch.zeros(2, 0))])

    def test_layer_weight_rows_must_match(self):
        """Test that a layer has one weight row per node."""
        with pytest.raises(InvalidShapeError, match="Layer weights"):
            Layer(torch.zeros(3), torch.zeros(2, 4))


class TestForwardPropagation:
    """Tests for Network.process and Network.output."""

    def test_sigmoid_boundary(self, builder):
        """Test that a zero network outputs exactly 0.5."""
        network = builder.constant([1, 1], bias=0.0, weight=0.0)

        network.process([1.0])

        assert network.output() == [0.5]

    def test_source_bias_added_per_edge(self, builder):
        """Test that each source bias is summed once per incoming edge."""
        network = builder.constant([3, 1], bias=0.5, weight=0.0, output_bias=0.0)

        network.process([0.0, 0.0, 0.0])

        # Three source nodes, each contributing its bias once
        assert network.output()[0] == pytest.approx(_sigmoid(1.5), abs=1e-12)

    def test_constant_network_depth(self, builder):
        """Test bias accumulation through a hidden layer."""
        network = builder.constant([2, 3, 1], bias=0.25, weight=0.0)

        network.process([1.0, 1.0])

        hidden = network.layers[1].activations
        assert torch.allclose(hidden, torch.full((3,), _sigmoid(0.5), dtype=torch.float64))
        assert network.output()[0] == pytest.approx(_sigmoid(0.75), abs=1e-12)

    def test_hand_computed_output(self, builder, hand_parameters):
        """Test the forward pass against values worked out by hand."""
        network = builder.from_parameters(hand_parameters)

        network.process([1.0, 0.5])

        h0 = _sigmoid(1.0 * 0.5 + 0.1 + 0.5 * 2.0 - 0.2)
        h1 = _sigmoid(1.0 * -1.0 + 0.1 + 0.5 * 0.25 - 0.2)
        expected = _sigmoid(h0 * 1.0 + 0.3 + h1 * -0.5 + 0.4)

        assert network.output()[0] == pytest.approx(expected, abs=1e-12)

    def test_destination_bias_not_used(self, builder, hand_parameters):
        """Test that the textbook per-destination bias gives a different answer."""
        network = builder.from_parameters(hand_parameters)
        network.process([1.0, 0.5])

        h0 = _sigmoid(1.0 * 0.5 + 0.5 * 2.0 + 0.3)
        h1 = _sigmoid(1.0 * -1.0 + 0.5 * 0.25 + 0.4)
        textbook = _sigmoid(h0 * 1.0 + h1 * -0.5 + 0.0)

        assert network.output()[0] != pytest.approx(textbook, abs=1e-6)

    def test_deterministic(self):
        """Test that repeated calls give bit-identical outputs."""
        network = FlappyNetworkFactory()
        inputs = [0.1, -0.3, 0.5, 0.2, 0.35]

        network.process(inputs)
        first = network.output()
        network.process(inputs)
        second = network.output()

        assert first == second

    def test_outputs_in_unit_interval(self):
        """Test that outputs are sigmoid values."""
        network = FlappyNetworkFactory()

        network.process([10.0, -10.0, 3.0, -3.0, 0.0])

        assert all(0.0 <= value <= 1.0 for value in network.output())

    def test_accepts_tensor_input(self):
        """Test that a tensor works as an input vector."""
        network = NetworkFactory()

        network.process(torch.tensor([0.2, 0.4]))

        assert len(network.output()) == 1

    def test_too_much_input(self):
        """Test that surplus input values are rejected."""
        network = NetworkFactory(shape=(2, 3, 1))

        with pytest.raises(InputSizeError, match="Too much input passed"):
            network.process([1.0, 2.0, 3.0])

    def test_short_input_zeroes_unset(self, builder, caplog):
        """Test that unset input nodes reset to 0 by default."""
        network = builder.constant([2, 1], bias=0.0, weight=1.0)

        network.process([3.0, 4.0])
        with caplog.at_level(logging.DEBUG, logger='birdbrain.networks.network'):
            network.process([1.0])

        assert "Short input: 1 of 2 values, zeroing the rest" in caplog.text
        assert network.layers[0].activations.tolist() == [1.0, 0.0]
        assert network.output()[0] == pytest.approx(_sigmoid(1.0), abs=1e-12)

    def test_short_input_retains_when_configured(self, caplog):
        """Test that unset input nodes keep stale values when asked to."""
        network = NetworkBuilder(retain_unset_inputs=True).constant(
            [2, 1], bias=0.0, weight=1.0
        )

        network.process([3.0, 4.0])
        with caplog.at_level(logging.DEBUG, logger='birdbrain.networks.network'):
            network.process([1.0])

        assert "Short input: 1 of 2 values, retaining the rest" in caplog.text
        assert network.layers[0].activations.tolist() == [1.0, 4.0]
        assert network.output()[0] == pytest.approx(_sigmoid(5.0), abs=1e-12)

    def test_output_returns_copy(self):
        """Test that editing the returned list leaves the network alone."""
        network = NetworkFactory()
        network.process([0.5, 0.5])

        output = network.output()
        output[0] = 99.0

        assert network.output()[0] != 99.0

    def test_reset_clears_activations(self):
        """Test that reset zeroes every layer."""
        network = NetworkFactory()
        network.process([0.5, 0.5])

        network.reset()

        for layer in network.layers:
            assert torch.count_nonzero(layer.activations) == 0


class TestNetworkBuilder:
    """Tests for NetworkBuilder."""

    def test_from_parameters_shape(self, builder, hand_parameters):
        """Test building from explicit values."""
        network = builder.from_parameters(hand_parameters)

        assert network.shape == (2, 2, 1)
        assert network.layers[0].weights[1, 0].item() == 2.0

    def test_from_parameters_output_weights_optional(self, builder, hand_parameters):
        """Test that output weights can be omitted."""
        del hand_parameters['layers'][-1]['weights']

        network = builder.from_parameters(hand_parameters)

        assert network.layers[-1].fan_out == 0

    def test_from_parameters_validates_dict(self, builder):
        """Test that parameters must be a dictionary."""
        with pytest.raises(InvalidShapeError, match="must be a dictionary"):
            builder.from_parameters([1, 2])

    def test_from_parameters_needs_layers(self, builder):
        """Test that parameters need a 'layers' key."""
        with pytest.raises(InvalidShapeError, match="'layers' key"):
            builder.from_parameters({'shape': [2, 1]})

    def test_from_parameters_layer_validation(self, builder):
        """Test that every layer needs biases."""
        with pytest.raises(InvalidShapeError, match="'biases' key"):
            builder.from_parameters({'layers': [{'weights': [[1.0]]}, {'biases': [0.0]}]})

    def test_from_parameters_hidden_weights_required(self, builder):
        """Test that non-output layers need weights."""
        with pytest.raises(InvalidShapeError, match="'weights' key"):
            builder.from_parameters({'layers': [{'biases': [0.0]}, {'biases': [0.0]}]})

    def test_from_parameters_declared_shape(self, builder, hand_parameters):
        """Test that a declared shape must match the layers."""
        hand_parameters['shape'] = [2, 3, 1]

        with pytest.raises(InvalidShapeError, match="Declared shape"):
            builder.from_parameters(hand_parameters)

    def test_parameters_roundtrip(self, builder):
        """Test that exported parameters rebuild the same network."""
        network = FlappyNetworkFactory()
        network.process([0.1, 0.2, 0.3, 0.4, 0.5])

        rebuilt = builder.from_parameters(builder.to_parameters(network))

        assert rebuilt.shape == network.shape
        assert rebuilt.output() == network.output()
        rebuilt.process([0.5, 0.4, 0.3, 0.2, 0.1])
        network.process([0.5, 0.4, 0.3, 0.2, 0.1])
        assert rebuilt.output() == network.output()

    def test_constant_output_bias(self, builder):
        """Test that the output bias can differ from hidden biases."""
        network = builder.constant([2, 2], bias=1.0, weight=0.5, output_bias=-1.0)

        assert network.layers[0].biases.tolist() == [1.0, 1.0]
        assert network.layers[1].biases.tolist() == [-1.0, -1.0]

    def test_clone_network_independence(self, builder):
        """Test that a clone shares no storage with the original."""
        original = NetworkFactory()
        before = original.layers[0].biases.clone()

        cloned = builder.clone(original)
        cloned.layers[0].biases[0] = 5.0
        cloned.layers[0].weights[0, 0] = 5.0

        assert torch.equal(original.layers[0].biases, before)
        assert original.layers[0].weights[0, 0].item() != 5.0

    def test_clone_keeps_input_flag(self):
        """Test that clones keep the short-input behaviour."""
        network = NetworkFactory(retain_unset_inputs=True)

        assert network.clone().retain_unset_inputs is True


class TestArchitectures:
    """Tests for preset shapes."""

    def test_flappy_shape_default(self):
        """Test the flappy world's default shape."""
        assert flappy_shape() == (5, 10, 2)

    def test_flappy_shape_custom(self):
        """Test a custom hidden size."""
        assert flappy_shape(hidden_size=4) == (5, 4, 2)

    def test_create_mlp_shape(self):
        """Test generic shapes."""
        assert create_mlp_shape(3, 3, hidden_sizes=[10]) == (3, 10, 3)
        assert create_mlp_shape(3, 2) == (3, 2)

    def test_minimal_shape(self):
        """Test the minimal shape."""
        assert minimal_shape() == (2, 1)

    def test_parse_shape(self):
        """Test parsing a comma separated shape."""
        assert parse_shape("5, 10 ,2") == (5, 10, 2)

    def test_parse_shape_invalid(self):
        """Test that non-integer entries are rejected."""
        with pytest.raises(ValueError, match="Invalid shape"):
            parse_shape("5,x,2")
