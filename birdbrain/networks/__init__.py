"""
Neural network infrastructure for evolved agents.

This module provides:
- Network: layered feedforward network with forward propagation
- NetworkBuilder: random, constant and explicit-parameter construction
- Preset shapes for the flappy world
"""
from .network import (
    DTYPE,
    Layer,
    Network,
    Node,
    sigmoid,
    validate_shape,
)
from .builder import NetworkBuilder
from .architectures import (
    FLAPPY_ACTIONS,
    FLAPPY_SENSORS,
    create_mlp_shape,
    flappy_shape,
    minimal_shape,
    parse_shape,
)

__all__ = [
    # Network
    'DTYPE',
    'Layer',
    'Network',
    'Node',
    'sigmoid',
    'validate_shape',

    # Builder
    'NetworkBuilder',

    # Shapes
    'FLAPPY_ACTIONS',
    'FLAPPY_SENSORS',
    'create_mlp_shape',
    'flappy_shape',
    'minimal_shape',
    'parse_shape',
]
