"""
Exceptions raised by the birdbrain engine.

All of them signal programmer or configuration errors. Nothing in the
engine retries; callers are expected to let these propagate.
"""


class BirdbrainError(Exception):
    """Base class for all birdbrain errors."""


class InvalidShapeError(BirdbrainError, ValueError):
    """A network shape or parameter set is malformed."""


class ShapeMismatchError(BirdbrainError, ValueError):
    """Two networks combined together do not share a shape."""


class InputSizeError(BirdbrainError, ValueError):
    """More input values were passed than the input layer holds."""


class PopulationNotExhaustedError(BirdbrainError, RuntimeError):
    """Evolution was requested before every agent reported its fitness."""


class ConfigurationError(BirdbrainError, ValueError):
    """A configuration value is out of range."""
