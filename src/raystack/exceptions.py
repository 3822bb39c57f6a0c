"""Exceptions raised by the raystack engine."""


class RayStackError(Exception):
    """Base class for all engine errors."""


class SceneConfigurationError(RayStackError, ValueError):
    """A shape or scene was built with parameters the engine cannot use."""


class InvariantViolation(RayStackError, AssertionError):
    """An internal postcondition failed; indicates a bug, not bad input."""


class MaterialStackUnderflow(RayStackError, IndexError):
    """Attempted to pop the ambient medium off a material stack."""
