"""
Error types shared by the game engine services.

Both subclass ValueError so the routes can keep translating them into
400 responses the same way they handle any other bad move.
"""


class InvalidStateError(ValueError):
    """The caller handed the engine a board it cannot work with."""


class ConfigurationError(ValueError):
    """An AI configuration (or environment knob) is out of range."""
