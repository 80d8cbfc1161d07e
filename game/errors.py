"""Typed errors raised by the simulation core."""


class GameError(Exception):
    """Base class for all simulation errors."""


class OutOfBoundsError(GameError):
    """Coordinates fall outside the world grid."""

    def __init__(self, x: int, y: int):
        super().__init__(f"Coordinates ({x}, {y}) are out of bounds")
        self.x = x
        self.y = y


class UnknownStatusError(GameError):
    """A status tag that is not a defined PlayerStatus."""

    def __init__(self, value):
        super().__init__(f"Unknown status: {value!r}")
        self.value = value


class ResolutionInvariantError(GameError):
    """A player reached horde resolution in a state the rules do not allow.

    This is a programming error; the resolution cycle must abort.
    """


class ConfigurationError(GameError):
    """Settings that cannot produce a working day/night cycle."""
