class DiceError(ValueError):
    """Base class for dice engine failures."""


class InvalidNotationError(DiceError):
    """Raised when a notation matches neither the dice grammar nor a bare integer."""

    def __init__(self, notation: str, reason: str | None = None):
        self.notation = notation
        self.reason = reason
        msg = f"Invalid dice notation: {notation!r}"
        if reason:
            msg = f"{msg} ({reason})"
        super().__init__(msg)


class InvalidDescriptorError(DiceError):
    """Raised when a descriptor is structurally impossible to resolve."""


class RandomSourceError(DiceError):
    """Raised when a random source breaks its [1, sides] contract."""
