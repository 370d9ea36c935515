"""Error types raised by the food tracker core."""


class FoodTrackerError(Exception):
    """Base class for food tracker errors."""


class StorageError(FoodTrackerError):
    """Raised when the entry store cannot complete an operation."""


class ConcurrencyViolation(StorageError):
    """Raised when the store cannot serialize a write against another writer."""


class ParseError(FoodTrackerError):
    """Raised for a CSV line that cannot be imported."""

    def __init__(self, line: str, reason: str) -> None:
        super().__init__(f"{reason}: {line!r}")
        self.line = line
        self.reason = reason
