"""Domain models for logged food entries."""

from dataclasses import dataclass
from datetime import date

EPOCH = date(1970, 1, 1)
# Largest value a SQLite INTEGER column can hold.
MAX_QUANTITY = 2**63 - 1
FORBIDDEN_NAME_CHARACTERS = frozenset(",\r\n")


@dataclass(frozen=True)
class FoodEntry:
    """Quantity of a named food logged on an epoch day."""

    date: int
    name: str
    quantity: int


def to_epoch_day(day: date) -> int:
    """Return the number of days between the Unix epoch and ``day``."""
    return day.toordinal() - EPOCH.toordinal()


def from_epoch_day(epoch_day: int) -> date:
    """Return the calendar date for an epoch day."""
    return date.fromordinal(EPOCH.toordinal() + epoch_day)
