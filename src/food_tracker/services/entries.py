"""Mutation service for logged food quantities."""

import logging
from collections.abc import Callable
from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from typing import Protocol

from food_tracker.domain.entries import (
    FORBIDDEN_NAME_CHARACTERS,
    MAX_QUANTITY,
    FoodEntry,
)

logger = logging.getLogger(__name__)

CommitListener = Callable[[int], None]


class EntryRepository(Protocol):
    """Persistence interface for food entries keyed by (date, name)."""

    def get(self, date: int, name: str) -> int | None:
        """Return the stored quantity, if the row exists."""

    def put(self, date: int, name: str, quantity: int) -> None:
        """Insert or overwrite a row with a positive quantity."""

    def delete(self, date: int, name: str) -> None:
        """Remove a row if present."""

    def scan_all(self) -> list[FoodEntry]:
        """Return every stored row."""

    def scan_by_date(self, date: int) -> list[FoodEntry]:
        """Return the rows logged on a day."""

    def transaction(self) -> AbstractContextManager[None]:
        """Run the enclosed calls as one serialized atomic unit."""


@dataclass
class MutationService:
    """Service that applies add/remove operations atomically."""

    repository: EntryRepository
    listeners: list[CommitListener] = field(default_factory=list)

    def add_listener(self, listener: CommitListener) -> None:
        """Register a callback invoked with the date of each committed change."""
        self.listeners.append(listener)

    def add_food(self, date: int, name: str, times: int = 1) -> int:
        """Increment a food's quantity for a day, inserting it when absent."""
        _require_name(name)
        with self.repository.transaction():
            current = self.repository.get(date, name) or 0
            if times <= 0:
                return current
            quantity = current + times
            if quantity > MAX_QUANTITY:
                raise ValueError(f"Quantity for {name!r} would exceed {MAX_QUANTITY}")
            self.repository.put(date, name, quantity)
        logger.debug("Logged %s x%d on day %d (now %d)", name, times, date, quantity)
        self._notify(date)
        return quantity

    def remove_one(self, date: int, name: str) -> int:
        """Decrement a food's quantity, deleting the row when it reaches zero."""
        with self.repository.transaction():
            current = self.repository.get(date, name)
            if current is None:
                return 0
            remaining = max(current - 1, 0)
            if remaining == 0:
                self.repository.delete(date, name)
            else:
                self.repository.put(date, name, remaining)
        logger.debug("Removed one %s on day %d (now %d)", name, date, remaining)
        self._notify(date)
        return remaining

    def _notify(self, date: int) -> None:
        for listener in list(self.listeners):
            try:
                listener(date)
            except Exception:
                logger.exception("Commit listener failed for day %d", date)


def _require_name(name: str) -> None:
    if not name or not name.strip():
        raise ValueError("Food name must not be blank")
    if FORBIDDEN_NAME_CHARACTERS.intersection(name):
        raise ValueError("Food name must not contain commas or line breaks")
