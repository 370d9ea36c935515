"""Shared test fixtures."""

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from food_tracker.adapters.sqlite_entry_repository import SqliteEntryRepository
from food_tracker.config import Settings
from food_tracker.containers import AppContainer, build_container, wire_services
from food_tracker.domain.entries import FoodEntry
from food_tracker.services.entries import EntryRepository


@dataclass
class InMemoryEntryRepository(EntryRepository):
    """In-memory entry store for tests."""

    rows: dict[tuple[int, str], int] = field(default_factory=dict)
    transactions: int = 0
    _lock: threading.RLock = field(default_factory=threading.RLock)

    def get(self, date: int, name: str) -> int | None:
        return self.rows.get((date, name))

    def put(self, date: int, name: str, quantity: int) -> None:
        if quantity <= 0:
            raise ValueError("Stored quantity must be positive")
        self.rows[(date, name)] = quantity

    def delete(self, date: int, name: str) -> None:
        self.rows.pop((date, name), None)

    def scan_all(self) -> list[FoodEntry]:
        return [
            FoodEntry(date=date, name=name, quantity=quantity)
            for (date, name), quantity in self.rows.items()
        ]

    def scan_by_date(self, date: int) -> list[FoodEntry]:
        return [entry for entry in self.scan_all() if entry.date == date]

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            snapshot = dict(self.rows)
            self.transactions += 1
            try:
                yield
            except BaseException:
                self.rows = snapshot
                raise

    def triples(self) -> set[tuple[int, str, int]]:
        return {(date, name, quantity) for (date, name), quantity in self.rows.items()}


@pytest.fixture
def settings() -> Settings:
    return Settings(database_path=":memory:")


@pytest.fixture
def repository() -> InMemoryEntryRepository:
    return InMemoryEntryRepository()


@pytest.fixture
def database_path(tmp_path: Path) -> str:
    return str(tmp_path / "food.db")


@pytest.fixture
def sqlite_repository(database_path: str) -> Iterator[SqliteEntryRepository]:
    repository = SqliteEntryRepository.create(database_path)
    yield repository
    repository.close()


@pytest.fixture
def memory_container(
    settings: Settings, repository: InMemoryEntryRepository
) -> AppContainer:
    return wire_services(settings, repository)


@pytest.fixture
def container(settings: Settings) -> Iterator[AppContainer]:
    app_container = build_container(settings)
    yield app_container
    app_container.close_resources()
