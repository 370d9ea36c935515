"""SQLite repository for food entries."""

import logging
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from food_tracker.domain.entries import FoodEntry
from food_tracker.domain.errors import ConcurrencyViolation, StorageError
from food_tracker.services.entries import EntryRepository

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS FoodEntry (
    date INTEGER NOT NULL,
    name TEXT NOT NULL,
    quantity INTEGER NOT NULL CHECK (quantity > 0),
    PRIMARY KEY (date, name)
)
"""


@dataclass
class SqliteEntryRepository(EntryRepository):
    """SQLite-backed entry store sharing one connection behind a lock."""

    connection: sqlite3.Connection
    _lock: threading.RLock = field(default_factory=threading.RLock)

    @classmethod
    def create(
        cls, database_path: str, timeout_seconds: float = 5.0
    ) -> "SqliteEntryRepository":
        """Open the database file and make sure the schema exists."""
        try:
            connection = sqlite3.connect(
                database_path,
                timeout=timeout_seconds,
                isolation_level=None,
                check_same_thread=False,
            )
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to open database {database_path}") from exc
        repository = cls(connection=connection)
        repository.ensure_schema()
        logger.info("Opened entry store at %s", database_path)
        return repository

    def ensure_schema(self) -> None:
        """Create the FoodEntry table if it is missing."""
        self._execute(SCHEMA)

    def get(self, date: int, name: str) -> int | None:
        """Return the stored quantity, if the row exists."""
        rows = self._fetchall(
            "SELECT quantity FROM FoodEntry WHERE date = ? AND name = ?",
            (date, name),
        )
        if not rows:
            return None
        return int(rows[0][0])

    def put(self, date: int, name: str, quantity: int) -> None:
        """Insert or overwrite a row."""
        if quantity <= 0:
            raise ValueError("Stored quantity must be positive")
        self._execute(
            "INSERT INTO FoodEntry (date, name, quantity) VALUES (?, ?, ?) "
            "ON CONFLICT (date, name) DO UPDATE SET quantity = excluded.quantity",
            (date, name, quantity),
        )

    def delete(self, date: int, name: str) -> None:
        """Remove a row if present."""
        self._execute(
            "DELETE FROM FoodEntry WHERE date = ? AND name = ?", (date, name)
        )

    def scan_all(self) -> list[FoodEntry]:
        """Return every stored row."""
        rows = self._fetchall("SELECT date, name, quantity FROM FoodEntry")
        return [_parse_row(row) for row in rows]

    def scan_by_date(self, date: int) -> list[FoodEntry]:
        """Return the rows logged on a day."""
        rows = self._fetchall(
            "SELECT date, name, quantity FROM FoodEntry WHERE date = ?", (date,)
        )
        return [_parse_row(row) for row in rows]

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Hold the write lock and wrap the enclosed calls in one transaction."""
        with self._lock:
            if self._in_transaction():
                yield
                return
            self._begin()
            try:
                yield
                self._execute("COMMIT")
            except BaseException:
                self._rollback()
                raise

    def close(self) -> None:
        """Close the underlying connection."""
        with self._lock:
            self.connection.close()

    def _in_transaction(self) -> bool:
        try:
            return self.connection.in_transaction
        except sqlite3.Error as exc:
            raise StorageError("Entry store connection is unusable") from exc

    def _begin(self) -> None:
        try:
            self.connection.execute("BEGIN IMMEDIATE")
        except sqlite3.OperationalError as exc:
            if "locked" in str(exc).lower():
                raise ConcurrencyViolation(
                    "Entry store is locked by another writer"
                ) from exc
            raise StorageError("Failed to start transaction") from exc
        except sqlite3.Error as exc:
            raise StorageError("Failed to start transaction") from exc

    def _rollback(self) -> None:
        try:
            if self.connection.in_transaction:
                self.connection.execute("ROLLBACK")
        except sqlite3.Error:
            logger.exception("Failed to roll back entry store transaction")

    def _execute(self, sql: str, params: tuple[object, ...] = ()) -> None:
        with self._lock:
            try:
                self.connection.execute(sql, params)
            except (sqlite3.Error, OverflowError) as exc:
                raise StorageError(f"Entry store statement failed: {exc}") from exc

    def _fetchall(
        self, sql: str, params: tuple[object, ...] = ()
    ) -> list[tuple[object, ...]]:
        with self._lock:
            try:
                return self.connection.execute(sql, params).fetchall()
            except (sqlite3.Error, OverflowError) as exc:
                raise StorageError(f"Entry store query failed: {exc}") from exc


def _parse_row(row: tuple[object, ...]) -> FoodEntry:
    return FoodEntry(date=int(row[0]), name=str(row[1]), quantity=int(row[2]))
