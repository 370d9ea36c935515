"""CSV export and best-effort import of food entries."""

import logging
import re
from dataclasses import dataclass
from datetime import date

from food_tracker.domain.csv_import import ImportReport
from food_tracker.domain.entries import MAX_QUANTITY, from_epoch_day, to_epoch_day
from food_tracker.domain.errors import ParseError
from food_tracker.services.entries import EntryRepository, MutationService

logger = logging.getLogger(__name__)

CSV_HEADER = "date,name,quantity"
MIN_FIELDS = 3
ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


@dataclass(frozen=True)
class CsvLine:
    """A parsed import line."""

    date: int
    name: str
    quantity: int


@dataclass
class CsvService:
    """Serializes the entry store to CSV and replays CSV through add_food."""

    repository: EntryRepository
    mutation_service: MutationService

    def export_csv(self) -> str:
        """Return every stored entry as CSV text, ordered by date then name."""
        entries = sorted(
            self.repository.scan_all(), key=lambda entry: (entry.date, entry.name)
        )
        lines = [CSV_HEADER]
        lines.extend(
            f"{from_epoch_day(entry.date).isoformat()},{entry.name},{entry.quantity}"
            for entry in entries
        )
        return "\n".join(lines) + "\n"

    def import_csv(self, text: str) -> ImportReport:
        """Apply each well-formed line as repeated increments; skip the rest."""
        applied = 0
        skipped = 0
        increments = 0
        for raw_line in text.splitlines()[1:]:
            if not raw_line.strip():
                continue
            try:
                line = parse_line(raw_line)
            except ParseError as exc:
                logger.debug("Skipping CSV line: %s", exc)
                skipped += 1
                continue
            times = max(line.quantity, 0)
            try:
                self.mutation_service.add_food(line.date, line.name, times=times)
            except ValueError as exc:
                logger.debug("Skipping CSV line %r: %s", raw_line, exc)
                skipped += 1
                continue
            applied += 1
            increments += times
        logger.info(
            "Imported %d CSV lines (%d skipped, %d increments)",
            applied,
            skipped,
            increments,
        )
        return ImportReport(applied=applied, skipped=skipped, increments=increments)


def parse_line(line: str) -> CsvLine:
    """Parse one CSV data line, raising ParseError when it is unusable."""
    parts = line.split(",")
    if len(parts) < MIN_FIELDS:
        raise ParseError(line, "expected at least 3 fields")
    epoch_day = _parse_day(parts[0].strip())
    if epoch_day is None:
        raise ParseError(line, "unparseable date")
    name = parts[1]
    if not name.strip():
        raise ParseError(line, "blank name")
    quantity = _parse_quantity(parts[2])
    if quantity > MAX_QUANTITY:
        raise ParseError(line, "quantity too large")
    return CsvLine(date=epoch_day, name=name, quantity=quantity)


def _parse_day(value: str) -> int | None:
    if ISO_DATE.fullmatch(value):
        try:
            return to_epoch_day(date.fromisoformat(value))
        except ValueError:
            return None
    # Older exports wrote the raw epoch day.
    if not value.lstrip("-").isdecimal():
        return None
    epoch_day = int(value)
    try:
        from_epoch_day(epoch_day)
    except (ValueError, OverflowError):
        return None
    return epoch_day


def _parse_quantity(value: str) -> int:
    try:
        return int(value.strip())
    except ValueError:
        return 1
