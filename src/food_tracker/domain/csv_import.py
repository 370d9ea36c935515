"""Domain models for CSV import results."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ImportReport:
    """Outcome of a best-effort CSV import."""

    applied: int
    skipped: int
    increments: int
