"""Query service for day entries and quick-add suggestions."""

from dataclasses import dataclass

from food_tracker.domain.entries import FoodEntry
from food_tracker.services.entries import EntryRepository

DEFAULT_LIMIT = 10


@dataclass
class _NameUsage:
    days: set[int]
    last_date: int


@dataclass
class QueryService:
    """Read-only aggregations over the entry store."""

    repository: EntryRepository

    def entries_for_date(self, date: int) -> list[FoodEntry]:
        """Return a snapshot of the entries logged on a day."""
        return self.repository.scan_by_date(date)

    def recent_names(self, limit: int = DEFAULT_LIMIT) -> list[str]:
        """Return names ordered by the latest day they were logged."""
        usage = _collect_usage(self.repository.scan_all())
        ranked = sorted(usage.items(), key=lambda item: (-item[1].last_date, item[0]))
        return [name for name, _ in ranked[:limit]]

    def popular_names(
        self, limit: int = DEFAULT_LIMIT, since: int | None = None
    ) -> list[str]:
        """Return names ordered by how many distinct days they were logged on.

        Ties fall back to the latest day logged, then to the name. When
        ``since`` is given only days on or after that epoch day are counted.
        """
        entries = self.repository.scan_all()
        if since is not None:
            entries = [entry for entry in entries if entry.date >= since]
        usage = _collect_usage(entries)
        ranked = sorted(
            usage.items(),
            key=lambda item: (-len(item[1].days), -item[1].last_date, item[0]),
        )
        return [name for name, _ in ranked[:limit]]


def _collect_usage(entries: list[FoodEntry]) -> dict[str, _NameUsage]:
    usage: dict[str, _NameUsage] = {}
    for entry in entries:
        current = usage.get(entry.name)
        if current is None:
            usage[entry.name] = _NameUsage(days={entry.date}, last_date=entry.date)
            continue
        current.days.add(entry.date)
        current.last_date = max(current.last_date, entry.date)
    return usage
