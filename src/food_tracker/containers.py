"""Dependency container wiring for the application."""

from collections.abc import Callable
from dataclasses import dataclass

from food_tracker.adapters.sqlite_entry_repository import SqliteEntryRepository
from food_tracker.config import Settings
from food_tracker.services.csv_codec import CsvService
from food_tracker.services.entries import EntryRepository, MutationService
from food_tracker.services.live import LiveEntries
from food_tracker.services.queries import QueryService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    repository: EntryRepository
    mutation_service: MutationService
    query_service: QueryService
    csv_service: CsvService
    live_entries: LiveEntries
    close_resources: Callable[[], None]


def wire_services(settings: Settings, repository: EntryRepository) -> AppContainer:
    """Build the services around an already constructed entry store."""
    mutation_service = MutationService(repository)
    query_service = QueryService(repository)
    live_entries = LiveEntries(query_service)
    mutation_service.add_listener(live_entries.notify)
    csv_service = CsvService(repository=repository, mutation_service=mutation_service)

    def close_resources() -> None:
        close = getattr(repository, "close", None)
        if close is not None:
            close()

    return AppContainer(
        settings=settings,
        repository=repository,
        mutation_service=mutation_service,
        query_service=query_service,
        csv_service=csv_service,
        live_entries=live_entries,
        close_resources=close_resources,
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    repository = SqliteEntryRepository.create(
        resolved_settings.database_path,
        timeout_seconds=resolved_settings.busy_timeout_seconds,
    )
    return wire_services(resolved_settings, repository)
