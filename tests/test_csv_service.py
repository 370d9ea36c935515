"""Tests for CSV export and import."""

from datetime import date

from food_tracker.adapters.sqlite_entry_repository import SqliteEntryRepository
from food_tracker.domain.entries import MAX_QUANTITY, FoodEntry, to_epoch_day
from food_tracker.services.csv_codec import CsvService
from food_tracker.services.entries import MutationService
from food_tracker.services.queries import QueryService
from tests.conftest import InMemoryEntryRepository

JAN_1_2024 = 19723


def _service(repository: InMemoryEntryRepository) -> CsvService:
    return CsvService(
        repository=repository, mutation_service=MutationService(repository)
    )


def test_export_writes_header_and_iso_dates(
    repository: InMemoryEntryRepository,
) -> None:
    repository.put(JAN_1_2024 + 14, "Bread", 1)
    repository.put(JAN_1_2024 + 14, "Apple", 2)
    repository.put(JAN_1_2024, "Rice", 3)

    text = _service(repository).export_csv()

    assert text == (
        "date,name,quantity\n"
        "2024-01-01,Rice,3\n"
        "2024-01-15,Apple,2\n"
        "2024-01-15,Bread,1\n"
    )


def test_export_of_empty_store_is_header_only(
    repository: InMemoryEntryRepository,
) -> None:
    assert _service(repository).export_csv() == "date,name,quantity\n"


def test_import_into_empty_store(repository: InMemoryEntryRepository) -> None:
    report = _service(repository).import_csv("date,name,quantity\n2024-01-01,Rice,3\n")

    entries = QueryService(repository).entries_for_date(to_epoch_day(date(2024, 1, 1)))
    assert [(entry.name, entry.quantity) for entry in entries] == [("Rice", 3)]
    assert report.applied == 1
    assert report.increments == 3


def test_import_skips_malformed_lines(repository: InMemoryEntryRepository) -> None:
    text = (
        "date,name,quantity\n"
        "not-a-date,Apple,2\n"
        "2024-01-01,Bread\n"
        "2024-01-01,,4\n"
        "2024-01-01,Rice,2\n"
    )

    report = _service(repository).import_csv(text)

    assert repository.triples() == {(JAN_1_2024, "Rice", 2)}
    assert report.applied == 1
    assert report.skipped == 3


def test_import_defaults_unparseable_quantity_to_one(
    repository: InMemoryEntryRepository,
) -> None:
    _service(repository).import_csv("date,name,quantity\n2024-01-01,Tea,lots\n")

    assert repository.triples() == {(JAN_1_2024, "Tea", 1)}


def test_import_accumulates_onto_existing_rows(
    repository: InMemoryEntryRepository,
) -> None:
    repository.put(JAN_1_2024, "Rice", 1)

    _service(repository).import_csv(
        "date,name,quantity\n2024-01-01,Rice,2\n2024-01-01,Rice,1\n"
    )

    assert repository.get(JAN_1_2024, "Rice") == 4


def test_import_accepts_epoch_day_dates(repository: InMemoryEntryRepository) -> None:
    _service(repository).import_csv(
        f"date_epoch_day,name,quantity\n{JAN_1_2024},Egg,2\n"
    )

    assert repository.triples() == {(JAN_1_2024, "Egg", 2)}


def test_import_ignores_non_positive_quantity(
    repository: InMemoryEntryRepository,
) -> None:
    report = _service(repository).import_csv("date,name,quantity\n2024-01-01,Egg,0\n")

    assert repository.rows == {}
    assert report.increments == 0


def test_import_handles_crlf_and_blank_lines(
    repository: InMemoryEntryRepository,
) -> None:
    text = "date,name,quantity\r\n2024-01-01,Rice,1\r\n\r\n2024-01-02,Rice,1\r\n"

    report = _service(repository).import_csv(text)

    assert repository.triples() == {
        (JAN_1_2024, "Rice", 1),
        (JAN_1_2024 + 1, "Rice", 1),
    }
    assert report.skipped == 0


def test_first_line_is_always_treated_as_header(
    repository: InMemoryEntryRepository,
) -> None:
    _service(repository).import_csv("2024-01-01,Rice,3\n2024-01-02,Oats,1\n")

    assert repository.triples() == {(JAN_1_2024 + 1, "Oats", 1)}


def test_export_import_round_trip() -> None:
    source = InMemoryEntryRepository()
    source.put(JAN_1_2024, "Rice", 3)
    source.put(JAN_1_2024, "rice", 1)
    source.put(JAN_1_2024 + 40, "Green tea", 2)
    source.put(-5, "Old bread", 1)
    target = InMemoryEntryRepository()

    _service(target).import_csv(_service(source).export_csv())

    assert target.triples() == source.triples()


def test_oversized_quantity_line_does_not_abort_import(
    sqlite_repository: SqliteEntryRepository,
) -> None:
    service = CsvService(
        repository=sqlite_repository,
        mutation_service=MutationService(sqlite_repository),
    )

    report = service.import_csv(
        "date,name,quantity\n"
        "2024-01-01,Rice,99999999999999999999\n"
        "2024-01-02,Oats,1\n"
    )

    assert sqlite_repository.scan_all() == [
        FoodEntry(date=JAN_1_2024 + 1, name="Oats", quantity=1)
    ]
    assert report.applied == 1
    assert report.skipped == 1


def test_import_skips_line_that_would_overflow_existing_quantity(
    repository: InMemoryEntryRepository,
) -> None:
    repository.put(JAN_1_2024, "Rice", MAX_QUANTITY)

    report = _service(repository).import_csv(
        "date,name,quantity\n2024-01-01,Rice,1\n2024-01-01,Oats,2\n"
    )

    assert repository.triples() == {
        (JAN_1_2024, "Rice", MAX_QUANTITY),
        (JAN_1_2024, "Oats", 2),
    }
    assert report.skipped == 1


def test_import_requires_dashed_iso_dates(repository: InMemoryEntryRepository) -> None:
    report = _service(repository).import_csv(
        "date,name,quantity\n"
        "20240101,Rice,1\n"
        "2024-W01-1,Rice,1\n"
        "2024-01-01,Oats,1\n"
    )

    assert repository.triples() == {(JAN_1_2024, "Oats", 1)}
    assert report.skipped == 2
