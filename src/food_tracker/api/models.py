"""Pydantic models for the food tracker HTTP API."""

from datetime import date

from pydantic import BaseModel, Field

from food_tracker.domain.csv_import import ImportReport
from food_tracker.domain.entries import FoodEntry


class AddEntryRequest(BaseModel):
    """Body for logging one more unit of a food."""

    name: str = Field(min_length=1)


class EntryPayload(BaseModel):
    """Quantity of a food on the requested day."""

    name: str
    quantity: int

    @classmethod
    def from_entry(cls, entry: FoodEntry) -> "EntryPayload":
        return cls(name=entry.name, quantity=entry.quantity)


class DayEntriesResponse(BaseModel):
    """Entries logged on a day."""

    date: date
    entries: list[EntryPayload]


class NamesResponse(BaseModel):
    """Ranked quick-add suggestions."""

    names: list[str]


class ImportResponse(BaseModel):
    """Counts from a CSV import."""

    applied: int
    skipped: int
    increments: int

    @classmethod
    def from_report(cls, report: ImportReport) -> "ImportResponse":
        return cls(
            applied=report.applied,
            skipped=report.skipped,
            increments=report.increments,
        )
