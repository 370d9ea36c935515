"""FastAPI application factory."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date

from fastapi import FastAPI, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse

from food_tracker.api.models import (
    AddEntryRequest,
    DayEntriesResponse,
    EntryPayload,
    ImportResponse,
    NamesResponse,
)
from food_tracker.app_logging import configure_logging
from food_tracker.containers import AppContainer
from food_tracker.domain.entries import to_epoch_day
from food_tracker.domain.errors import StorageError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(StorageError)
    async def storage_error_handler(
        request: Request, exc: StorageError
    ) -> JSONResponse:
        logger.error("Storage failure on %s %s: %s", request.method, request.url, exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "Storage failure"},
        )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": str(exc)},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/days/{day}/entries")
    async def day_entries(day: date, request: Request) -> DayEntriesResponse:
        """Return the entries logged on a day."""
        state_container: AppContainer = request.app.state.container
        entries = await asyncio.to_thread(
            state_container.query_service.entries_for_date, to_epoch_day(day)
        )
        return DayEntriesResponse(
            date=day,
            entries=[
                EntryPayload.from_entry(entry)
                for entry in sorted(entries, key=lambda entry: entry.name)
            ],
        )

    @app.post("/days/{day}/entries")
    async def add_entry(
        day: date, body: AddEntryRequest, request: Request
    ) -> EntryPayload:
        """Log one more unit of a food on a day."""
        state_container: AppContainer = request.app.state.container
        quantity = await asyncio.to_thread(
            state_container.mutation_service.add_food, to_epoch_day(day), body.name
        )
        return EntryPayload(name=body.name, quantity=quantity)

    @app.delete("/days/{day}/entries/{name}")
    async def remove_entry(day: date, name: str, request: Request) -> EntryPayload:
        """Remove one unit of a food from a day."""
        state_container: AppContainer = request.app.state.container
        quantity = await asyncio.to_thread(
            state_container.mutation_service.remove_one, to_epoch_day(day), name
        )
        return EntryPayload(name=name, quantity=quantity)

    @app.get("/suggestions/recent")
    async def recent_names(request: Request) -> NamesResponse:
        """Return recently logged food names."""
        state_container: AppContainer = request.app.state.container
        names = await asyncio.to_thread(
            state_container.query_service.recent_names,
            state_container.settings.suggestion_limit,
        )
        return NamesResponse(names=names)

    @app.get("/suggestions/popular")
    async def popular_names(
        request: Request, since_days: int | None = Query(default=None, ge=1)
    ) -> NamesResponse:
        """Return food names logged on the most distinct days."""
        state_container: AppContainer = request.app.state.container
        window = (
            since_days
            if since_days is not None
            else state_container.settings.popular_window_days
        )
        since = to_epoch_day(date.today()) - window if window is not None else None
        names = await asyncio.to_thread(
            state_container.query_service.popular_names,
            state_container.settings.suggestion_limit,
            since,
        )
        return NamesResponse(names=names)

    @app.get("/export", response_class=PlainTextResponse)
    async def export_csv(request: Request) -> PlainTextResponse:
        """Return every entry as CSV."""
        state_container: AppContainer = request.app.state.container
        text = await asyncio.to_thread(state_container.csv_service.export_csv)
        return PlainTextResponse(text, media_type="text/csv")

    @app.post("/import")
    async def import_csv(request: Request) -> ImportResponse:
        """Import a CSV body, skipping lines that cannot be parsed."""
        state_container: AppContainer = request.app.state.container
        raw = await request.body()
        try:
            text = raw.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="CSV body must be UTF-8",
            ) from exc
        report = await asyncio.to_thread(state_container.csv_service.import_csv, text)
        return ImportResponse.from_report(report)

    return app
