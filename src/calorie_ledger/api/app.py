"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status

from calorie_ledger.api.models import (
    BudgetOut,
    DayView,
    EntryOut,
    LogRequest,
    LogResponse,
    ShiftRequest,
    SummaryOut,
    TranscriptRequest,
    ViewDateRequest,
)
from calorie_ledger.app_logging import configure_logging
from calorie_ledger.containers import AppContainer
from calorie_ledger.domain.entries import Entry
from calorie_ledger.domain.errors import PersistenceFailure
from calorie_ledger.services.session import LedgerSession, LogOutcome


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            app.state.container.session.load()
        except PersistenceFailure:
            logger.exception("Failed to load ledger; starting with an empty view")
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/day")
    async def get_day(request: Request) -> DayView:
        """Return the summary and entries for the view date."""
        return _day_view(_session(request))

    @app.post("/day/shift")
    async def shift_day(payload: ShiftRequest, request: Request) -> DayView:
        """Move the view date by whole days."""
        session = _session(request)
        try:
            session.shift_view_date(payload.days)
        except OverflowError as exc:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="That date is out of range.",
            ) from exc
        return _day_view(session)

    @app.post("/day/today")
    async def go_to_today(request: Request) -> DayView:
        """Reset the view date to today."""
        session = _session(request)
        session.go_to_today()
        return _day_view(session)

    @app.put("/day")
    async def set_day(payload: ViewDateRequest, request: Request) -> DayView:
        """Jump to a specific view date."""
        session = _session(request)
        session.go_to(payload.view_date)
        return _day_view(session)

    @app.post("/entries")
    async def log_entries(payload: LogRequest, request: Request) -> LogResponse:
        """Extract entries from free text and log them on the view date."""
        session = _session(request)
        outcome = await session.log_utterance(payload.text)
        return _log_response(session, outcome)

    @app.delete("/entries/{entry_id}")
    async def delete_entry(entry_id: str, request: Request) -> DayView:
        """Delete an entry by id."""
        session = _session(request)
        try:
            session.delete_entry(entry_id)
        except PersistenceFailure as exc:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Could not save the ledger. Please try again.",
            ) from exc
        return _day_view(session)

    @app.post("/dictation/transcript")
    async def dictation_transcript(
        payload: TranscriptRequest, request: Request
    ) -> dict[str, object]:
        """Record the latest dictation transcript without logging it."""
        buffer = _session(request).dictation
        if payload.final:
            buffer.on_final(payload.text)
        else:
            buffer.on_transcript(payload.text)
        return {"text": buffer.text, "final": buffer.is_final}

    @app.post("/dictation/submit")
    async def dictation_submit(request: Request) -> LogResponse:
        """Log the buffered dictation transcript."""
        session = _session(request)
        outcome = await session.submit_dictation()
        return _log_response(session, outcome)

    return app


def _session(request: Request) -> LedgerSession:
    container: AppContainer = request.app.state.container
    return container.session


def _entry_out(entry: Entry) -> EntryOut:
    return EntryOut(
        id=entry.id,
        timestamp=entry.timestamp.isoformat(),
        type=entry.type.value,
        item=entry.item,
        calories=entry.calories,
        quantity=entry.quantity,
        original_text=entry.original_text,
    )


def _day_view(session: LedgerSession) -> DayView:
    summary = session.summary()
    return DayView(
        view_date=session.view_date,
        label=session.view_date_label(),
        budget=BudgetOut(
            daily_budget=session.budget.daily_budget,
            target_deficit=session.budget.target_deficit,
        ),
        summary=SummaryOut(
            consumed=summary.consumed,
            burned=summary.burned,
            remaining=summary.remaining,
            percentage=summary.percentage,
            tier=summary.tier.value,
        ),
        entries=[_entry_out(entry) for entry in session.day_entries()],
    )


def _log_response(session: LedgerSession, outcome: LogOutcome) -> LogResponse:
    return LogResponse(
        status=outcome.status.value,
        message=outcome.message,
        entries=[_entry_out(entry) for entry in outcome.entries],
        day=_day_view(session),
    )
