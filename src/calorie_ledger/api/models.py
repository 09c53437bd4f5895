"""Pydantic models for the HTTP API."""

from datetime import date

from pydantic import BaseModel, Field


class LogRequest(BaseModel):
    """Free-form text to log."""

    text: str


class ShiftRequest(BaseModel):
    """Number of days to move the view date by."""

    days: int


class ViewDateRequest(BaseModel):
    """Explicit view date."""

    view_date: date


class TranscriptRequest(BaseModel):
    """Dictation transcript update."""

    text: str
    final: bool = False


class EntryOut(BaseModel):
    """Entry as shown in the day list."""

    id: str
    timestamp: str
    type: str
    item: str
    calories: int
    quantity: str
    original_text: str


class SummaryOut(BaseModel):
    """Energy balance for the view date."""

    consumed: int
    burned: int
    remaining: int
    percentage: float = Field(ge=0.0, le=100.0)
    tier: str


class BudgetOut(BaseModel):
    """Budget figures shown next to the summary."""

    daily_budget: int
    target_deficit: int


class DayView(BaseModel):
    """Everything the client needs to render one day."""

    view_date: date
    label: str
    budget: BudgetOut
    summary: SummaryOut
    entries: list[EntryOut]


class LogResponse(BaseModel):
    """Outcome of a logging attempt plus the refreshed day."""

    status: str
    message: str | None
    entries: list[EntryOut]
    day: DayView
