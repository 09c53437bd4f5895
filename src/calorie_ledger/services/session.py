"""Session controller for natural-language logging."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta, tzinfo
from enum import StrEnum

from calorie_ledger.domain.budget import BudgetConfig
from calorie_ledger.domain.entries import Entry, create_entry
from calorie_ledger.domain.errors import InvalidEntry, PersistenceFailure
from calorie_ledger.domain.extraction import (
    ExtractionErr,
    ExtractionErrorKind,
    ExtractionResult,
)
from calorie_ledger.domain.summary import DaySummary
from calorie_ledger.services.dictation import DictationBuffer
from calorie_ledger.services.extraction import ExtractionService
from calorie_ledger.services.ledger import LedgerStore
from calorie_ledger.services.summary import summarize

logger = logging.getLogger(__name__)

NOT_UNDERSTOOD_MESSAGE = (
    "I couldn't understand that. Try '2 eggs' or '30 mins running'."
)
FAILED_MESSAGE = "Something went wrong. Please try again."
EMPTY_INPUT_MESSAGE = "Describe what you ate or the activity you did."
BUSY_MESSAGE = "Still working on your last entry."


class SessionState(StrEnum):
    """Logging state of a session."""

    IDLE = "IDLE"
    PROCESSING = "PROCESSING"


class LogStatus(StrEnum):
    """Result of a single logging attempt."""

    APPLIED = "APPLIED"
    NOT_UNDERSTOOD = "NOT_UNDERSTOOD"
    FAILED = "FAILED"
    EMPTY_INPUT = "EMPTY_INPUT"
    BUSY = "BUSY"


@dataclass(frozen=True)
class LogOutcome:
    """User-facing outcome of a logging attempt."""

    status: LogStatus
    message: str | None = None
    entries: list[Entry] = field(default_factory=list)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class LedgerSession:
    """Single-user session tying extraction, the ledger and the view date."""

    ledger_store: LedgerStore
    extraction_service: ExtractionService
    budget: BudgetConfig
    user_context: str
    timezone: tzinfo = UTC
    clock: Callable[[], datetime] = _utc_now
    dictation: DictationBuffer = field(default_factory=DictationBuffer)
    state: SessionState = field(default=SessionState.IDLE, init=False)
    _view_date: date = field(init=False)
    _summary: DaySummary | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        self._view_date = self.today()

    @property
    def view_date(self) -> date:
        """Return the calendar day currently being viewed."""
        return self._view_date

    def today(self) -> date:
        """Return the current local date."""
        return self.clock().astimezone(self.timezone).date()

    def load(self) -> None:
        """Reload the ledger from storage."""
        self.ledger_store.load()
        self._summary = None

    def shift_view_date(self, days: int) -> date:
        """Move the view date by whole days."""
        return self.go_to(self._view_date + timedelta(days=days))

    def go_to(self, day: date) -> date:
        """Jump the view date to a specific day."""
        self._view_date = day
        self._summary = None
        return self._view_date

    def go_to_today(self) -> date:
        """Reset the view date to the current local date."""
        return self.go_to(self.today())

    def view_date_label(self) -> str:
        """Return a short label for the view date."""
        today = self.today()
        if self._view_date == today:
            return "Today"
        if self._view_date == today - timedelta(days=1):
            return "Yesterday"
        return f"{self._view_date:%b} {self._view_date.day}, {self._view_date.year}"

    def day_entries(self) -> list[Entry]:
        """Return entries for the view date in creation order."""
        return self.ledger_store.entries_on(self._view_date, self.timezone)

    def summary(self) -> DaySummary:
        """Return the energy balance for the view date."""
        if self._summary is None:
            self._summary = summarize(self.day_entries(), self.budget)
        return self._summary

    async def log_utterance(self, text: str) -> LogOutcome:
        """Extract entries from free text and append them to the ledger."""
        if self.state is SessionState.PROCESSING:
            logger.info("Ignoring log request while another is processing")
            return LogOutcome(status=LogStatus.BUSY, message=BUSY_MESSAGE)
        self.state = SessionState.PROCESSING
        view_date = self._view_date
        try:
            result = await self.extraction_service.try_extract(
                text, self.user_context
            )
            return self._apply(result, text, view_date)
        finally:
            self.state = SessionState.IDLE

    async def submit_dictation(self) -> LogOutcome:
        """Log the buffered dictation transcript."""
        outcome = await self.log_utterance(self.dictation.text)
        if outcome.status is LogStatus.APPLIED:
            self.dictation.reset()
        return outcome

    def delete_entry(self, entry_id: str) -> None:
        """Delete an entry; unknown ids are ignored."""
        self.ledger_store.remove(entry_id)
        self._summary = None

    def _apply(
        self, result: ExtractionResult, text: str, view_date: date
    ) -> LogOutcome:
        if isinstance(result, ExtractionErr):
            if result.kind is ExtractionErrorKind.EMPTY_INPUT:
                return LogOutcome(
                    status=LogStatus.EMPTY_INPUT, message=EMPTY_INPUT_MESSAGE
                )
            return LogOutcome(status=LogStatus.FAILED, message=FAILED_MESSAGE)

        timestamp = self._entry_timestamp(view_date)
        entries: list[Entry] = []
        for candidate in result.candidates:
            try:
                entries.append(
                    create_entry(
                        entry_type=candidate.entry_type,
                        item=candidate.item,
                        calories=candidate.calories,
                        quantity=candidate.quantity,
                        original_text=text,
                        timestamp=timestamp,
                    )
                )
            except InvalidEntry as exc:
                logger.warning("Dropping invalid candidate %r: %s", candidate.item, exc)
        if not entries:
            return LogOutcome(
                status=LogStatus.NOT_UNDERSTOOD, message=NOT_UNDERSTOOD_MESSAGE
            )

        try:
            self.ledger_store.append_all(entries)
        except PersistenceFailure:
            return LogOutcome(status=LogStatus.FAILED, message=FAILED_MESSAGE)
        self._summary = None
        return LogOutcome(status=LogStatus.APPLIED, entries=entries)

    def _entry_timestamp(self, view_date: date) -> datetime:
        # Day the request was submitted on, at the wall-clock time of logging.
        now = self.clock().astimezone(self.timezone)
        return datetime.combine(
            view_date, now.time().replace(microsecond=0), tzinfo=self.timezone
        )
