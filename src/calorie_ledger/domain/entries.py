"""Domain models for logged calorie entries."""

from dataclasses import dataclass, field
from datetime import date, datetime, tzinfo
from enum import StrEnum
from uuid import uuid4

from calorie_ledger.domain.errors import InvalidEntry


class EntryType(StrEnum):
    """Classification of a logged event."""

    FOOD = "FOOD"
    EXERCISE = "EXERCISE"
    UNKNOWN = "UNKNOWN"


STORABLE_TYPES = frozenset({EntryType.FOOD, EntryType.EXERCISE})


@dataclass(frozen=True)
class Entry:
    """A single food or exercise event in the ledger."""

    id: str
    timestamp: datetime
    type: EntryType
    item: str
    calories: int
    quantity: str
    original_text: str

    def local_day(self, tz: tzinfo) -> date:
        """Return the calendar day of the entry in the given timezone."""
        return self.timestamp.astimezone(tz).date()


def create_entry(  # noqa: PLR0913
    *,
    entry_type: EntryType | str,
    item: str,
    calories: int,
    quantity: str,
    original_text: str,
    timestamp: datetime,
    entry_id: str | None = None,
) -> Entry:
    """Build a validated entry or raise InvalidEntry."""
    try:
        resolved_type = EntryType(entry_type)
    except ValueError as exc:
        raise InvalidEntry(f"Unsupported entry type: {entry_type!r}") from exc
    if resolved_type not in STORABLE_TYPES:
        raise InvalidEntry(f"Entry type {resolved_type} cannot be stored")
    if isinstance(calories, bool) or not isinstance(calories, int):
        raise InvalidEntry(f"Calories must be an integer, got {calories!r}")
    if calories < 0:
        raise InvalidEntry(f"Calories must be non-negative, got {calories}")
    if timestamp.tzinfo is None:
        raise InvalidEntry("Entry timestamp must be timezone-aware")
    return Entry(
        id=entry_id or str(uuid4()),
        timestamp=timestamp,
        type=resolved_type,
        item=item,
        calories=calories,
        quantity=quantity,
        original_text=original_text,
    )


@dataclass(frozen=True)
class Ledger:
    """Immutable snapshot of every stored entry, in insertion order."""

    entries: tuple[Entry, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, entry_id: object) -> bool:
        return any(entry.id == entry_id for entry in self.entries)

    def with_entries(self, entries: list[Entry]) -> "Ledger":
        """Return a ledger with the given entries appended."""
        known = {entry.id for entry in self.entries}
        for entry in entries:
            if entry.id in known:
                raise InvalidEntry(f"Duplicate entry id: {entry.id}")
            known.add(entry.id)
        return Ledger(entries=(*self.entries, *entries))

    def without(self, entry_id: str) -> "Ledger":
        """Return a ledger without the entry with the given id."""
        return Ledger(
            entries=tuple(entry for entry in self.entries if entry.id != entry_id)
        )

    def on(self, day: date, tz: tzinfo) -> list[Entry]:
        """Return entries logged on a calendar day in the given timezone."""
        return [entry for entry in self.entries if entry.local_day(tz) == day]
