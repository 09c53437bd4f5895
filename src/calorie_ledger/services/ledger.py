"""Persistent ledger of calorie entries."""

import json
import logging
import threading
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, tzinfo
from typing import Protocol

from calorie_ledger.domain.entries import Entry, Ledger, create_entry
from calorie_ledger.domain.errors import InvalidEntry, PersistenceFailure

logger = logging.getLogger(__name__)


class BlobStore(Protocol):
    """Key-value persistence for whole ledger snapshots."""

    def load(self, key: str) -> str | None:
        """Return the stored blob for a key, or None if missing."""

    def save(self, key: str, value: str) -> None:
        """Overwrite the blob stored under a key."""


class CorruptSnapshot(ValueError):
    """Raised when a stored snapshot cannot be decoded."""


@dataclass
class LedgerStore:
    """In-memory ledger kept identical to its persisted snapshot."""

    blob_store: BlobStore
    key: str
    _ledger: Ledger = field(default_factory=Ledger, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False)

    @property
    def ledger(self) -> Ledger:
        """Return the current ledger snapshot."""
        return self._ledger

    def load(self) -> Ledger:
        """Reload the ledger from the blob store.

        Missing or corrupt snapshots start a fresh, empty ledger. Read errors
        from the store raise PersistenceFailure and keep the current ledger.
        """
        with self._lock:
            try:
                raw = self.blob_store.load(self.key)
            except Exception as exc:
                logger.exception("Failed to read ledger snapshot %s", self.key)
                raise PersistenceFailure("Failed to read ledger snapshot") from exc
            if raw is None:
                self._ledger = Ledger()
                return self._ledger
            try:
                self._ledger = decode_ledger(raw)
            except CorruptSnapshot:
                logger.warning(
                    "Ledger snapshot %s is corrupt; starting fresh", self.key
                )
                self._ledger = Ledger()
            return self._ledger

    def append_all(self, entries: list[Entry]) -> Ledger:
        """Append a batch of entries and persist the new snapshot."""
        with self._lock:
            updated = self._ledger.with_entries(entries)
            self._persist(updated)
            return self._ledger

    def remove(self, entry_id: str) -> Ledger:
        """Remove an entry by id; unknown ids leave the ledger untouched."""
        with self._lock:
            if entry_id not in self._ledger:
                return self._ledger
            self._persist(self._ledger.without(entry_id))
            return self._ledger

    def entries_on(self, day: date, tz: tzinfo) -> list[Entry]:
        """Return entries logged on a calendar day, in creation order."""
        return self._ledger.on(day, tz)

    def _persist(self, ledger: Ledger) -> None:
        payload = encode_ledger(ledger)
        try:
            self.blob_store.save(self.key, payload)
        except Exception as exc:
            logger.exception("Failed to write ledger snapshot %s", self.key)
            raise PersistenceFailure("Failed to write ledger snapshot") from exc
        self._ledger = ledger


def encode_ledger(ledger: Ledger) -> str:
    """Serialize a ledger to its JSON snapshot."""
    return json.dumps([_entry_to_row(entry) for entry in ledger.entries])


def decode_ledger(raw: str) -> Ledger:
    """Parse a JSON snapshot into a ledger or raise CorruptSnapshot."""
    try:
        rows = json.loads(raw)
    except ValueError as exc:
        raise CorruptSnapshot("Snapshot is not valid JSON") from exc
    if not isinstance(rows, list):
        raise CorruptSnapshot("Snapshot must be a JSON array")
    entries = [_parse_entry(row) for row in rows]
    try:
        return Ledger().with_entries(entries)
    except InvalidEntry as exc:
        raise CorruptSnapshot(str(exc)) from exc


def _entry_to_row(entry: Entry) -> dict[str, object]:
    return {
        "id": str(entry.id),
        "timestamp": entry.timestamp.isoformat(),
        "type": entry.type.value,
        "item": entry.item,
        "calories": entry.calories,
        "quantity": entry.quantity,
        "originalText": entry.original_text,
    }


def _parse_entry(row: object) -> Entry:
    if not isinstance(row, dict):
        raise CorruptSnapshot("Snapshot rows must be objects")
    try:
        return create_entry(
            entry_id=str(row["id"]),
            timestamp=_parse_timestamp(row["timestamp"]),
            entry_type=str(row["type"]),
            item=str(row["item"]),
            calories=row["calories"],
            quantity=str(row["quantity"]),
            original_text=str(row["originalText"]),
        )
    except (KeyError, ValueError, TypeError, OverflowError, OSError) as exc:
        raise CorruptSnapshot(f"Invalid snapshot row: {exc}") from exc


def _parse_timestamp(value: object) -> datetime:
    # Older snapshots store epoch milliseconds.
    if isinstance(value, int | float) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=UTC)
    if isinstance(value, str):
        parsed = datetime.fromisoformat(value)
        if parsed.tzinfo is None:
            raise ValueError(f"Timestamp without offset: {value}")
        return parsed
    raise TypeError(f"Unsupported timestamp: {value!r}")
