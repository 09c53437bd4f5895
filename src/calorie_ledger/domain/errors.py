"""Error types raised across the calorie ledger."""


class CalorieLedgerError(Exception):
    """Base class for ledger errors."""


class EmptyInput(CalorieLedgerError):
    """Raised when an utterance is empty after trimming."""


class ExtractionFailed(CalorieLedgerError):
    """Raised when the extraction oracle is unreachable or returns bad data."""


class InvalidEntry(CalorieLedgerError, ValueError):
    """Raised when a would-be entry violates the entry invariants."""


class PersistenceFailure(CalorieLedgerError):
    """Raised when the ledger snapshot cannot be read or written."""
