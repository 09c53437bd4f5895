"""Models for oracle extraction results."""

from dataclasses import dataclass
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from calorie_ledger.domain.entries import EntryType


class CandidateEntry(BaseModel):
    """Single food or exercise mention returned by the oracle."""

    model_config = ConfigDict(populate_by_name=True)

    entry_type: EntryType = Field(alias="entryType")
    item: str
    calories: int
    quantity: str


class ExtractionErrorKind(StrEnum):
    """Reasons an extraction attempt produced no candidates."""

    EMPTY_INPUT = "EMPTY_INPUT"
    EXTRACTION_FAILED = "EXTRACTION_FAILED"


@dataclass(frozen=True)
class ExtractionOk:
    """Oracle round-trip succeeded; candidates may be empty."""

    candidates: list[CandidateEntry]


@dataclass(frozen=True)
class ExtractionErr:
    """Extraction failed before producing candidates."""

    kind: ExtractionErrorKind
    detail: str


ExtractionResult = ExtractionOk | ExtractionErr
