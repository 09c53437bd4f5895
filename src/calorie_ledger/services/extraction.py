"""Natural-language extraction service backed by an LLM oracle."""

import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import TypeAdapter, ValidationError

from calorie_ledger.domain.entries import EntryType
from calorie_ledger.domain.errors import EmptyInput, ExtractionFailed
from calorie_ledger.domain.extraction import (
    CandidateEntry,
    ExtractionErr,
    ExtractionErrorKind,
    ExtractionOk,
    ExtractionResult,
)

logger = logging.getLogger(__name__)

_CANDIDATES = TypeAdapter(list[CandidateEntry])

EXTRACTION_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "entries": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "entryType": {
                        "type": "string",
                        "enum": [kind.value for kind in EntryType],
                        "description": (
                            "Whether the text describes eating food or doing "
                            "exercise."
                        ),
                    },
                    "item": {
                        "type": "string",
                        "description": "A concise name of the food or exercise.",
                    },
                    "calories": {
                        "type": "integer",
                        "minimum": 0,
                        "description": "Estimated calories, always positive.",
                    },
                    "quantity": {
                        "type": "string",
                        "description": (
                            "Quantity or duration from the text, "
                            "e.g. '2 eggs', '30 mins'."
                        ),
                    },
                },
                "required": ["entryType", "item", "calories", "quantity"],
                "additionalProperties": False,
            },
        }
    },
    "required": ["entries"],
    "additionalProperties": False,
}


class ExtractionClient(Protocol):
    """Interface for the LLM extraction oracle."""

    async def extract(
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        schema: dict[str, object],
        prompt: str,
    ) -> object:
        """Return the decoded JSON payload produced by the oracle."""


@dataclass
class ExtractionService:
    """Builds oracle prompts and validates the candidates they return."""

    client: ExtractionClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def extract(self, text: str, context: str) -> list[CandidateEntry]:
        """Return usable candidates for an utterance.

        Raises EmptyInput for blank text and ExtractionFailed when the oracle
        call or its payload is unusable. Candidates the oracle marked as
        UNKNOWN are dropped; an empty list means nothing was understood.
        """
        utterance = text.strip()
        if not utterance:
            raise EmptyInput("Nothing to log")
        prompt = build_prompt(utterance, context)
        try:
            raw = await self.client.extract(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                schema=EXTRACTION_SCHEMA,
                prompt=prompt,
            )
        except Exception as exc:
            logger.exception("Extraction oracle call failed")
            raise ExtractionFailed("Extraction oracle call failed") from exc
        candidates = parse_candidates(raw)
        usable = [c for c in candidates if c.entry_type is not EntryType.UNKNOWN]
        dropped = len(candidates) - len(usable)
        if dropped:
            logger.info("Dropped %s unknown candidate(s)", dropped)
        return usable

    async def try_extract(self, text: str, context: str) -> ExtractionResult:
        """Run extract() and fold its failures into a tagged result."""
        try:
            candidates = await self.extract(text, context)
        except EmptyInput as exc:
            return ExtractionErr(kind=ExtractionErrorKind.EMPTY_INPUT, detail=str(exc))
        except ExtractionFailed as exc:
            return ExtractionErr(
                kind=ExtractionErrorKind.EXTRACTION_FAILED, detail=str(exc)
            )
        return ExtractionOk(candidates=candidates)


def build_prompt(utterance: str, context: str) -> str:
    """Build the instruction text sent to the oracle."""
    return (
        "You are a precise nutrition and fitness tracker. "
        f"The user is: {context}\n\n"
        f'Analyze the following text: "{utterance}".\n\n'
        "1. Identify every distinct food or exercise mentioned.\n"
        "2. For each item:\n"
        "   - Classify it as FOOD intake or EXERCISE "
        "(use UNKNOWN only if it is neither).\n"
        "   - Estimate the calories as a positive integer. For EXERCISE, "
        "return the calories burned as a POSITIVE integer. "
        "Be realistic based on the user's stats.\n"
        "   - Extract a concise item name and the quantity or duration.\n\n"
        "Return the items as a JSON array under the 'entries' key."
    )


def parse_candidates(raw: object) -> list[CandidateEntry]:
    """Validate an oracle payload into candidates or raise ExtractionFailed."""
    if isinstance(raw, dict):
        if "entries" not in raw:
            raise ExtractionFailed("Oracle payload is missing 'entries'")
        raw = raw["entries"]
    try:
        return _CANDIDATES.validate_python(raw)
    except ValidationError as exc:
        logger.warning("Oracle returned a malformed payload: %s", exc)
        raise ExtractionFailed("Oracle returned a malformed payload") from exc
