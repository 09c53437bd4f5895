"""Domain models for daily energy balance."""

from dataclasses import dataclass
from enum import StrEnum


class Tier(StrEnum):
    """Coarse status of the remaining budget."""

    GOOD = "GOOD"
    WARNING = "WARNING"
    OVER_BUDGET = "OVER_BUDGET"


@dataclass(frozen=True)
class DaySummary:
    """Energy balance for one calendar day."""

    consumed: int
    burned: int
    remaining: int
    percentage: float
    tier: Tier
