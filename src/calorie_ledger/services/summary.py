"""Daily energy balance aggregation."""

from collections.abc import Iterable

from calorie_ledger.domain.budget import BudgetConfig
from calorie_ledger.domain.entries import Entry, EntryType
from calorie_ledger.domain.summary import DaySummary, Tier

WARNING_THRESHOLD = 500


def summarize(entries: Iterable[Entry], budget: BudgetConfig) -> DaySummary:
    """Compute consumed, burned and remaining calories for a day."""
    consumed = 0
    burned = 0
    for entry in entries:
        if entry.type is EntryType.FOOD:
            consumed += entry.calories
        elif entry.type is EntryType.EXERCISE:
            burned += entry.calories
    remaining = budget.daily_budget + burned - consumed
    percentage = min(100.0, max(0.0, remaining / budget.daily_budget * 100))
    return DaySummary(
        consumed=consumed,
        burned=burned,
        remaining=remaining,
        percentage=percentage,
        tier=classify(remaining),
    )


def classify(remaining: int) -> Tier:
    """Map remaining calories to a status tier."""
    if remaining < 0:
        return Tier.OVER_BUDGET
    if remaining < WARNING_THRESHOLD:
        return Tier.WARNING
    return Tier.GOOD
