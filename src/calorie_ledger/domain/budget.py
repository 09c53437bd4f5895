"""Budget and profile domain models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class UserProfile:
    """Body stats used to bias calorie estimates."""

    weight_kg: float
    age: int
    gender: str

    def context(self, tdee: int) -> str:
        """Return the short context string sent to the extraction oracle."""
        weight = f"{self.weight_kg:g}"
        return (
            f"{self.gender.capitalize()}, {self.age} years old, {weight}kg. "
            f"TDEE approx {tdee}."
        )


@dataclass(frozen=True)
class BudgetConfig:
    """Fixed daily calorie budget configuration."""

    tdee: int
    target_deficit: int
    daily_budget: int

    def __post_init__(self) -> None:
        if self.daily_budget <= 0:
            raise ValueError(
                f"Daily budget must be positive, got {self.daily_budget}"
            )

    @classmethod
    def from_targets(
        cls, tdee: int, target_deficit: int, override: int | None = None
    ) -> "BudgetConfig":
        """Derive the daily budget from expenditure and deficit."""
        daily_budget = override if override is not None else tdee - target_deficit
        return cls(tdee=tdee, target_deficit=target_deficit, daily_budget=daily_budget)
