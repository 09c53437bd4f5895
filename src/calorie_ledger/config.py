"""Application configuration."""

import os
from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings, SettingsConfigDict

from calorie_ledger.domain.budget import BudgetConfig, UserProfile

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openai_api_key: str
    openai_model: str = "gpt-5-mini"
    openai_reasoning_effort: str = "low"
    openai_store: bool = False
    openai_timeout_seconds: float = 30.0
    storage_backend: str = "file"
    ledger_storage_key: str = "calorie_commander_entries"
    ledger_data_dir: str = ".data"
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    supabase_table: str = "ledger_blobs"
    profile_weight_kg: float = 81
    profile_age: int = 44
    profile_gender: str = "male"
    budget_tdee: int = 2050
    budget_target_deficit: int = 500
    budget_daily_override: int | None = None
    timezone: str = "UTC"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def build_budget(settings: Settings) -> BudgetConfig:
    """Build the fixed daily budget from settings."""
    return BudgetConfig.from_targets(
        tdee=settings.budget_tdee,
        target_deficit=settings.budget_target_deficit,
        override=settings.budget_daily_override,
    )


def build_user_context(settings: Settings) -> str:
    """Return the user context string sent with extraction requests."""
    profile = UserProfile(
        weight_kg=settings.profile_weight_kg,
        age=settings.profile_age,
        gender=settings.profile_gender,
    )
    return profile.context(settings.budget_tdee)


def resolve_timezone(settings: Settings) -> ZoneInfo:
    """Return the configured local timezone."""
    return ZoneInfo(settings.timezone)
