"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database (unset = in-memory data store)
    database_url: str | None = None

    # Calendar: "today" is evaluated in this zone
    marketplace_timezone: str = "America/Argentina/Buenos_Aires"

    # Recurrence engine bounds
    max_expansion_steps: int = 1000
    open_ended_horizon_years: int = 1
    next_occurrence_window_days: int = 14

    # Home page
    featured_limit: int = 2

    # Contact phones (WhatsApp, country code included)
    phone_pattern: str = r"^549\d{10}$"

    # Stub auth identity used when no Authorization header is sent
    default_user_id: str = "dev-user-0001"

    # Identity allowed to trigger the publish sweep
    scheduler_user_id: str = "scheduler"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
