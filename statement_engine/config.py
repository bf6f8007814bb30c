"""
Engine configuration using pydantic-settings.

Loads configuration from environment variables with sensible defaults.
"""
from decimal import Decimal
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="STATEMENT_ENGINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Chart of accounts profile (nas_standard or nas_extended)
    chart_profile: str = "nas_standard"

    # Comparison tolerance in currency units
    tolerance: Decimal = Decimal("0.01")

    # Monitor
    monitor_interval_seconds: float = Field(5.0, gt=0)

    # Language used for account and section titles ("en" or the profile's primary)
    display_language: str = "en"

    # Logging
    log_level: str = "INFO"
    log_json: bool = True


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
