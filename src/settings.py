"""Centralized settings for the APR billing engine.

Uses pydantic-settings to load from environment variables (prefixed APR_)
with defaults matching the water cooperative's reference schedule.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Billing engine settings loaded from environment variables."""

    # --- Persistence ---
    database_url: str = "sqlite:///tariffs.db"
    database_echo: bool = False

    # --- Billing ---
    default_tax_percent: float = 19.0
    default_category: str = "residential"

    # --- Audit trail ---
    audit_enabled: bool = True
    audit_buffer_size: int = 100

    # --- Logging ---
    log_level: str = "INFO"
    log_format: str = "console"
    service_name: str = "apr-billing"

    model_config = {
        "env_prefix": "APR_",
        "env_file": ".env",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton."""
    return Settings()
