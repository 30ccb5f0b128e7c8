"""
Configuration settings for tatami.

All settings are loaded from environment variables (prefixed with
``TATAMI_``) with sensible defaults. Use a .env file for local development.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Library settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TATAMI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Logging ===
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"  # "production" switches to JSON logs

    # === Pagination ===
    DEFAULT_ENTRIES_PER_PAGE: int = Field(default=20, ge=1)
    MAX_ENTRIES_PER_PAGE: int = Field(default=100, ge=1)

    # === Form data ===
    FORM_DATA_MAX_FIELDS: int = Field(default=1000, ge=1)  # Pairs accepted per body/query
    FORM_DATA_ENCODING: str = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """
    Get settings singleton.

    Returns:
        Settings instance
    """
    return Settings()
