"""
Configuration settings for fetch-retry.

Retry defaults are loaded from environment variables with sensible fallbacks.
Explicit retry options passed to a call always take priority over these.
Use .env file for local development.
"""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Retry defaults and ambient settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # === Logging ===
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"

    # === Retry Defaults (milliseconds) ===
    FETCH_RETRY_MAX_RETRY: int = Field(default=60000, ge=0)  # Total budget across attempts and waits
    FETCH_RETRY_INITIAL_WAIT: int = Field(default=100, ge=0)
    FETCH_RETRY_BACKOFF: int = Field(default=2, ge=1)  # Multiplier applied to the delay after each round
    FETCH_RETRY_SOCKET_TIMEOUT: int = Field(default=30000, ge=0)  # Per-attempt deadline
    FETCH_RETRY_FORCE_TIMEOUT: bool = False

    # === External Deadline ===
    # Absolute epoch milliseconds, e.g. set by a serverless runtime
    ACTION_DEADLINE: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("FETCH_RETRY_ACTION_DEADLINE", "__OW_ACTION_DEADLINE"),
    )

    # === Monitoring ===
    PROMETHEUS_ENABLED: bool = True


def get_settings() -> Settings:
    """
    Build a fresh Settings snapshot from the current environment.

    Called once at the start of each fetch so that environment changes
    are picked up between calls but never in the middle of one.
    """
    return Settings()
