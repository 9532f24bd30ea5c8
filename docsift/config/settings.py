"""
Settings - Application configuration using Pydantic Settings.

Loads from environment variables (prefix ``DOCSIFT_``) and .env files.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # Extraction service
    api_base_url: str = "http://localhost:8000/api"
    request_timeout_seconds: float = 300.0
    max_retries: int = Field(default=3, ge=0)
    retry_backoff_seconds: float = Field(default=1.0, ge=0.0)
    store_in_filters: bool = False

    # "http" talks to the real service, "memory" uses the in-process double
    service_backend: Literal["http", "memory"] = "http"

    # Orchestration
    max_concurrent_table_fetches: int = Field(default=8, ge=1)

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="DOCSIFT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
