"""Application settings loaded from environment variables.

Uses pydantic-settings for validation and type coercion. All keys use
the ``SAATHI_`` prefix and may also be supplied through a ``.env`` file.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(StrEnum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Central configuration for the SchemeSaathi application."""

    model_config = SettingsConfigDict(
        env_prefix="SAATHI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # ── App ────────────────────────────────────────────────────────────
    env: Literal["development", "production"] = "development"
    default_language: str = "en"

    # ── Logging ────────────────────────────────────────────────────────
    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "json"

    # ── Sessions ───────────────────────────────────────────────────────
    session_ttl_hours: int = Field(default=24, ge=1)

    # ── Tracking references ────────────────────────────────────────────
    tracking_prefix: str = Field(default="APP", min_length=1, max_length=8)
    tracking_max_attempts: int = Field(default=5, ge=1)

    # ── Scheme catalog ─────────────────────────────────────────────────
    scheme_data_path: str | None = None  # None uses the bundled schemes.json

    # ── Derived Properties ─────────────────────────────────────────────

    @property
    def is_production(self) -> bool:
        return self.env == Environment.PRODUCTION


# Module-level singleton: import ``settings`` everywhere.
settings = Settings()
