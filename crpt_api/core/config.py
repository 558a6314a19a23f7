"""Client configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Map environments to their respective .env files (relative to PROJECT_ROOT)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (deployments may inject env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ up front
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_crpt_settings() -> "CrptSettings":
    """Build registration API settings from environment."""

    return CrptSettings()


def _build_log_settings() -> "LogSettings":
    """Build logging settings from environment."""

    return LogSettings()


class CrptSettings(BaseSettings):
    """Registration endpoint and rate limiting configuration.

    The request limit is deliberately not range-checked here: the limiter
    rejects ``limit < 1`` itself so every construction path fails the same way.
    """

    base_url: str = Field(
        "https://ismp.crpt.ru",
        description="Base URL of the registration API",
    )
    create_path: str = Field(
        "/api/v3/lk/documents/create",
        description="Path of the document creation endpoint",
    )
    timeout_seconds: float = Field(
        30.0,
        description="HTTP timeout applied to each outbound call",
        gt=0,
    )
    rate_limit_requests: int = Field(
        10,
        description="Maximum number of documents released per period",
    )
    rate_limit_period_unit: str = Field(
        "seconds",
        description="Length of one rate limit period (milliseconds, seconds, minutes, hours, days)",
    )
    dead_letter_max_entries: int | None = Field(
        1000,
        ge=0,
        description="How many failed submissions to keep for inspection (None for unlimited)",
    )

    model_config = SettingsConfigDict(
        env_prefix="CRPT_",
        case_sensitive=False,
    )

    @property
    def create_url(self) -> str:
        return f"{self.base_url.rstrip('/')}{self.create_path}"


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Either 'json' or 'plain'")
    output: str = Field("stdout", description="Either 'stdout' or 'file'")
    file_path: str | None = Field(
        None,
        description="Log file location when output is 'file'",
    )
    max_bytes: int = Field(
        10_485_760,
        description="Rotate the log file past this size (0 disables rotation)",
    )
    backup_count: int = Field(5, description="Rotated files to keep")

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    """

    app_env: str = APP_ENV
    crpt: CrptSettings = Field(default_factory=_build_crpt_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
settings = Settings()
