"""Settings for trigger dispatch.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.
    The dispatch core needs very little of it: how to log, and where
    operators put environment-level kill switches.

    - **Pydantic validation:** Type-checked at startup, not at first use
    - **Environment-driven:** Reads ``TRIGGER_*`` env vars and ``.env`` files
    - **Extra ignore:** Unknown env vars don't cause startup failures

Examples:
    >>> from trigger_dispatch.core.settings import get_settings
    >>> get_settings().kill_switch_env_prefix
    'TRIGGER_KS_'

Tags:
    settings, configuration, pydantic, environment, trigger-dispatch
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DispatchSettings(BaseSettings):
    """Settings read from ``TRIGGER_``-prefixed environment variables.

    Fields
    ──────
    log_level              : Structlog log level
    log_format             : "console" for development, "json" for aggregation
    kill_switch_env_prefix : Prefix of env vars that disable handlers
    debug                  : Enable debug mode (forces DEBUG logging)
    """

    model_config = SettingsConfigDict(
        env_prefix="TRIGGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["console", "json"] = "console"
    debug: bool = False

    # ── Kill switches ────────────────────────────────────────────
    kill_switch_env_prefix: str = Field(
        default="TRIGGER_KS_",
        description="Env var prefix; TRIGGER_KS_ACCOUNT=true disables the Account handler",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    @field_validator("log_format", mode="before")
    @classmethod
    def _lower_format(cls, value: object) -> object:
        return value.lower() if isinstance(value, str) else value

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug else self.log_level


_settings: DispatchSettings | None = None


def get_settings() -> DispatchSettings:
    """Get or create the process-wide settings instance."""
    global _settings
    if _settings is None:
        _settings = DispatchSettings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings (for testing)."""
    global _settings
    _settings = None


__all__ = ["DispatchSettings", "get_settings", "reset_settings"]
