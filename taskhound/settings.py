"""
Typed settings management using pydantic-settings.

Configuration is grouped into small BaseSettings classes that each read
their own environment variables (prefix ``TASKHOUND_``), composed into a
single ``Settings`` object.

Usage:
    from taskhound.settings import get_settings

    settings = get_settings()
    print(settings.scheduler.cadence_seconds)
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# e.g. "May 15 2024 10:30:00 AM"
DEFAULT_DATETIME_FORMAT = "%b %d %Y %I:%M:%S %p"


# =============================================================================
# Scheduler Settings
# =============================================================================


class SchedulerSettings(BaseSettings):
    """Poll loop and recurrence configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TASKHOUND_",
        extra="ignore",
    )

    cadence_seconds: float = Field(
        default=0.3,
        gt=0.0,
        le=1.0,
        description="Seconds between poll loop sweeps (must stay under one second)",
    )
    onetime_fallback_hours: int = Field(
        default=24,
        ge=1,
        description="Delay applied to one-time tasks registered with a past timestamp",
    )
    datetime_format: str = Field(
        default=DEFAULT_DATETIME_FORMAT,
        description="strftime pattern used for notification timestamps",
    )

    @field_validator("datetime_format")
    @classmethod
    def _blank_format_means_default(cls, value: str) -> str:
        if not value or not value.strip():
            return DEFAULT_DATETIME_FORMAT
        return value


# =============================================================================
# UI/Display Settings
# =============================================================================


class DisplaySettings(BaseSettings):
    """Console output configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TASKHOUND_",
        extra="ignore",
    )

    console_output: bool = Field(
        default=True,
        description="Render notifications to the terminal",
    )
    suppress_informational_messages: bool = Field(
        default=False,
        description="Hide info/success messages on the console (still logged)",
    )


# =============================================================================
# Level Colors
# =============================================================================

DEFAULT_LEVEL_COLORS: dict[str, str] = {
    "debug": "dim",
    "info": "magenta",
    "success": "green",
    "warning": "yellow",
    "error": "bold red",
}


class LevelColors(BaseSettings):
    """Rich style per notification level."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TASKHOUND_COLOR_",
        extra="ignore",
    )

    debug: str = Field(default="dim")
    info: str = Field(default="magenta")
    success: str = Field(default="green")
    warning: str = Field(default="yellow")
    error: str = Field(default="bold red")

    def get_color(self, level_name: str) -> str:
        """Get the style for a level by name."""
        return getattr(self, level_name, DEFAULT_LEVEL_COLORS.get(level_name, "white"))

    def as_dict(self) -> dict[str, str]:
        return {name: self.get_color(name) for name in DEFAULT_LEVEL_COLORS}


# =============================================================================
# Master Settings Class
# =============================================================================


class Settings(BaseSettings):
    """Master settings combining all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TASKHOUND_",
        extra="ignore",
        case_sensitive=False,
    )

    scheduler: SchedulerSettings = Field(default_factory=SchedulerSettings)
    display: DisplaySettings = Field(default_factory=DisplaySettings)
    colors: LevelColors = Field(default_factory=LevelColors)

    @property
    def cadence_seconds(self) -> float:
        return self.scheduler.cadence_seconds

    @property
    def datetime_format(self) -> str:
        return self.scheduler.datetime_format


# =============================================================================
# Cached Singleton Accessors
# =============================================================================


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the cached settings singleton.

    The settings are loaded once and cached for the process lifetime.
    To reload, call clear_settings_cache() first.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear cached settings so the next access re-reads the environment."""
    get_settings.cache_clear()
