"""
Typed settings management using pydantic-settings.

Every knob can be overridden from the environment (prefix ``AUI_``) or a
``.env`` file in the working directory. User overrides stored in
``aui.cfg`` are layered on top by ``aui_backend.config``.

Usage:
    from aui_backend.settings import get_settings

    settings = get_settings()
    print(settings.scheduler.namespace)
"""

from __future__ import annotations

from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# =============================================================================
# Scheduler Settings
# =============================================================================


class SchedulerSettings(BaseSettings):
    """Native scheduler integration."""

    model_config = SettingsConfigDict(
        env_prefix="AUI_",
        extra="ignore",
    )

    namespace: str = Field(
        default="AUI",
        description="Task Scheduler folder that holds this application's tasks",
    )
    marker: str = Field(
        default="AUI",
        description="Token written into crontab comments to mark owned lines",
    )
    unix_shell: str = Field(
        default="/bin/bash",
        description="Interpreter cron uses to run a registered script",
    )
    windows_interpreter: str = Field(
        default="powershell.exe",
        description="Interpreter Task Scheduler uses to run a registered script",
    )
    schtasks_command: str = Field(default="schtasks.exe")
    crontab_command: str = Field(default="crontab")
    agent_command: str = Field(
        default="claude --dangerously-skip-permissions",
        description="Command a generated deploy script starts with the primer prompt",
    )

    @field_validator("namespace", "marker")
    @classmethod
    def _no_separators(cls, value: str) -> str:
        return validate_owner_token(value)


def validate_owner_token(value: str) -> str:
    """Check a namespace or marker token and return it stripped.

    Raises:
        ValueError: The token is empty or contains a separator.
    """
    value = (value or "").strip()
    if not value or any(c in value for c in "\\/:#\r\n"):
        raise ValueError("must be a non-empty token without \\ / : # or newlines")
    return value


# =============================================================================
# Fetch Settings
# =============================================================================


class FetchSettings(BaseSettings):
    """HTTP fetch configuration."""

    model_config = SettingsConfigDict(
        env_prefix="AUI_FETCH_",
        extra="ignore",
    )

    timeout: float = Field(
        default=15.0,
        gt=0,
        description="Upper bound in seconds for a whole request",
    )
    follow_redirects: bool = Field(default=True)


# =============================================================================
# Terminal Settings
# =============================================================================


class TerminalSettings(BaseSettings):
    """Visible terminal launch configuration."""

    model_config = SettingsConfigDict(
        env_prefix="AUI_TERMINAL_",
        extra="ignore",
    )

    window_title: str = Field(default="Deploy")
    linux_terminals: List[str] = Field(
        default_factory=lambda: ["x-terminal-emulator", "gnome-terminal", "xterm"],
        description="Emulators tried in order on Linux",
    )


# =============================================================================
# Master Settings Class
# =============================================================================


class Settings(BaseSettings):
    """Master settings combining all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="AUI_",
        extra="ignore",
        case_sensitive=False,
    )

    scheduler: SchedulerSettings = Field(default_factory=SchedulerSettings)
    fetch: FetchSettings = Field(default_factory=FetchSettings)
    terminal: TerminalSettings = Field(default_factory=TerminalSettings)


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
    """Clear the cached settings instance.

    Call this if environment variables or .env files have changed
    and you need to reload configuration.
    """
    get_settings.cache_clear()
