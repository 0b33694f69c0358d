"""
Centralized settings for commander.

Manifesto:
    Configuration is read once at startup and is static for the process
    lifetime.  Filter lists are parsed into sets at load time so a
    malformed value fails the process immediately instead of on the first
    trigger.

All fields can be set through ``COMMANDER_*`` environment variables or a
``.env`` file.  Nested groups use ``__`` as delimiter, mirroring the
dotted keys ``cmd.includes`` / ``script.always-reload``::

    COMMANDER_CMD__EXCLUDES=SQL_SCRIPT
    COMMANDER_SCRIPT__PREFIX=V
    COMMANDER_SCRIPT__PATH=/opt/app/sql
    COMMANDER_SCRIPT__ALWAYS_RELOAD=true

Tags:
    commander, configuration, settings, pydantic

Doc-Types:
    api-reference
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, PrivateAttr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from commander.core.errors import ConfigError
from commander.framework.filters import NameFilter, parse_name_list

DEFAULT_SCRIPT_PACKAGE = "commander.resources"


class _NameFilterSettings(BaseModel):
    """Shared include/exclude pair, parsed eagerly into a :class:`NameFilter`."""

    includes: str = Field(default="", description="Comma-separated names to include (empty = all)")
    excludes: str = Field(default="", description="Comma-separated names to exclude")

    _name_filter: NameFilter = PrivateAttr(default_factory=NameFilter)

    @field_validator("includes", "excludes")
    @classmethod
    def _valid_name_list(cls, value: str) -> str:
        parse_name_list(value)
        return value

    def model_post_init(self, __context: Any) -> None:
        self._name_filter = NameFilter.parse(self.includes, self.excludes)

    @property
    def name_filter(self) -> NameFilter:
        return self._name_filter


class CommandSettings(_NameFilterSettings):
    """``cmd.*`` keys: command-name filter."""


class ScriptSettings(_NameFilterSettings):
    """``script.*`` keys: script discovery and execution policy."""

    prefix: str = Field(default="", description="File name prefix (prefix*suffix.sql)")
    suffix: str = Field(default="", description="File name suffix before .sql")
    path: Path | None = Field(default=None, description="External directory scanned after the bundled package")
    always_reload: bool = Field(
        default=False,
        validation_alias=AliasChoices("always_reload", "always-reload"),
        description="True = rediscover scripts on every run, False = cache after first load",
    )
    package: str = Field(default=DEFAULT_SCRIPT_PACKAGE, description="Bundled package holding .sql resources")
    delimiter: str = Field(default=";", description="Statement delimiter")

    @field_validator("path", mode="before")
    @classmethod
    def _blank_path_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("delimiter")
    @classmethod
    def _delimiter_not_blank(cls, value: str) -> str:
        if not value or value.isspace():
            raise ValueError("delimiter must be a non-blank string")
        return value


class CommanderSettings(BaseSettings):
    """Commander configuration.

    Order of precedence (highest to lowest):
        1. Keyword arguments
        2. Environment variables (``COMMANDER_SCRIPT__PATH``, ...)
        3. ``.env`` file
        4. Defaults below
    """

    model_config = SettingsConfigDict(
        env_prefix="COMMANDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # ── Pipeline ─────────────────────────────────────────────────
    cmd: CommandSettings = Field(default_factory=CommandSettings)
    script: ScriptSettings = Field(default_factory=ScriptSettings)

    # ── Database ─────────────────────────────────────────────────
    database_url: str = Field(default="sqlite:///commander.db", description="SQLite path/URL or SQLAlchemy URL")

    # ── API ──────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=8080, description="Bind port")
    api_prefix: str = Field(default="", description="URL prefix for all endpoints")
    api_title: str = Field(default="commander API")
    debug: bool = Field(default=False, description="Expose unexpected error messages in responses")

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console", description="console | json")

    @field_validator("log_format")
    @classmethod
    def _known_log_format(cls, value: str) -> str:
        value = value.lower()
        if value not in ("console", "json"):
            raise ValueError("log_format must be 'console' or 'json'")
        return value


def load_settings(**overrides: Any) -> CommanderSettings:
    """Build settings, converting validation failures into :class:`ConfigError`."""
    try:
        return CommanderSettings(**overrides)
    except ValidationError as e:
        raise ConfigError(f"Invalid commander configuration: {e}", cause=e) from e


@lru_cache(maxsize=1)
def get_settings() -> CommanderSettings:
    """Cached settings, loaded once per process."""
    return load_settings()


__all__ = [
    "CommandSettings",
    "ScriptSettings",
    "CommanderSettings",
    "DEFAULT_SCRIPT_PACKAGE",
    "load_settings",
    "get_settings",
]
