"""
Shared pytest fixtures and configuration for commander tests.

This module provides:
- Registry and settings-cache cleanup for test isolation
- An in-memory SQLite connection
- A builder for throwaway script directories

Usage:
    Fixtures are auto-discovered by pytest::

        def test_something(conn, make_script_dir):
            path = make_script_dir({"001_init.sql": "CREATE TABLE t (id INTEGER);"})
            ...
"""

from __future__ import annotations

import os
import sys
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
import structlog

from commander.core.settings import get_settings
from commander.core.sqlite_conn import SqliteConnection
from commander.framework.registry import clear_registry


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark every test without an explicit marker as a unit test."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration", "slow"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def clean_command_registry() -> Generator[None, None, None]:
    """Clear the command registry before and after each test."""
    clear_registry()
    yield
    clear_registry()


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """
    Run each test in an empty working directory with no ``COMMANDER_*``
    variables set, so a developer's ``.env`` or shell cannot leak in.
    """
    for key in list(os.environ):
        if key.upper().startswith("COMMANDER_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    """
    Reset structlog configuration and drop loggers cached by
    ``configure_logging`` so ``capture_logs`` sees every logger.
    """
    structlog.reset_defaults()
    yield
    structlog.reset_defaults()
    for name, module in list(sys.modules.items()):
        if not name.startswith("commander") or module is None:
            continue
        for value in vars(module).values():
            if isinstance(value, structlog._config.BoundLoggerLazyProxy):
                value.__dict__.pop("bind", None)


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def conn() -> Generator[SqliteConnection, None, None]:
    """Fresh in-memory SQLite connection."""
    connection = SqliteConnection(":memory:")
    yield connection
    connection.close()


# =============================================================================
# Scripts
# =============================================================================


@pytest.fixture
def make_script_dir(tmp_path: Path) -> Callable[..., Path]:
    """
    Factory writing ``{file name: body}`` into a new directory.

        path = make_script_dir({"001_init.sql": "..."}, name="extra")
    """

    def _make(files: dict[str, str | bytes], name: str = "sql") -> Path:
        directory = tmp_path / name
        directory.mkdir(parents=True, exist_ok=True)
        for file_name, body in files.items():
            target = directory / file_name
            if isinstance(body, bytes):
                target.write_bytes(body)
            else:
                target.write_text(body, encoding="utf-8")
        return directory

    return _make
