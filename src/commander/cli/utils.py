"""
CLI utility helpers — output formatting and settings loading.
"""

from __future__ import annotations

import json
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from commander.core.errors import CommanderError
from commander.core.logging import configure_logging
from commander.core.settings import CommanderSettings, load_settings

console = Console()
err_console = Console(stderr=True)


def make_settings(database: str | None = None, *, log_level: str | None = None) -> CommanderSettings:
    """Load settings with CLI overrides applied, configuring logging on the way."""
    overrides: dict[str, Any] = {}
    if database:
        overrides["database_url"] = database
    if log_level:
        overrides["log_level"] = log_level
    try:
        settings = load_settings(**overrides)
    except CommanderError as e:
        fail(e)
    configure_logging(level=settings.log_level, json_format=settings.log_format == "json")
    return settings


def fail(error: CommanderError) -> NoReturn:
    """Print ``error`` and exit with status 1."""
    err_console.print(f"[bold red]Error[/bold red] ({error.category.value}): {escape(error.message)}")
    raise typer.Exit(code=1)


def print_rows(rows: list[dict[str, Any]], *, as_json: bool = False, title: str = "") -> None:
    """Render a list of dicts as a Rich table, or JSON."""
    if as_json:
        console.print_json(json.dumps(rows, default=str))
        return
    if not rows:
        console.print("[dim]No items.[/dim]")
        return

    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in rows[0]:
        table.add_column(col, overflow="fold")
    for row in rows:
        table.add_row(*(str(v) for v in row.values()))
    console.print(table)
