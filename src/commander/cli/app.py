"""
Root Typer application for the commander CLI.

``commander run`` executes the startup pipeline once against the configured
database; ``commander serve`` exposes it over HTTP.
"""

from __future__ import annotations

import typer
from rich.markup import escape
from typer import Typer

from commander import __version__
from commander.cli.utils import console, err_console, fail, make_settings, print_rows
from commander.core.errors import CommandFailedError, CommanderError

app = Typer(
    name="commander",
    help="commander — ordered startup commands and SQL scripts in one transaction.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"commander {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """commander CLI — run, inspect and serve the command pipeline."""


# ── Commands ─────────────────────────────────────────────────────────────


@app.command("run")
def run(
    database: str | None = typer.Option(None, "--database", "-d", help="Database path or URL"),
    log_level: str | None = typer.Option(None, "--log-level"),
) -> None:
    """Run every enabled command once, in a single transaction."""
    from commander.core.connection import create_connection
    from commander.framework.pipeline import CommandPipeline

    settings = make_settings(database, log_level=log_level)
    try:
        pipeline = CommandPipeline.from_settings(settings)
        conn, info = create_connection(settings.database_url)
    except CommanderError as e:
        fail(e)

    names = [cmd.name for cmd in pipeline.effective_commands()]
    try:
        pipeline.execute(conn, caller="cli")
    except CommandFailedError as e:
        err_console.print(f"[bold red]Command {e.command_name} failed[/bold red]: {escape(e.message)}")
        err_console.print("[yellow]Transaction rolled back.[/yellow]")
        raise typer.Exit(code=1) from e
    except CommanderError as e:
        fail(e)
    finally:
        conn.close()

    console.print(f"[bold green]OK[/bold green] ran {len(names)} command(s) on {info.backend}: {', '.join(names) or '-'}")


@app.command("commands")
def commands(
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List registered commands in execution order."""
    from commander.framework.registry import list_commands

    name_filter = make_settings().cmd.name_filter
    rows = [
        {
            "name": cls.name,
            "order": cls.order,
            "class": cls.__name__,
            "enabled": name_filter.matches(cls.name),
        }
        for cls in list_commands()
    ]
    print_rows(rows, as_json=json_out, title="Commands")


@app.command("scripts")
def scripts(
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List the SQL scripts that would run, in execution order."""
    from commander.scripts.repository import ScriptRepository
    from commander.scripts.splitter import split_sql_script

    settings = make_settings()
    try:
        repository = ScriptRepository.from_settings(settings.script)
        rows = [
            {
                "name": script.name,
                "location": script.location,
                "statements": len(split_sql_script(script.body, settings.script.delimiter)),
            }
            for script in repository.discover()
        ]
    except CommanderError as e:
        fail(e)

    print_rows(rows, as_json=json_out, title="Scripts")


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host", "-h", help="Bind address"),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on changes"),
) -> None:
    """Start the commander REST API server."""
    import uvicorn

    settings = make_settings()
    host = host or settings.host
    port = port or settings.port

    console.print(f"[bold green]Starting commander API[/bold green] on {host}:{port}")
    uvicorn.run(
        "commander.api:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    app()
