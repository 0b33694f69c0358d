"""
SQL script command — run discovered ``.sql`` scripts against the database.

Manifesto:
    Schema and seed data must be in place before any other startup
    command runs.  This command has the lowest possible order, discovers
    scripts through :class:`~commander.scripts.repository.ScriptRepository`
    and executes them statement by statement inside the pipeline's
    transaction.

Cache policy:
    ``always_reload=True``
        Scripts are rediscovered on every ``execute`` and nothing is kept.
    ``always_reload=False``
        Scripts are discovered once and the list is retained for the process
        lifetime.  With ``eager=True`` (the default) discovery happens at
        construction, so a missing ``script.path`` fails at startup.  Once a
        discovery has succeeded the retained list is never refreshed, even
        when it is empty.  A discovery that raised leaves the cache
        unloaded, so the next call tries again.

Tags:
    commander, command, sql, scripts, cache

Doc-Types:
    api-reference
"""

from __future__ import annotations

import sys
import threading
from typing import TYPE_CHECKING

from commander.core.errors import CommanderError, StatementExecutionError
from commander.core.logging import get_logger, log_step
from commander.framework.commands.base import Command, CommandContext
from commander.scripts.repository import Script, ScriptRepository
from commander.scripts.splitter import DEFAULT_DELIMITER, split_sql_script

if TYPE_CHECKING:
    from commander.core.settings import CommanderSettings

log = get_logger(__name__)

_PREVIEW_CHARS = 200


class SqlScriptCommand(Command):
    """Runs every discovered SQL script, in name order."""

    name = "SQL_SCRIPT"
    order = -sys.maxsize - 1
    description = "Execute bundled and external SQL scripts"

    def __init__(
        self,
        repository: ScriptRepository,
        *,
        always_reload: bool = False,
        delimiter: str = DEFAULT_DELIMITER,
        eager: bool = True,
    ) -> None:
        self.repository = repository
        self.always_reload = always_reload
        self.delimiter = delimiter
        self.discovery_count = 0
        self._scripts: list[Script] | None = None
        self._lock = threading.Lock()

        if eager and not always_reload:
            self._load_cached()

    @classmethod
    def from_settings(cls, settings: CommanderSettings) -> SqlScriptCommand:
        return cls(
            ScriptRepository.from_settings(settings.script),
            always_reload=settings.script.always_reload,
            delimiter=settings.script.delimiter,
        )

    @property
    def loaded_scripts(self) -> list[Script] | None:
        """Retained scripts in cache mode; ``None`` until the first successful discovery."""
        return None if self._scripts is None else list(self._scripts)

    def execute(self, ctx: CommandContext) -> None:
        scripts = self._discover() if self.always_reload else self._load_cached()
        for script in scripts:
            self.run_script(ctx, script)

    def run_script(self, ctx: CommandContext, script: Script) -> int:
        """Split ``script`` and execute each statement in order; return the statement count."""
        log.debug("script.executing", script=script.name, location=script.location)
        try:
            statements = split_sql_script(script.body, self.delimiter)
        except CommanderError as e:
            e.with_context(script=script.name, location=script.location)
            log.warning("script.parse_failed", script=script.name, error=e.message)
            raise

        with log_step("script.run", level="debug", error_level="debug", script=script.name) as timer:
            for index, statement in enumerate(statements, start=1):
                try:
                    ctx.conn.execute(statement)
                except Exception as e:
                    log.warning(
                        "statement.failed",
                        script=script.name,
                        statement_index=index,
                        statement=statement[:_PREVIEW_CHARS],
                        error=str(e),
                    )
                    raise StatementExecutionError(
                        f"Statement {index} of script '{script.name}' failed: {e}",
                        cause=e,
                    ).with_context(
                        script=script.name,
                        statement_index=index,
                        location=script.location,
                        statement=statement[:_PREVIEW_CHARS],
                    ) from e
            timer.add_metric("statements", len(statements))
        return len(statements)

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def _discover(self) -> list[Script]:
        scripts = self.repository.discover()
        self.discovery_count += 1
        return scripts

    def _load_cached(self) -> list[Script]:
        if self._scripts is not None:
            return self._scripts
        with self._lock:
            if self._scripts is None:
                self._scripts = self._discover()
                log.info("scripts.loaded", scripts=[s.name for s in self._scripts])
        return self._scripts
