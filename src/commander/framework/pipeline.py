"""
Command pipeline — filtered, ordered, transactional command execution.

Manifesto:
    A startup run either applies completely or not at all.  The pipeline
    filters the registered commands by name, runs the survivors strictly
    in order inside one unit of work, and stops at the first failure,
    rolling back everything the run did.

Architecture:
    ::

        execute(conn)
          │
          ├── effective_commands()   (cmd.includes / cmd.excludes)
          │
          └── UnitOfWork(conn)  BEGIN
                ├── SQL_SCRIPT.execute(ctx)
                ├── <command>.execute(ctx)
                └── ...          first error → ROLLBACK, CommandFailedError
                                 all ok      → COMMIT

Concurrency:
    One run at a time.  An overlapping ``execute()`` raises
    :class:`~commander.core.errors.PipelineBusyError` instead of waiting.

Tags:
    commander, pipeline, transaction, ordering, filtering

Doc-Types:
    api-reference
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from commander.core.errors import CommandFailedError, PipelineBusyError
from commander.core.logging import LogContext, get_logger, log_step
from commander.core.protocols import Connection
from commander.core.transaction import UnitOfWork
from commander.framework.commands.base import Command, CommandContext
from commander.framework.filters import NameFilter
from commander.framework.registry import build_commands

if TYPE_CHECKING:
    from commander.core.settings import CommanderSettings

log = get_logger(__name__)


class CommandPipeline:
    """Runs an ordered list of commands inside one transaction."""

    def __init__(self, commands: Iterable[Command], name_filter: NameFilter | None = None) -> None:
        self.commands: list[Command] = sorted(commands, key=lambda cmd: cmd.order)
        self.name_filter = name_filter or NameFilter()
        self._lock = threading.Lock()

        log.info(
            "pipeline.registered_commands",
            commands=[cmd.name for cmd in self.commands],
            filter=repr(self.name_filter),
        )

    @classmethod
    def from_settings(cls, settings: CommanderSettings) -> CommandPipeline:
        """Build every registered command from ``settings`` and apply the ``cmd.*`` filter."""
        return cls(build_commands(settings), settings.cmd.name_filter)

    def effective_commands(self) -> list[Command]:
        """Commands that survive the name filter, in execution order."""
        return self.name_filter.apply(self.commands, key=lambda cmd: cmd.name)

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    def execute(self, conn: Connection, *, caller: str = "sdk", metadata: dict[str, Any] | None = None) -> None:
        """Run the effective commands in order inside one unit of work.

        Raises:
            PipelineBusyError: Another run is in progress.
            CommandFailedError: A command raised; the transaction was rolled back.
            TransactionError: ``conn`` is already inside a transaction.
        """
        if not self._lock.acquire(blocking=False):
            log.warning("pipeline.busy", caller=caller)
            raise PipelineBusyError()
        try:
            self._run(conn, caller, metadata or {})
        finally:
            self._lock.release()

    def _run(self, conn: Connection, caller: str, metadata: dict[str, Any]) -> None:
        commands = self.effective_commands()
        skipped = [cmd.name for cmd in self.commands if cmd not in commands]

        with UnitOfWork(conn):
            ctx = CommandContext(conn=conn, caller=caller, metadata=metadata)
            with LogContext(run_id=ctx.run_id, caller=caller):
                log.info("pipeline.started", commands=[cmd.name for cmd in commands], skipped=skipped)
                with log_step("pipeline.execute", error_level="debug", commands=len(commands)):
                    for cmd in commands:
                        self._run_command(cmd, ctx)

    def _run_command(self, cmd: Command, ctx: CommandContext) -> None:
        log.debug("command.executing", command=cmd.name, cls=cmd.__class__.__name__)
        try:
            with log_step("command.execute", error_level="debug", command=cmd.name):
                cmd.execute(ctx)
        except Exception as e:
            log.error(
                "command.failed",
                command=cmd.name,
                cls=cmd.__class__.__name__,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise CommandFailedError(cmd.name, e) from e


__all__ = ["CommandPipeline"]
