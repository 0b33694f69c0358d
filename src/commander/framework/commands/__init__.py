"""Commands executed by the pipeline.

Built-in commands are registered automatically on first registry lookup.
Application commands subclass :class:`Command` and register with
:func:`commander.framework.registry.register_command`::

    from commander.framework.commands import Command, CommandContext
    from commander.framework.registry import register_command

    @register_command
    class WarmCacheCommand(Command):
        name = "WARM_CACHE"
        order = 10

        def execute(self, ctx: CommandContext) -> None:
            ctx.conn.execute("INSERT INTO cache_state VALUES ('warm')")
"""

from commander.framework.commands.base import Command, CommandContext
from commander.framework.commands.sql_script import SqlScriptCommand

BUILTIN_COMMANDS: tuple[type[Command], ...] = (SqlScriptCommand,)

__all__ = [
    "BUILTIN_COMMANDS",
    "Command",
    "CommandContext",
    "SqlScriptCommand",
]
