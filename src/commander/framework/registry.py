"""Command registry for registering and assembling commands.

Manifesto:
    The set of commands a pipeline runs is an explicit, statically built
    list.  Built-in commands are registered on first lookup; application
    command modules append their classes with ``@register_command``.  The
    entry point builds instances from settings and orders them by their
    ``order`` attribute.

Tags:
    commander, framework, registry, command-discovery

Doc-Types:
    api-reference
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from commander.core.logging import get_logger

if TYPE_CHECKING:
    from commander.core.settings import CommanderSettings
    from commander.framework.commands.base import Command

logger = get_logger(__name__)

# Global command registry, in registration order
_registry: list[type[Command]] = []
_loaded: bool = False


def register_command(cls: type[Command]) -> type[Command]:
    """Class decorator that registers a command class."""
    if cls in _registry:
        raise ValueError(f"Command class '{cls.__name__}' is already registered")
    if not cls.name:
        raise ValueError(f"Command class '{cls.__name__}' must define a name")
    _registry.append(cls)
    logger.debug("command_registered", name=cls.name, cls=cls.__name__, order=cls.order)
    return cls


def _ensure_loaded() -> None:
    """Register the built-in commands ahead of application commands (lazy initialization)."""
    global _loaded
    if not _loaded:
        from commander.framework.commands import BUILTIN_COMMANDS

        _registry[:0] = [cls for cls in BUILTIN_COMMANDS if cls not in _registry]
        _loaded = True
        logger.debug("command_registry_loaded", registered=len(_registry))


def list_commands() -> list[type[Command]]:
    """Registered command classes sorted by ``order`` (ties keep registration order)."""
    _ensure_loaded()
    return sorted(_registry, key=lambda cls: cls.order)


def build_commands(settings: CommanderSettings) -> list[Command]:
    """Instantiate every registered command from ``settings``, in pipeline order."""
    commands = [cls.from_settings(settings) for cls in list_commands()]
    logger.debug("commands_built", count=len(commands))
    return commands


def clear_registry() -> None:
    """Clear registry (for testing)."""
    global _loaded
    _registry.clear()
    _loaded = False
