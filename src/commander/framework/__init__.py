"""
Commander Framework - commands, registry and the command pipeline.

This module provides:
- Command base class and per-run context
- Command registration and assembly
- Include/exclude name filtering
- The transactional command pipeline
"""

from commander.framework.commands import Command, CommandContext, SqlScriptCommand
from commander.framework.filters import NameFilter, parse_name_list
from commander.framework.pipeline import CommandPipeline
from commander.framework.registry import build_commands, clear_registry, list_commands, register_command

__all__ = [
    # Commands
    "Command",
    "CommandContext",
    "SqlScriptCommand",
    # Filtering
    "NameFilter",
    "parse_name_list",
    # Registry
    "register_command",
    "list_commands",
    "build_commands",
    "clear_registry",
    # Pipeline
    "CommandPipeline",
]
