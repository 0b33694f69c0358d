"""Base command interface."""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from commander.core.protocols import Connection

if TYPE_CHECKING:
    from commander.core.settings import CommanderSettings


@dataclass
class CommandContext:
    """Context passed to every command in a pipeline run.

    Attributes:
        conn: Connection inside the run's open transaction.
        run_id: Unique ID for this pipeline run (auto-generated).
        caller: Origin of the trigger: ``"api"``, ``"cli"`` or ``"sdk"``.
        metadata: Arbitrary key/value pairs forwarded to logging.
    """

    conn: Connection
    run_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    caller: str = "sdk"
    metadata: dict[str, Any] = field(default_factory=dict)


class Command(ABC):
    """Base class for all commands.

    ``name`` is the stable identifier matched by ``cmd.includes`` /
    ``cmd.excludes``; it is not the class name.  ``order`` positions the
    command in the pipeline: lower runs first.
    """

    name: str = ""
    order: int = 0
    description: str = ""

    @classmethod
    def from_settings(cls, settings: CommanderSettings) -> Command:
        """Build the command from process settings. Override when configuration is needed."""
        return cls()

    @abstractmethod
    def execute(self, ctx: CommandContext) -> None:
        """Run the command. Raise to fail the pipeline run."""
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, order={self.order})"
