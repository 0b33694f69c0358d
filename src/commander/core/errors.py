"""
Structured error types for commander.

Every failure raised by the pipeline, the SQL script command, the script
repository or the settings loader is a :class:`CommanderError`.  Errors
carry a category for routing, a structured context (which command, which
script, which statement) and the chained underlying exception.

Manifesto:
    - **Typed hierarchy:** One class per failure mode named in the design
    - **Rich context:** Errors carry command/script metadata for logging
    - **Error chaining:** The driver or I/O exception is preserved as cause
    - **No retries:** Nothing here is retryable; a failure aborts the run

Architecture:
    ::

        CommanderError  (category, context, cause)
        ├── ConfigError                 CONFIG
        ├── DiscoveryError              SOURCE
        │   └── ScriptPathError         CONFIG
        ├── ScriptParseError            PARSE
        ├── StatementExecutionError     DATABASE
        ├── TransactionError            DATABASE
        ├── CommandFailedError          PIPELINE
        └── PipelineBusyError           PIPELINE

Examples:
    >>> err = StatementExecutionError("no such table: t").with_context(
    ...     script="001_init.sql", statement_index=2
    ... )
    >>> err.context.script
    '001_init.sql'
    >>> err.to_dict()["category"]
    'DATABASE'

Tags:
    error-handling, exception-hierarchy, error-context, commander

Doc-Types:
    api-reference
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error categories used for classification in logs and API responses."""

    CONFIG = "CONFIG"  # Missing or malformed settings
    SOURCE = "SOURCE"  # Script enumeration or read failure
    PARSE = "PARSE"  # Script text cannot be split
    DATABASE = "DATABASE"  # Statement or transaction failure
    PIPELINE = "PIPELINE"  # Command execution failures
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        command: Name of the command being executed (e.g. ``SQL_SCRIPT``)
        script: Name of the script file (e.g. ``001_init.sql``)
        statement_index: 1-based position of the failing statement in its script
        location: Script source (package or directory) being read
        metadata: Additional key-value pairs
    """

    command: str | None = None
    script: str | None = None
    statement_index: int | None = None
    location: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result: dict[str, Any] = {}
        for key in ["command", "script", "statement_index", "location"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class CommanderError(Exception):
    """
    Base exception for all commander errors.

    Subclasses set ``default_category``.  The optional ``cause`` is chained
    as ``__cause__`` so tracebacks show the originating driver or I/O error.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> CommanderError:
        """
        Add context to this error (fluent API).

        Usage:
            raise DiscoveryError("Failed").with_context(location="/opt/sql")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Serialize error for logging and API responses."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "context": self.context.to_dict(),
        }
        if self.cause is not None:
            result["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION
# =============================================================================


class ConfigError(CommanderError):
    """Missing, malformed or contradictory configuration."""

    default_category = ErrorCategory.CONFIG


# =============================================================================
# SCRIPTS
# =============================================================================


class DiscoveryError(CommanderError):
    """
    Script enumeration or read failure.

    Fatal for the whole ``discover()`` call: no partial results are returned.
    """

    default_category = ErrorCategory.SOURCE


class ScriptPathError(DiscoveryError):
    """The configured external script directory is missing or unreadable."""

    default_category = ErrorCategory.CONFIG


class ScriptParseError(CommanderError):
    """Script text has an unterminated quoted literal or block comment."""

    default_category = ErrorCategory.PARSE


class StatementExecutionError(CommanderError):
    """A single SQL statement failed; remaining statements are not run."""

    default_category = ErrorCategory.DATABASE


class TransactionError(CommanderError):
    """Transaction demarcation misuse, e.g. a nested unit of work."""

    default_category = ErrorCategory.DATABASE


# =============================================================================
# PIPELINE
# =============================================================================


class CommandFailedError(CommanderError):
    """
    A command raised during a pipeline run.

    The pipeline stopped at this command and rolled the transaction back.
    ``command_name`` is the filter name of the failing command.
    """

    default_category = ErrorCategory.PIPELINE

    def __init__(self, command_name: str, cause: BaseException, **kwargs: Any):
        detail = cause.message if isinstance(cause, CommanderError) else str(cause)
        super().__init__(
            f"Command '{command_name}' failed: {detail}",
            cause=cause,
            **kwargs,
        )
        self.command_name = command_name
        self.context.command = command_name


class PipelineBusyError(CommanderError):
    """``execute()`` was called while another run was still in flight."""

    default_category = ErrorCategory.PIPELINE

    def __init__(self, message: str = "A pipeline run is already in progress", **kwargs: Any):
        super().__init__(message, **kwargs)


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "CommanderError",
    "ConfigError",
    "DiscoveryError",
    "ScriptPathError",
    "ScriptParseError",
    "StatementExecutionError",
    "TransactionError",
    "CommandFailedError",
    "PipelineBusyError",
]
