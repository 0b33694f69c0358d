"""Commander Core -- errors, logging, settings, connections and transactions.

Architecture::

    errors.py          Structured error hierarchy (CommanderError, ...)
    logging.py         structlog configuration, LogContext, log_step
    settings.py        CommanderSettings (pydantic-settings)
    protocols.py       Connection protocol
    sqlite_conn.py     SQLite adapter with explicit transactions
    sa_bridge.py       SQLAlchemy adapter for other engines
    connection.py      create_connection() URL factory
    transaction.py     UnitOfWork (BEGIN / COMMIT / ROLLBACK)
"""

from commander.core.errors import (
    CommandFailedError,
    CommanderError,
    ConfigError,
    DiscoveryError,
    PipelineBusyError,
    ScriptParseError,
    ScriptPathError,
    StatementExecutionError,
    TransactionError,
)

__all__ = [
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
