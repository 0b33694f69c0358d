"""
Canonical protocol definitions for commander.

The core needs only two database capabilities: run one SQL statement, and
run a unit of work inside a transaction with rollback on error.
:class:`Connection` captures both; every adapter in
:mod:`commander.core.connection` satisfies it.

Architecture:
    ::

        Connection Protocol:
        ┌────────────────────────────────────────────────────────┐
        │ execute(sql, params)   → Execute single statement      │
        │ begin()                → Open an explicit transaction  │
        │ commit()               → Commit transaction            │
        │ rollback()             → Rollback transaction          │
        │ in_transaction         → True between begin and end    │
        │ close()                → Release the connection        │
        └────────────────────────────────────────────────────────┘

        Implementations:
        ┌────────────────────────────────────────────────────────┐
        │ SQLite            → SqliteConnection (sqlite3)         │
        │ Other SQL engines → SAConnectionBridge (SQLAlchemy)    │
        └────────────────────────────────────────────────────────┘

Tags:
    protocol, connection, database, transaction, commander
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Connection(Protocol):
    """Minimal synchronous connection interface."""

    def execute(self, sql: str, params: tuple = ()) -> Any:
        """Execute a single SQL statement."""
        ...

    def begin(self) -> None:
        """Open an explicit transaction."""
        ...

    def commit(self) -> None:
        """Commit the current transaction."""
        ...

    def rollback(self) -> None:
        """Roll back the current transaction."""
        ...

    def close(self) -> None:
        """Release the underlying connection."""
        ...

    @property
    def in_transaction(self) -> bool:
        """Whether a transaction is currently open."""
        ...


__all__ = ["Connection"]
