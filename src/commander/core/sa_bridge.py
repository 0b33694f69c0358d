"""SQLAlchemy engine factory and Connection bridge.

Manifesto:
    Scripts written for PostgreSQL (or any other engine SQLAlchemy speaks)
    must run through the same pipeline as SQLite.  ``SAConnectionBridge``
    wraps a SQLAlchemy ``Connection`` to satisfy
    :class:`commander.core.protocols.Connection`, sending each statement to
    the driver verbatim with ``exec_driver_sql``.

Tags:
    commander, sqlalchemy, engine, bridge, connection

Doc-Types:
    api-reference
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import create_engine as _sa_create_engine
from sqlalchemy.engine import Connection as SAConnection
from sqlalchemy.engine import Engine


def create_commander_engine(
    url: str,
    *,
    echo: bool = False,
    pool_size: int | None = None,
    max_overflow: int | None = None,
    **kwargs: Any,
) -> Engine:
    """Create a SQLAlchemy engine with optional pool settings."""
    pool_kwargs: dict[str, Any] = {}
    if pool_size is not None:
        pool_kwargs["pool_size"] = pool_size
    if max_overflow is not None:
        pool_kwargs["max_overflow"] = max_overflow
    return _sa_create_engine(url, echo=echo, **pool_kwargs, **kwargs)


class SAConnectionBridge:
    """Adapter that makes a SQLAlchemy ``Connection`` look like the commander ``Connection``.

    Statements are passed to the DBAPI driver unchanged, so parameter
    placeholders follow the driver's paramstyle.
    """

    def __init__(self, connection: SAConnection) -> None:
        self._connection = connection
        self._transaction: Any = None

    @classmethod
    def from_url(cls, url: str, **engine_kwargs: Any) -> SAConnectionBridge:
        engine = create_commander_engine(url, **engine_kwargs)
        return cls(engine.connect())

    # --- execute ---

    def execute(self, sql: str, params: tuple = ()) -> Any:
        if params:
            return self._connection.exec_driver_sql(sql, params)
        return self._connection.execution_options(no_parameters=True).exec_driver_sql(sql)

    # --- transaction ---

    def begin(self) -> None:
        self._transaction = self._connection.begin()

    def commit(self) -> None:
        if self._transaction is not None:
            self._transaction.commit()
            self._transaction = None
        elif self._connection.in_transaction():
            self._connection.commit()

    def rollback(self) -> None:
        if self._transaction is not None:
            self._transaction.rollback()
            self._transaction = None
        elif self._connection.in_transaction():
            self._connection.rollback()

    @property
    def in_transaction(self) -> bool:
        return self._connection.in_transaction()

    def close(self) -> None:
        engine = self._connection.engine
        self._connection.close()
        engine.dispose()

    @property
    def connection(self) -> SAConnection:
        """Access the underlying SQLAlchemy connection."""
        return self._connection
