"""Unit of work — one transaction around a pipeline run.

``UnitOfWork`` is the explicit transaction boundary the pipeline opens
around all of its commands: ``BEGIN`` on enter, ``COMMIT`` when the block
completes, ``ROLLBACK`` when it raises (the exception is re-raised).

A unit of work refuses to open on a connection that is already inside a
transaction, so overlapping runs on the same connection fail fast instead
of interleaving.

.. note::
    Rollback covers DDL only where the store supports transactional DDL.
    SQLite and PostgreSQL roll back ``CREATE``/``ALTER``/``DROP``; MySQL,
    MariaDB and Oracle commit DDL implicitly, so a failed run may leave
    schema changes from earlier statements in place.
"""

from __future__ import annotations

from types import TracebackType

from commander.core.errors import TransactionError
from commander.core.logging import get_logger
from commander.core.protocols import Connection

log = get_logger(__name__)


class UnitOfWork:
    """Context manager demarcating one transaction on ``conn``.

    Usage::

        with UnitOfWork(conn) as uow:
            uow.conn.execute("INSERT INTO t VALUES (1)")
        # committed here; rolled back if the block raised
    """

    def __init__(self, conn: Connection) -> None:
        self.conn = conn
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def __enter__(self) -> UnitOfWork:
        if self._active or self.conn.in_transaction:
            raise TransactionError("Connection is already inside a transaction; nested units of work are not supported")
        self.conn.begin()
        self._active = True
        log.debug("transaction.begin")
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self._active = False
        if exc_type is None:
            try:
                self.conn.commit()
            except Exception as e:
                log.error("transaction.commit_failed", error=str(e), error_type=type(e).__name__)
                self._rollback_quietly()
                raise
            log.debug("transaction.commit")
            return
        self._rollback_quietly()
        log.warning("transaction.rollback", error_type=exc_type.__name__)

    def _rollback_quietly(self) -> None:
        """Roll back; a rollback failure is logged and never replaces the in-flight exception."""
        try:
            self.conn.rollback()
        except Exception as e:
            log.error("transaction.rollback_failed", error=str(e), error_type=type(e).__name__)


__all__ = ["UnitOfWork"]
