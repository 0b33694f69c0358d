"""Connection factory — create database connections from URL strings.

Supported URL schemes
---------------------
==================  ==========================================  ============
Scheme              Example                                     Backend
==================  ==========================================  ============
``memory``          ``memory`` or ``:memory:`` or ``None``      SQLite RAM
``sqlite``          ``sqlite:///path/to/file.db``               SQLite file
``(file path)``     ``./data/app.db``                           SQLite file
``<dialect>://``    ``postgresql://user:pw@host:5432/db``       SQLAlchemy
==================  ==========================================  ============

Usage
-----
::

    from commander.core.connection import create_connection

    conn, info = create_connection("sqlite:///app.db")
    print(info)
    # ConnectionInfo(backend='sqlite', persistent=True, path='/srv/app.db')
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from commander.core.errors import ConfigError
from commander.core.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class ConnectionInfo:
    """Metadata about a database connection."""

    backend: str
    """Backend identifier: ``"sqlite"`` or the SQLAlchemy dialect name."""

    persistent: bool
    """Whether data survives process exit."""

    url: str
    """The original URL or path used to create the connection."""

    resolved_path: str | None = None
    """For file-based SQLite, the resolved absolute path."""

    def __repr__(self) -> str:
        parts = [f"backend={self.backend!r}", f"persistent={self.persistent}"]
        if self.resolved_path:
            parts.append(f"path={self.resolved_path!r}")
        else:
            parts.append(f"url={_mask_password(self.url)!r}")
        return f"ConnectionInfo({', '.join(parts)})"

    @property
    def is_sqlite(self) -> bool:
        return self.backend == "sqlite"


def _mask_password(url: str) -> str:
    if "://" not in url or "@" not in url:
        return url
    scheme, rest = url.split("://", 1)
    creds, host = rest.rsplit("@", 1)
    user = creds.split(":", 1)[0]
    return f"{scheme}://{user}:***@{host}"


def _create_sqlite_memory() -> tuple[Any, ConnectionInfo]:
    from commander.core.sqlite_conn import SqliteConnection

    return SqliteConnection(":memory:"), ConnectionInfo(backend="sqlite", persistent=False, url=":memory:")


def _create_sqlite_file(path_str: str) -> tuple[Any, ConnectionInfo]:
    from commander.core.sqlite_conn import SqliteConnection

    path = Path(path_str)
    path.parent.mkdir(parents=True, exist_ok=True)
    resolved = str(path.resolve())
    conn = SqliteConnection(resolved)
    return conn, ConnectionInfo(backend="sqlite", persistent=True, url=path_str, resolved_path=resolved)


def _create_sqlalchemy(url: str) -> tuple[Any, ConnectionInfo]:
    from commander.core.sa_bridge import SAConnectionBridge

    conn = SAConnectionBridge.from_url(url)
    backend = conn.connection.dialect.name
    return conn, ConnectionInfo(backend=backend, persistent=True, url=url)


def _parse_url(db: str | None) -> tuple[str, str]:
    """Parse a database URL into ``(scheme, target)``.

    ``scheme`` is one of ``"memory"``, ``"sqlite"``, ``"file"`` or
    ``"sqlalchemy"``.
    """
    if db is None or db in ("", "memory", ":memory:"):
        return "memory", ":memory:"

    for prefix in ("sqlite:///", "sqlite://"):
        if db.startswith(prefix):
            path = db[len(prefix):]
            if not path or path == ":memory:":
                return "memory", ":memory:"
            return "sqlite", path

    if "://" in db:
        return "sqlalchemy", db

    return "file", db


def create_connection(db: str | None = None, *, data_dir: str | None = None) -> tuple[Any, ConnectionInfo]:
    """Create a database connection from a URL, path, or keyword.

    Parameters
    ----------
    db:
        ``None``/``"memory"`` for in-memory SQLite, a file path or
        ``sqlite:///`` URL for file SQLite, or any other SQLAlchemy URL.
    data_dir:
        For relative SQLite paths, resolve within this directory.

    Raises
    ------
    ConfigError
        If the URL names a backend SQLAlchemy cannot load.
    """
    scheme, target = _parse_url(db)

    if scheme == "memory":
        conn, info = _create_sqlite_memory()
    elif scheme in ("sqlite", "file"):
        if data_dir and not Path(target).is_absolute():
            target = str(Path(data_dir) / target)
        conn, info = _create_sqlite_file(target)
    else:
        from sqlalchemy.exc import ArgumentError, NoSuchModuleError

        try:
            conn, info = _create_sqlalchemy(target)
        except (ArgumentError, NoSuchModuleError) as e:
            raise ConfigError(f"Unsupported database URL: {_mask_password(target)}", cause=e) from e

    log.debug("connection.created", backend=info.backend, persistent=info.persistent)
    return conn, info


__all__ = ["ConnectionInfo", "create_connection"]
