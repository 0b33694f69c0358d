"""Small assertions shared by the database-facing tests."""

from __future__ import annotations

from typing import Any


def table_exists(conn: Any, name: str) -> bool:
    row = conn.execute("SELECT name FROM sqlite_master WHERE type = 'table' AND name = ?", (name,)).fetchone()
    return row is not None


def count_rows(conn: Any, table: str) -> int:
    return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
