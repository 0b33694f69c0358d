"""Split a SQL script into individual statements.

Splits on the delimiter only outside of quoted text and comments:

- ``'single-quoted'`` literals, including doubled ``''`` and ``\\'`` escapes
- ``"double-quoted"`` identifiers
- ``-- line comments`` and ``/* block comments */``

Comments are dropped, runs of whitespace outside quotes collapse to a single
space, statements are trimmed and empty statements are skipped.  A final
statement without a trailing delimiter is kept.
"""

from __future__ import annotations

from commander.core.errors import ScriptParseError

DEFAULT_DELIMITER = ";"


def split_sql_script(script: str, delimiter: str = DEFAULT_DELIMITER) -> list[str]:
    """Split ``script`` into statements on ``delimiter``.

    Raises:
        ValueError: If ``delimiter`` is empty.
        ScriptParseError: On an unterminated quoted literal or block comment.

    Example:
        >>> split_sql_script("INSERT INTO t VALUES (1);INSERT INTO t VALUES (2);")
        ['INSERT INTO t VALUES (1)', 'INSERT INTO t VALUES (2)']
    """
    if not delimiter:
        raise ValueError("delimiter must not be empty")

    statements: list[str] = []
    buf: list[str] = []
    quote: str | None = None
    i = 0
    n = len(script)

    def space() -> None:
        if buf and buf[-1] != " ":
            buf.append(" ")

    def flush() -> None:
        stmt = "".join(buf).strip()
        if stmt:
            statements.append(stmt)
        buf.clear()

    while i < n:
        c = script[i]

        if quote is not None:
            buf.append(c)
            if c == "\\" and i + 1 < n:
                buf.append(script[i + 1])
                i += 2
                continue
            if c == quote:
                quote = None
            i += 1
            continue

        if c in ("'", '"'):
            quote = c
            buf.append(c)
            i += 1
        elif script.startswith("--", i):
            end = script.find("\n", i)
            i = n if end == -1 else end
            space()
        elif script.startswith("/*", i):
            end = script.find("*/", i + 2)
            if end == -1:
                line = script.count("\n", 0, i) + 1
                raise ScriptParseError(f"Unterminated block comment starting on line {line}")
            i = end + 2
            space()
        elif script.startswith(delimiter, i):
            flush()
            i += len(delimiter)
        elif c.isspace():
            space()
            i += 1
        else:
            buf.append(c)
            i += 1

    if quote is not None:
        raise ScriptParseError(f"Unterminated quoted text ({quote}) at end of script")

    flush()
    return statements


__all__ = ["DEFAULT_DELIMITER", "split_sql_script"]
