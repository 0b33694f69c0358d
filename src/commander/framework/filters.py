"""Include/exclude name filtering.

One rule serves both command names and script file names::

    matches(name) = (not includes or name in includes) and name not in excludes

Excludes always win over includes for the same name.  Filter lists are
parsed once, eagerly, from comma-separated configuration values.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import TypeVar

T = TypeVar("T")


def parse_name_list(value: str | Iterable[str] | None) -> frozenset[str]:
    """Parse a comma-separated list of names into a set.

    A blank value yields the empty set.  Entries are stripped of
    surrounding whitespace; inner spaces are kept, since file names may
    contain them.

    Raises:
        ValueError: If an entry is empty (``"a,,b"``, trailing comma).
    """
    if value is None:
        return frozenset()
    if isinstance(value, str):
        if not value.strip():
            return frozenset()
        items: Sequence[str] = value.split(",")
    else:
        items = list(value)

    names = set()
    for raw in items:
        name = raw.strip()
        if not name:
            raise ValueError(f"Empty entry in name list {value!r}")
        names.add(name)
    return frozenset(names)


@dataclass(frozen=True)
class NameFilter:
    """Immutable include/exclude pair."""

    includes: frozenset[str] = field(default_factory=frozenset)
    excludes: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def parse(cls, includes: str | Iterable[str] | None = None, excludes: str | Iterable[str] | None = None) -> NameFilter:
        return cls(parse_name_list(includes), parse_name_list(excludes))

    def matches(self, name: str) -> bool:
        """Return ``True`` if ``name`` survives the filter."""
        if self.includes and name not in self.includes:
            return False
        return name not in self.excludes

    def apply(self, items: Iterable[T], key: Callable[[T], str]) -> list[T]:
        """Keep items whose ``key(item)`` matches, preserving input order."""
        return [item for item in items if self.matches(key(item))]

    @property
    def is_empty(self) -> bool:
        return not self.includes and not self.excludes

    def __repr__(self) -> str:
        return f"NameFilter(includes={sorted(self.includes)}, excludes={sorted(self.excludes)})"


__all__ = ["NameFilter", "parse_name_list"]
