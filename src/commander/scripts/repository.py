"""
Script repository — discover, filter, sort and read SQL scripts.

Manifesto:
    Script discovery must be deterministic: the same resource set always
    yields the same ordered list, regardless of filesystem enumeration
    order.  It must also be all-or-nothing: a missing external directory
    or an unreadable file fails the whole call rather than silently
    running a subset of the scripts.

Scripts are read from one bundled package (resolved with
:mod:`importlib.resources`) and, optionally, one external directory.
A file matches when its name has the shape ``{prefix}*{suffix}.sql``.
Matched names pass through the script :class:`NameFilter`, are merged
across locations and stable-sorted by name, so duplicate names from
different locations stay adjacent in location order.

The repository does not cache; caching policy belongs to the caller
(:class:`commander.framework.commands.sql_script.SqlScriptCommand`).

Examples:
    >>> repo = ScriptRepository(
    ...     locations=[PackageLocation("myapp.sql"), DirectoryLocation("/opt/sql")],
    ...     prefix="V",
    ... )
    >>> [s.name for s in repo.discover()]
    ['V001_init.sql', 'V002_seed.sql']

Tags:
    commander, scripts, discovery, sql, resources

Doc-Types:
    api-reference
"""

from __future__ import annotations

import importlib.resources
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from commander.core.errors import ConfigError, DiscoveryError, ScriptPathError
from commander.core.logging import get_logger
from commander.framework.filters import NameFilter

if TYPE_CHECKING:
    from importlib.resources.abc import Traversable

    from commander.core.settings import ScriptSettings

log = get_logger(__name__)

SQL_EXTENSION = ".sql"


@dataclass(frozen=True)
class Script:
    """One discovered SQL source unit."""

    name: str
    body: str
    location: str

    def __repr__(self) -> str:
        return f"Script(name={self.name!r}, location={self.location!r}, chars={len(self.body)})"


def matches_pattern(name: str, prefix: str = "", suffix: str = "") -> bool:
    """Return ``True`` if ``name`` has the shape ``{prefix}*{suffix}.sql``."""
    tail = suffix + SQL_EXTENSION
    return name.startswith(prefix) and name.endswith(tail) and len(name) >= len(prefix) + len(tail)


# ── Locations ────────────────────────────────────────────────────────────


class ScriptLocation(ABC):
    """A source of ``.sql`` files addressable by file name."""

    @property
    @abstractmethod
    def label(self) -> str:
        """Human-readable identifier used in logs and :attr:`Script.location`."""

    @abstractmethod
    def list_names(self) -> list[str]:
        """Return file names at this location, sorted."""

    @abstractmethod
    def read(self, name: str) -> str:
        """Read one file fully as UTF-8 text."""


class PackageLocation(ScriptLocation):
    """Bundled, read-only resources of an importable package (non-recursive)."""

    def __init__(self, package: str) -> None:
        self.package = package

    @property
    def label(self) -> str:
        return f"package:{self.package}"

    def _root(self) -> Traversable:
        try:
            return importlib.resources.files(self.package)
        except (ModuleNotFoundError, TypeError) as e:
            raise DiscoveryError(f"Script package '{self.package}' cannot be loaded", cause=e).with_context(
                location=self.label
            ) from e

    def list_names(self) -> list[str]:
        try:
            return sorted(entry.name for entry in self._root().iterdir() if entry.is_file())
        except OSError as e:
            raise DiscoveryError(f"Cannot list scripts in {self.label}: {e}", cause=e).with_context(
                location=self.label
            ) from e

    def read(self, name: str) -> str:
        return self._root().joinpath(name).read_text(encoding="utf-8")

    def __repr__(self) -> str:
        return f"PackageLocation({self.package!r})"


class DirectoryLocation(ScriptLocation):
    """External filesystem directory (non-recursive).

    A configured directory that does not exist, is not a directory or
    cannot be listed raises :class:`ScriptPathError`.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    @property
    def label(self) -> str:
        return str(self.path)

    def list_names(self) -> list[str]:
        if not self.path.exists():
            raise ScriptPathError(f"Script path does not exist: {self.path}").with_context(location=self.label)
        if not self.path.is_dir():
            raise ScriptPathError(f"Script path is not a directory: {self.path}").with_context(location=self.label)
        try:
            return sorted(entry.name for entry in self.path.iterdir() if entry.is_file())
        except OSError as e:
            raise ScriptPathError(f"Script path is not readable: {self.path} ({e})", cause=e).with_context(
                location=self.label
            ) from e

    def read(self, name: str) -> str:
        return (self.path / name).read_text(encoding="utf-8")

    def __repr__(self) -> str:
        return f"DirectoryLocation({str(self.path)!r})"


# ── Discovery ────────────────────────────────────────────────────────────


def _read_script(location: ScriptLocation, name: str) -> Script:
    try:
        body = location.read(name)
    except (OSError, UnicodeDecodeError) as e:
        log.error("script.read_failed", script=name, location=location.label, error=str(e))
        raise DiscoveryError(f"Cannot read script '{name}' from {location.label}: {e}", cause=e).with_context(
            script=name, location=location.label
        ) from e
    return Script(name=name, body=body, location=location.label)


def discover(
    locations: Sequence[ScriptLocation],
    prefix: str = "",
    suffix: str = "",
    includes: str | Iterable[str] | None = None,
    excludes: str | Iterable[str] | None = None,
    *,
    name_filter: NameFilter | None = None,
) -> list[Script]:
    """Discover, filter, sort and read scripts from ``locations``.

    Args:
        locations: Sources in enumeration order (bundled package first).
        prefix: File name prefix; may be empty.
        suffix: File name suffix before ``.sql``; may be empty.
        includes: Script names to keep (empty = all). Ignored if ``name_filter`` is given.
        excludes: Script names to drop. Ignored if ``name_filter`` is given.
        name_filter: Prebuilt filter.

    Returns:
        Scripts sorted by name; ties keep location order.

    Raises:
        ScriptPathError: External directory missing or unreadable.
        DiscoveryError: Any enumeration or read failure.
        ConfigError: Malformed ``includes``/``excludes``.
    """
    if name_filter is None:
        try:
            name_filter = NameFilter.parse(includes, excludes)
        except ValueError as e:
            raise ConfigError(f"Invalid script filter: {e}", cause=e) from e

    matched: list[tuple[str, ScriptLocation]] = []
    for location in locations:
        names = [name for name in location.list_names() if matches_pattern(name, prefix, suffix)]
        kept = name_filter.apply(names, key=lambda name: name)
        log.debug(
            "scripts.location_scanned",
            location=location.label,
            matched=len(names),
            kept=len(kept),
        )
        matched.extend((name, location) for name in kept)

    matched.sort(key=lambda item: item[0])
    scripts = [_read_script(location, name) for name, location in matched]

    log.debug("scripts.discovered", count=len(scripts), scripts=[s.name for s in scripts])
    return scripts


class ScriptRepository:
    """Discovery configuration (locations, pattern, filter) bundled into one object."""

    def __init__(
        self,
        locations: Iterable[ScriptLocation],
        prefix: str = "",
        suffix: str = "",
        name_filter: NameFilter | None = None,
    ) -> None:
        self.locations = tuple(locations)
        self.prefix = prefix
        self.suffix = suffix
        self.name_filter = name_filter or NameFilter()

    @classmethod
    def from_settings(cls, settings: ScriptSettings) -> ScriptRepository:
        """Bundled package first, then the optional external ``script.path``."""
        locations: list[ScriptLocation] = [PackageLocation(settings.package)]
        if settings.path is not None:
            locations.append(DirectoryLocation(settings.path))
        return cls(
            locations=locations,
            prefix=settings.prefix,
            suffix=settings.suffix,
            name_filter=settings.name_filter,
        )

    def discover(self) -> list[Script]:
        return discover(self.locations, self.prefix, self.suffix, name_filter=self.name_filter)

    def __repr__(self) -> str:
        return (
            f"ScriptRepository(locations={list(self.locations)!r}, prefix={self.prefix!r}, "
            f"suffix={self.suffix!r}, name_filter={self.name_filter!r})"
        )


__all__ = [
    "Script",
    "ScriptLocation",
    "PackageLocation",
    "DirectoryLocation",
    "ScriptRepository",
    "matches_pattern",
    "discover",
]
