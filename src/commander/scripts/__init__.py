"""SQL script discovery and statement splitting."""

from commander.scripts.repository import (
    DirectoryLocation,
    PackageLocation,
    Script,
    ScriptLocation,
    ScriptRepository,
    discover,
)
from commander.scripts.splitter import split_sql_script

__all__ = [
    "Script",
    "ScriptLocation",
    "PackageLocation",
    "DirectoryLocation",
    "ScriptRepository",
    "discover",
    "split_sql_script",
]
