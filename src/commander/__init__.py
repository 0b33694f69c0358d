"""
Commander - ordered, filtered startup commands run inside one transaction.

Modules:
    commander.core        Errors, logging, settings, connections, unit of work
    commander.scripts     SQL script discovery and statement splitting
    commander.framework   Command contract, registry and pipeline
    commander.api         HTTP trigger (FastAPI)
    commander.cli         Command-line interface (Typer)
"""

__version__ = "0.1.0"
