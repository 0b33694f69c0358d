"""Allow ``python -m commander``."""

from commander.cli.app import app

app()
