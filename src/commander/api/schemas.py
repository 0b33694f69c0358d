"""
API schemas — RFC 7807 error envelope and command listings.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ProblemDetail(BaseModel):
    """RFC 7807 «Problem Details for HTTP APIs».

    Example:
        {
            "type": "about:blank",
            "title": "Command failed",
            "status": 500,
            "detail": "Command 'SQL_SCRIPT' failed: Statement 2 of script '001_init.sql' failed: ...",
            "instance": "http://testserver/execute",
            "command": "SQL_SCRIPT"
        }
    """

    type: str = Field(default="about:blank", description="Error type URI (usually 'about:blank')")
    title: str = Field(description="Short human-readable error summary")
    status: int = Field(description="HTTP status code")
    detail: str = Field(default="", description="Human-readable explanation of the error")
    instance: str = Field(default="", description="URI of the failing request")
    command: str | None = Field(default=None, description="Name of the failing command, if any")
    category: str | None = Field(default=None, description="Error category (CONFIG, DATABASE, PIPELINE, ...)")


class CommandSchema(BaseModel):
    """One registered command, in pipeline order."""

    name: str = Field(description="Filter name (e.g. SQL_SCRIPT)")
    order: int = Field(description="Position key; lower runs first")
    cls: str = Field(description="Implementing class")
    description: str = Field(default="")
    enabled: bool = Field(description="True if the command passes cmd.includes / cmd.excludes")


class HealthSchema(BaseModel):
    status: str = "ok"
    running: bool = Field(default=False, description="True while a pipeline run is in progress")
