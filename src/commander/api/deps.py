"""
FastAPI dependency injection — settings, pipeline and per-request connections.

Usage in routers::

    from commander.api.deps import Conn, Pipeline

    @router.post("/execute")
    def execute(pipeline: Pipeline, conn: Conn):
        ...
"""

from __future__ import annotations

from collections.abc import Generator
from typing import Annotated, Any

from fastapi import Depends, Request

from commander.core.connection import create_connection
from commander.core.settings import CommanderSettings
from commander.core.settings import get_settings as _load_cached_settings
from commander.framework.pipeline import CommandPipeline


def get_settings() -> CommanderSettings:
    """Cached settings — loaded once per process."""
    return _load_cached_settings()


def get_pipeline(request: Request) -> CommandPipeline:
    """The pipeline built at application startup."""
    return request.app.state.pipeline


def get_connection(
    settings: Annotated[CommanderSettings, Depends(get_settings)],
) -> Generator[Any, None, None]:
    """Yield a database connection for the request lifespan."""
    conn, _info = create_connection(settings.database_url)
    try:
        yield conn
    finally:
        conn.close()


Settings = Annotated[CommanderSettings, Depends(get_settings)]
Pipeline = Annotated[CommandPipeline, Depends(get_pipeline)]
Conn = Annotated[Any, Depends(get_connection)]
