"""
FastAPI application factory.

``create_app()`` wires the pipeline, routers, error handlers and lifespan
events into a single ``FastAPI`` instance.

Manifesto:
    The app factory is the single composition root.  The pipeline (and
    with it the cached SQL scripts) is built once at startup, so
    configuration and discovery errors stop the server before it accepts
    a request.

Tags:
    commander, api, app-factory, composition-root, FastAPI

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from commander import __version__
from commander.api.deps import get_settings
from commander.api.errors import register_exception_handlers
from commander.core.logging import configure_logging, get_logger
from commander.core.settings import CommanderSettings
from commander.framework.pipeline import CommandPipeline

log = get_logger("commander.api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan — startup / shutdown hooks."""
    settings: CommanderSettings = app.state.settings

    if app.state.pipeline is None:
        app.state.pipeline = CommandPipeline.from_settings(settings)

    log.info(
        "commander API starting",
        version=app.version,
        commands=[cmd.name for cmd in app.state.pipeline.effective_commands()],
    )
    yield
    log.info("commander API shutting down")


def create_app(
    settings: CommanderSettings | None = None,
    pipeline: CommandPipeline | None = None,
) -> FastAPI:
    """Build and return a fully-configured FastAPI application.

    Parameters
    ----------
    settings : CommanderSettings | None
        Override settings (useful for testing).  When ``None`` the cached
        singleton from :func:`get_settings` is used.
    pipeline : CommandPipeline | None
        Pre-built pipeline.  When ``None`` one is built from ``settings``
        at startup.
    """
    settings = settings or get_settings()
    configure_logging(level=settings.log_level, json_format=settings.log_format == "json")

    app = FastAPI(
        title=settings.api_title,
        version=__version__,
        lifespan=lifespan,
        docs_url=f"{settings.api_prefix}/docs",
        openapi_url=f"{settings.api_prefix}/openapi.json",
    )

    app.state.settings = settings
    app.state.pipeline = pipeline

    # Override DI so endpoints use the provided settings
    app.dependency_overrides[get_settings] = lambda: settings

    register_exception_handlers(app)

    from commander.api.routers import commands, execute

    prefix = settings.api_prefix
    app.include_router(execute.router, prefix=prefix, tags=["execute"])
    app.include_router(commands.router, prefix=prefix, tags=["commands"])

    return app
