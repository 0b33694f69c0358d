"""
Error handlers — map commander errors to RFC 7807 responses.

==========================  ======
Error                       Status
==========================  ======
PipelineBusyError           409
CommandFailedError          500
other CommanderError        500
unhandled Exception         500
==========================  ======
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from commander.api.schemas import ProblemDetail
from commander.core.errors import CommandFailedError, CommanderError, PipelineBusyError


def problem_response(
    *,
    status: int,
    title: str,
    detail: str = "",
    instance: str = "",
    command: str | None = None,
    category: str | None = None,
) -> JSONResponse:
    """Build a RFC 7807 JSON error response."""
    body = ProblemDetail(
        title=title,
        status=status,
        detail=detail,
        instance=instance,
        command=command,
        category=category,
    )
    return JSONResponse(
        status_code=status,
        content=body.model_dump(exclude_none=True),
        media_type="application/problem+json",
    )


async def command_failed_handler(request: Request, exc: CommandFailedError) -> JSONResponse:
    return problem_response(
        status=500,
        title="Command failed",
        detail=exc.message,
        instance=str(request.url),
        command=exc.command_name,
        category=exc.category.value,
    )


async def pipeline_busy_handler(request: Request, exc: PipelineBusyError) -> JSONResponse:
    return problem_response(
        status=409,
        title="Pipeline busy",
        detail=exc.message,
        instance=str(request.url),
        category=exc.category.value,
    )


async def commander_error_handler(request: Request, exc: CommanderError) -> JSONResponse:
    return problem_response(
        status=500,
        title=type(exc).__name__,
        detail=exc.message,
        instance=str(request.url),
        command=exc.context.command,
        category=exc.category.value,
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions — returns 500 with ProblemDetail."""
    return problem_response(
        status=500,
        title="Internal Server Error",
        detail=str(exc) if request.app.state.settings.debug else "An unexpected error occurred.",
        instance=str(request.url),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PipelineBusyError, pipeline_busy_handler)
    app.add_exception_handler(CommandFailedError, command_failed_handler)
    app.add_exception_handler(CommanderError, commander_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
