"""
Commander logging - structured logging with structlog.

Manifesto:
    Every failure in a pipeline run is logged with the originating command
    and script before it propagates.  Structured fields make that possible
    without string formatting:

    - **Structures:** JSON output for log aggregation
    - **Correlates:** ``run_id`` and ``caller`` bound for a whole pipeline run
    - **Flexes:** Console output for development, JSON for production

Examples:
    >>> from commander.core.logging import configure_logging, get_logger
    >>> configure_logging(level="INFO", json_format=True)
    >>> log = get_logger(__name__)
    >>> log.info("scripts.discovered", count=2)

    Timing a step:

    >>> with log_step("command.execute", command="SQL_SCRIPT"):
    ...     run()

Tags:
    logging, structlog, observability, commander

Doc-Types:
    api-reference
"""

from __future__ import annotations

import logging
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

# Store service name for metadata
_SERVICE_NAME = "commander"


def _add_service_metadata(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add service-level metadata to all logs."""
    event_dict.setdefault("service", _SERVICE_NAME)
    return event_dict


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "commander",
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: True for JSON, False for console, None for auto (JSON if not tty)
        service: Service name to include in logs
        add_timestamp: Include ISO timestamp in logs
    """
    global _SERVICE_NAME
    _SERVICE_NAME = service

    if json_format is None:
        json_format = not sys.stderr.isatty()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _add_service_metadata,
    ]

    if add_timestamp:
        shared_processors.insert(0, structlog.processors.TimeStamper(fmt="iso", utc=True))

    if json_format:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level.upper())),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper()),
    )


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger (usually with ``__name__``)."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context to include in all subsequent logs."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove specific keys from logging context."""
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    """Clear all bound context."""
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Context manager for scoped logging context.

    Example:
        with LogContext(run_id="abc123", caller="api"):
            log.info("pipeline.started")
        # run_id and caller unbound here
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs

    def __enter__(self) -> LogContext:
        bind_context(**self._context)
        return self

    def __exit__(self, *args: Any) -> None:
        unbind_context(*self._context.keys())


@dataclass
class TimingResult:
    """Result of a timed step."""

    step: str
    started_at: float = field(default_factory=time.perf_counter)
    ended_at: float | None = None
    metrics: dict[str, Any] = field(default_factory=dict)

    def stop(self) -> TimingResult:
        self.ended_at = time.perf_counter()
        return self

    @property
    def duration_ms(self) -> float:
        end = self.ended_at if self.ended_at is not None else time.perf_counter()
        return (end - self.started_at) * 1000

    def add_metric(self, key: str, value: Any) -> TimingResult:
        """Add a metric to include in the ``.end`` log line."""
        self.metrics[key] = value
        return self


@contextmanager
def log_step(event: str, level: str = "info", error_level: str = "error", **fields: Any) -> Iterator[TimingResult]:
    """
    Context manager that logs step start/end with timing.

    Logs:
    - Start: DEBUG ``{event}.start``
    - End: ``{event}.end`` at ``level`` with ``duration_ms``
    - Error: ``{event}.error`` at ``error_level`` with ``error`` and ``error_type``, then re-raises.
      Pass ``error_level="debug"`` when an outer handler already logs the failure.

    Usage:
        with log_step("script.run", script="001_init.sql") as timer:
            count = run(script)
            timer.add_metric("statements", count)
    """
    log = get_logger("commander.timing")
    timer = TimingResult(step=event)

    log.debug(f"{event}.start", **fields)
    try:
        yield timer
    except Exception as e:
        timer.stop()
        getattr(log, error_level)(
            f"{event}.error",
            duration_ms=round(timer.duration_ms, 2),
            error=str(e),
            error_type=type(e).__name__,
            **fields,
        )
        raise
    timer.stop()
    getattr(log, level)(f"{event}.end", duration_ms=round(timer.duration_ms, 2), **fields, **timer.metrics)


__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "LogContext",
    "TimingResult",
    "log_step",
]
