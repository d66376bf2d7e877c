"""Structured logging with structlog, request_id and run context."""

import logging
import time
from collections.abc import Iterator, MutableMapping
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

import structlog

from ppilab.core.config import get_settings

# Correlation for HTTP requests and pipeline runs
request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)
run_id_ctx: ContextVar[str | None] = ContextVar("run_id", default=None)


def add_correlation_ids(
    _logger: structlog.types.WrappedLogger,
    _method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Add request_id and run_id from context to log events."""
    request_id = request_id_ctx.get()
    if request_id:
        event_dict["request_id"] = request_id
    run_id = run_id_ctx.get()
    if run_id:
        event_dict["run_id"] = run_id
    return event_dict


def add_service_context(
    _logger: structlog.types.WrappedLogger,
    _method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Tag every event with the service name and environment."""
    settings = get_settings()
    event_dict.setdefault("service", settings.app_name)
    event_dict.setdefault("env", settings.app_env)
    return event_dict


def configure_logging() -> None:
    """Configure structlog for the API process and CLI scripts.

    Python warnings (statsmodels emits many during order search) are
    routed into the stdlib ``py.warnings`` logger instead of stderr.
    """
    settings = get_settings()

    shared_processors: list[structlog.types.Processor] = [
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        add_correlation_ids,
        add_service_context,
    ]

    renderer: structlog.types.Processor
    if settings.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.captureWarnings(True)


def get_logger(name: str | None = None) -> structlog.typing.FilteringBoundLogger:
    """Get a configured logger instance.

    Args:
        name: Logger name (typically __name__ of the calling module).

    Returns:
        Configured structlog logger.
    """
    logger: structlog.typing.FilteringBoundLogger = structlog.get_logger(name)
    return logger


@contextmanager
def log_duration(
    logger: structlog.typing.FilteringBoundLogger,
    event: str,
    **context: Any,  # noqa: ANN401
) -> Iterator[dict[str, Any]]:
    """Emit ``<event>_started`` / ``<event>_completed`` with duration_ms.

    The yielded dict is merged into the completion event, so callers can
    attach results (counts, winners) discovered inside the block. Nothing is
    logged on exit by exception; the caller owns failure logging.

    Args:
        logger: Logger to emit on.
        event: Dotted event prefix, e.g. ``"pipeline.run"``.
        **context: Key/values attached to both events.

    Yields:
        Mutable dict of extra fields for the completion event.
    """
    extra: dict[str, Any] = {}
    start_time = time.perf_counter()
    logger.info(f"{event}_started", **context)
    yield extra
    duration_ms = (time.perf_counter() - start_time) * 1000
    logger.info(f"{event}_completed", duration_ms=duration_ms, **context, **extra)
