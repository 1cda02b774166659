"""
Structured logging for Follow Ranker.

structlog renders through the stdlib logging module onto stderr, keeping
stdout free for the report itself. Development runs get the console
renderer; anything else gets one JSON object per line.

Usage:
    from follow_ranker.logging import get_logger, log_context

    logger = get_logger("cache.relations")
    with log_context(category="watching"):
        logger.info("enrichment_started", identities=12)
"""

import asyncio
import logging
import os
import sys
import time
from collections.abc import Callable, Iterator, MutableMapping
from contextlib import contextmanager
from functools import wraps
from typing import Any, Optional, TypeVar

import structlog
from structlog.types import Processor

F = TypeVar("F", bound=Callable[..., Any])

APP_NAME = "follow_ranker"

_configured_level: Optional[int] = None


def _is_development() -> bool:
    # Read the environment directly: settings validation must not run at import time
    debug = os.getenv("DEBUG", "").strip().lower() in ("1", "true", "yes", "on")
    return debug or os.getenv("ENV", "development") == "development"


def _tag_app(logger: Any, method_name: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    event_dict.setdefault("app", APP_NAME)
    return event_dict


def _renderer() -> Processor:
    if _is_development():
        return structlog.dev.ConsoleRenderer(
            colors=sys.stderr.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        )
    return structlog.processors.JSONRenderer()


def get_processors() -> list[Processor]:
    """Processor chain shared by every logger, ending in the renderer."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        _tag_app,
    ]
    if not _is_development():
        processors.append(structlog.processors.format_exc_info)
    processors.append(_renderer())
    return processors


def configure_logging(level: str = "INFO") -> None:
    """
    Configure structlog and the root stdlib logger.

    Safe to call repeatedly; only a change of level reconfigures.
    """
    global _configured_level

    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
    if numeric_level == _configured_level:
        return

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=numeric_level, force=True)
    structlog.configure(
        processors=get_processors(),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured_level = numeric_level


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(name)  # type: ignore[no-any-return]


def log_context(**fields: Any):
    """Bind `fields` to every log event emitted inside the `with` block."""
    return structlog.contextvars.bound_contextvars(**fields)


@contextmanager
def _timed(logger: structlog.stdlib.BoundLogger, operation: str) -> Iterator[None]:
    start = time.perf_counter()
    try:
        yield
    except Exception as e:
        logger.error(
            "operation_failed",
            operation=operation,
            duration_seconds=round(time.perf_counter() - start, 3),
            error=str(e),
            error_type=type(e).__name__,
        )
        raise
    logger.info(
        "operation_complete",
        operation=operation,
        duration_seconds=round(time.perf_counter() - start, 3),
    )


def log_timing(
    operation: str, logger: Optional[structlog.stdlib.BoundLogger] = None
) -> Callable[[F], F]:
    """
    Log how long the decorated call took, and whether it raised.

    Works on coroutine functions as well as plain ones:

        @log_timing("relations_refresh")
        async def _refresh(self, ...):
            ...
    """

    def decorator(func: F) -> F:
        timing_logger = logger or get_logger(func.__module__)

        if asyncio.iscoroutinefunction(func):

            @wraps(func)
            async def async_wrapper(*args, **kwargs):
                with _timed(timing_logger, operation):
                    return await func(*args, **kwargs)

            return async_wrapper  # type: ignore[return-value]

        @wraps(func)
        def wrapper(*args, **kwargs):
            with _timed(timing_logger, operation):
                return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


__all__ = [
    "configure_logging",
    "get_logger",
    "get_processors",
    "log_context",
    "log_timing",
]
