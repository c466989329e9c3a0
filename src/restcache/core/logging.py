"""
restcache logging - structured logging for the cache read and write paths.

This module configures structlog once for the host application and hands out
bound loggers to the selectors and the snapshot reducer.

Manifesto:
    Memoization bugs are invisible without observability: a selector that
    recomputes on every snapshot looks correct, it is just slow and breaks
    referential stability downstream. Structured events make cache misses
    and state transitions greppable.

    - **Structures:** JSON output for log aggregation
    - **Correlates:** request name / cache_id propagation via context vars
    - **Flexes:** Console output for development, JSON for production

Architecture:
    ::

        configure_logging(level="INFO", json_format=None, service="restcache")
            ↓
        structlog processor chain:
          1. merge_contextvars
          2. add_log_level / add_logger_name
          3. add_service_metadata
          4. TimeStamper (iso)
          5. JSONRenderer (or ConsoleRenderer for a tty)

        logger = get_logger(__name__)
        logger.debug("selector_recomputed", selector="select_request", name="posts")

Examples:
    >>> from restcache.core.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG", json_format=True)
    >>> logger = get_logger(__name__)
    >>> logger.debug("selector_recomputed", cache_id="/wp/v2/posts", page=1)

Tags:
    logging, structlog, observability, restcache

Doc-Types:
    - API Reference
    - Observability Guide
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

# Store service name for metadata
_SERVICE_NAME = "restcache"


def _add_service_metadata(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add service-level metadata to all logs."""
    event_dict.setdefault("service.name", _SERVICE_NAME)
    return event_dict


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "restcache",
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
        json_format = not sys.stdout.isatty()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _add_service_metadata,
    ]

    if add_timestamp:
        shared_processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper()),
    )


def configure_from_settings() -> None:
    """Configure logging from :class:`~restcache.core.settings.RestCacheSettings`."""
    from restcache.core.settings import get_settings

    settings = get_settings()
    configure_logging(level=settings.log_level, json_format=settings.json_logs)


_UNCONFIGURED_PROCESSORS: list[Processor] = [
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.KeyValueRenderer(key_order=["event"]),
]


class _DeferredLogger:
    """Logger handle that picks its backend when an event is emitted.

    Once structlog is configured (by :func:`configure_logging` or by the
    host), events go through that configuration. Until then they are
    routed to the standard-library logger of the same name, so the host's
    ``logging`` levels apply (``WARNING`` by default) and nothing reaches
    stdout unless the host asks for it.
    """

    __slots__ = ("_name",)

    def __init__(self, name: str | None):
        self._name = name

    def _target(self) -> Any:
        if structlog.is_configured():
            return structlog.get_logger(self._name)
        return structlog.wrap_logger(
            logging.getLogger(self._name or _SERVICE_NAME),
            processors=_UNCONFIGURED_PROCESSORS,
            wrapper_class=structlog.stdlib.BoundLogger,
        )

    def __getattr__(self, method: str) -> Any:
        return getattr(self._target(), method)


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger.

    Library modules call this at import time, before the host had a chance
    to configure logging; the returned handle resolves the configuration
    on every event.

    Args:
        name: Logger name (usually __name__)

    Returns:
        structlog-compatible logger
    """
    return _DeferredLogger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context to include in all subsequent logs.

    Example:
        bind_context(request_name="latest-posts")
        logger.debug("selector_recomputed")  # Includes request_name
    """
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
        with LogContext(request_name="latest-posts"):
            select_request("latest-posts")(state)
        # Context cleared here
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs

    def __enter__(self) -> "LogContext":
        bind_context(**self._context)
        return self

    def __exit__(self, *args) -> None:
        unbind_context(*self._context.keys())


__all__ = [
    "configure_logging",
    "configure_from_settings",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "LogContext",
]
