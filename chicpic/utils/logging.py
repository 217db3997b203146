"""Structured logging setup using structlog with request context support."""

import logging
import sys
from contextvars import ContextVar
from typing import Any, Optional

import structlog
from structlog.types import EventDict, Processor

from chicpic.config.settings import settings


# Context variables for per-request logging
_request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
_route_ctx: ContextVar[Optional[str]] = ContextVar("route", default=None)
_asset_type_ctx: ContextVar[Optional[str]] = ContextVar("asset_type", default=None)


def set_request_context(
    request_id: Optional[str] = None,
    route: Optional[str] = None,
    asset_type: Optional[str] = None,
) -> None:
    """
    Set the current request context for structured logging.

    Args:
        request_id: Identifier of the HTTP request being served
        route: Path of the route handling the request
        asset_type: Asset kind being generated (garment, model, look)
    """
    if request_id is not None:
        _request_id_ctx.set(request_id)
    if route is not None:
        _route_ctx.set(route)
    if asset_type is not None:
        _asset_type_ctx.set(asset_type)


def clear_request_context() -> None:
    """Clear the current request context."""
    _request_id_ctx.set(None)
    _route_ctx.set(None)
    _asset_type_ctx.set(None)


def get_request_context() -> dict[str, Optional[str]]:
    """
    Get the current request context.

    Returns:
        Dict with request_id, route, asset_type
    """
    return {
        "request_id": _request_id_ctx.get(),
        "route": _route_ctx.get(),
        "asset_type": _asset_type_ctx.get(),
    }


def add_request_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add request context to log entries if available."""
    for key, value in get_request_context().items():
        if value and key not in event_dict:
            event_dict[key] = value
    return event_dict


def setup_logging() -> None:
    """Configure structured logging."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
    )

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_request_context,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if settings.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
