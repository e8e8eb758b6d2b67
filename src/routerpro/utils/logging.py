"""
Structured logging configuration for Router Pro.

Uses structlog for JSON-formatted, context-rich logging. Request-scoped
fields (request id, optimization mode, CLI command) are bound with
``bind_routing_context`` and merged into every event logged while routing.
"""

from __future__ import annotations

import logging
import sys
from enum import Enum
from typing import Any

import structlog
from structlog.types import Processor

from routerpro.core.config import get_settings


def _stderr_logger(*args: Any) -> structlog.PrintLogger:
    # Resolve stderr per logger so a redirected stream (CLI runners, test
    # capture) is honoured after configuration.
    return structlog.PrintLogger(sys.stderr)


def _enum_values(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Render modes, categories and health as their plain values."""
    for key, value in event_dict.items():
        if isinstance(value, Enum):
            event_dict[key] = value.value
    return event_dict


def setup_logging(
    level: str | None = None,
    json_format: bool | None = None,
) -> None:
    """
    Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL); defaults
            to ROUTERPRO_LOG_LEVEL
        json_format: Use JSON output; defaults to ROUTERPRO_LOG_FORMAT
    """
    settings = get_settings()
    level = (level or settings.router.log_level).upper()
    json_format = json_format if json_format is not None else (
        settings.router.log_format == "json"
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level),
    )

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        _enum_values,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level)),
        context_class=dict,
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )


def bind_routing_context(**fields: Any) -> None:
    """
    Replace the request-scoped logging context.

    Example:
        bind_routing_context(request_id="abc123", mode=OptimizationMode.COST_FIRST)
    """
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**fields)
