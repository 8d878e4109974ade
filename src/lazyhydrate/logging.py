"""Structured logging for lazyhydrate.

structlog-based logging with:
- Pretty console output by default
- JSON output when LAZYHYDRATE_LOG_FORMAT=json
- Component context (component_id, component_name) bound per activation

Usage:
    from lazyhydrate.logging import configure_logging, get_logger

    configure_logging()

    log = get_logger(__name__).bind(component_id="3")
    log.debug("requirements_met", strategy="visible && idle")
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog
from structlog.types import Processor

__all__ = [
    "get_logger",
    "configure_logging",
    "bind_context",
    "clear_context",
]

LOG_FORMAT_ENV_VAR = "LAZYHYDRATE_LOG_FORMAT"
LOG_LEVEL_ENV_VAR = "LAZYHYDRATE_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"


def _level_from_env() -> int:
    level_name = os.environ.get(LOG_LEVEL_ENV_VAR, DEFAULT_LOG_LEVEL).upper()
    return getattr(logging, level_name, logging.WARNING)


def _json_requested() -> bool:
    return os.environ.get(LOG_FORMAT_ENV_VAR, "").lower() == "json"


def _shared_processors() -> list[Processor]:
    """Processors applied to both structlog and foreign stdlib records."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(use_json: bool) -> Processor:
    if use_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(
    *,
    force_json: bool = False,
    level: int | None = None,
) -> None:
    """Configure structlog and the stdlib root logger.

    Safe to call more than once; each call replaces the previous handler.

    Args:
        force_json: Render JSON regardless of LAZYHYDRATE_LOG_FORMAT.
        level: Log level override. Defaults to LAZYHYDRATE_LOG_LEVEL or WARNING.
    """
    use_json = force_json or _json_requested()
    log_level = level if level is not None else _level_from_env()

    structlog.configure(
        processors=[
            *_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(use_json),
            ],
            foreign_pre_chain=_shared_processors(),
        )
    )

    root_logger = logging.getLogger()
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger.

    Args:
        name: Logger name, usually ``__name__``.

    Returns:
        A bound structlog logger.
    """
    log: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return log


def bind_context(**context: Any) -> None:
    """Bind context variables included in every subsequent log line.

    Uses structlog contextvars, so the binding follows the current asyncio
    task and does not leak into sibling activations.

    Args:
        **context: Key-value pairs to bind.
    """
    structlog.contextvars.bind_contextvars(**context)


def clear_context() -> None:
    """Clear all context variables bound with bind_context()."""
    structlog.contextvars.clear_contextvars()
