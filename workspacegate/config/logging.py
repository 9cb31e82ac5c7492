"""Structured logging configuration using structlog."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from workspacegate.models.domain import RequestContext

_NOISY_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "asyncio")


def setup_logging(log_level: str = "INFO", json_output: bool = False) -> None:
    """Configure structlog and route stdlib records through it."""
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if json_output or not sys.stderr.isatty():
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def bind_workspace_context(context: RequestContext) -> None:
    """Attach the resolved workspace to every log line for the rest of the request."""
    structlog.contextvars.bind_contextvars(
        principal_id=context.principal_id,
        workspace_id=context.resolved_tenant_id,
        superuser=context.is_superuser,
    )
