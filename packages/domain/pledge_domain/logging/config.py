"""Structured logging configuration for the pledge domain.

The engine itself is pure; logging is the only side effect it is allowed and it
never influences a computed result. Modules obtain loggers through get_logger()
and emit debug-level events for invariant violations, preview rejections and
block execution.
"""

import logging
import sys
from typing import Optional

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    extra_processors: Optional[list] = None,
) -> None:
    """Configure structlog on top of the standard library logging module.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: Render JSON lines instead of the human-readable console format
        include_timestamp: Add an ISO timestamp to every event
        extra_processors: Additional structlog processors, inserted before rendering
    """
    log_level = getattr(logging, level.upper())

    logging.basicConfig(
        level=log_level,
        stream=sys.stdout,
        format="%(message)s",
        force=True,
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if extra_processors:
        processors.extend(extra_processors)

    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Reconfiguring must reach loggers that have already logged
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """Get a structlog logger bound to the given module name."""
    return structlog.get_logger(name)


def get_engine_logger(name: str) -> FilteringBoundLogger:
    """Get a logger tagged as part of the economics engine subsystem.

    The logger stays lazy so module-level loggers pick up whatever
    configure_logging() sets later.
    """
    return structlog.get_logger(name, subsystem="pledge_engine")
