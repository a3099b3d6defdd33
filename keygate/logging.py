"""structlog setup.

Called once from the application factory. Modules only ever do
``structlog.get_logger()``.
"""

from __future__ import annotations

import logging

import structlog

from keygate.config import LoggingConfig


def configure_logging(config: LoggingConfig) -> None:
    """Configure structlog processors and the stdlib root level."""
    level = logging.getLevelName(config.level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(format="%(message)s", level=level)

    renderer: structlog.types.Processor
    if config.json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )
