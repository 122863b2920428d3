"""structlog setup shared by applications embedding ring buffers."""
import logging

import structlog

from .config import LOG_LEVELS

_STDLIB_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def configure_logging(level: str = "info") -> None:
    """Configure structlog to render JSON through the stdlib logging module.

    Args:
        level: One of "debug", "info", "warn", "error"
    """
    level = level.lower()
    if level not in LOG_LEVELS:
        raise ValueError(f"Invalid log level: {level}")

    logging.basicConfig(format="%(message)s")
    logging.getLogger().setLevel(_STDLIB_LEVELS[level])

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
