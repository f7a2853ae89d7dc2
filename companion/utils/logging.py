"""
Logging utilities for the companion client.

Every module logs through ``logging.getLogger(__name__)``; applications call
``setup_logging()`` once at startup.
"""

import logging
import sys
from typing import Literal

from companion.config.settings import LOG_LEVEL

# Default log format
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Payload previews in log lines and diagnostics
DEFAULT_PREVIEW_LENGTH = 100

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def setup_logging(
    name: str | None = None,
    level: LogLevel | None = None,
    format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """
    Configure logging and return a logger.

    Args:
        name: Logger name (typically __name__). If None, returns root logger.
        level: Log level. Defaults to the LOG_LEVEL setting.
        format: Log format string.

    Returns:
        Configured logger instance.

    Usage:
        from companion.utils import setup_logging
        logger = setup_logging(__name__)
        logger.info("Companion started")
    """
    log_level = getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO)

    # basicConfig is a no-op once the root logger has handlers
    logging.basicConfig(
        level=log_level,
        format=format,
        stream=sys.stdout,
    )

    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger by name. Assumes setup_logging() ran at startup."""
    return logging.getLogger(name)


def set_log_level(level: LogLevel) -> None:
    """Change the root log level at runtime."""
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.getLogger().setLevel(log_level)


def preview(text: str, limit: int = DEFAULT_PREVIEW_LENGTH) -> str:
    """Truncate text for log lines and diagnostic entries."""
    return text[:limit]
