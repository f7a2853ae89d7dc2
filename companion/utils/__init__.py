"""Logging helpers shared across the companion client."""

from .logging import DEFAULT_FORMAT, get_logger, preview, set_log_level, setup_logging

__all__ = [
    "DEFAULT_FORMAT",
    "get_logger",
    "preview",
    "set_log_level",
    "setup_logging",
]
