"""
Companion Configuration Module

Settings are read from the environment once, at import time.
"""

from .settings import (
    AGENT_SERVICE_TIMEOUT,
    AGENT_SERVICE_URL,
    LOG_LEVEL,
    TRANSCRIPT_HISTORY_KEEP,
    TRANSCRIPT_HISTORY_MAX,
)

__all__ = [
    "AGENT_SERVICE_TIMEOUT",
    "AGENT_SERVICE_URL",
    "LOG_LEVEL",
    "TRANSCRIPT_HISTORY_KEEP",
    "TRANSCRIPT_HISTORY_MAX",
]
