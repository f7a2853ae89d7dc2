"""
AI Companion Client

Joins a companion conversation and keeps its transcript:
- client: frame decoding, transcript reconciliation, agent service, session
- config: environment-driven settings
- utils: logging

Usage:
    from companion import CompanionSession, setup_logging

    logger = setup_logging(__name__)
    session = CompanionSession(transport=rtc_client, sink=ui)
"""

from .client import (
    AgentServiceClient,
    CompanionSession,
    TranscriptEntry,
    TranscriptManager,
    decode_payload,
)
from .utils import get_logger, setup_logging

__all__ = [
    "AgentServiceClient",
    "CompanionSession",
    "TranscriptEntry",
    "TranscriptManager",
    "decode_payload",
    "get_logger",
    "setup_logging",
]

__version__ = "1.0.0"
