"""
Companion Client Module

Decodes the agent data stream and reconciles it into a transcript.

Usage:
    from companion.client import TranscriptManager

    manager = TranscriptManager(sink=ui, transport=rtc_client)

    # On each data-stream frame:
    manager.handle_stream_message(uid, payload)
"""

from .agent import AgentServiceClient, AgentServiceError, AgentSession, ChannelInfo
from .entry import EntryKind, InterimSlot, TranscriptEntry
from .frames import (
    DecodedEnvelope,
    RawFrame,
    decode_frame,
    decode_payload,
    encode_protocol_message,
)
from .messages import MessageKind, classify_message, normalize_speaker
from .session import CompanionSession, SessionState
from .transcript import TranscriptManager
from .transport import ChannelTransport, DataStreamTransport, LoggingRenderSink, RenderSink

__all__ = [
    "AgentServiceClient",
    "AgentServiceError",
    "AgentSession",
    "ChannelInfo",
    "ChannelTransport",
    "CompanionSession",
    "DataStreamTransport",
    "DecodedEnvelope",
    "EntryKind",
    "InterimSlot",
    "LoggingRenderSink",
    "MessageKind",
    "RawFrame",
    "RenderSink",
    "SessionState",
    "TranscriptEntry",
    "TranscriptManager",
    "classify_message",
    "decode_frame",
    "decode_payload",
    "encode_protocol_message",
    "normalize_speaker",
]
