"""
Message Classification

Maps a decoded payload onto a closed set of message kinds.

An explicit ``type`` field always wins. Next comes the type segment of a
custom envelope, if it names a known kind. Remaining payloads are matched
against INFERENCE_RULES in order; the first rule that matches decides.
"""

from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any


class MessageKind(str, Enum):
    """Semantic kind of an inbound data-stream message."""

    TRANSCRIPT = "transcript"
    AGENT_THINKING = "agent_thinking"
    AGENT_RESPONSE = "agent_response"
    USER_SPEECH = "user_speech"
    CONVERSATION_STATE = "conversation_state"
    UNKNOWN = "unknown"

    @classmethod
    def from_type(cls, value: Any) -> "MessageKind":
        """Look up an explicit type tag; unrecognized tags are UNKNOWN."""
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


# Display labels
SPEAKER_USER = "You"
SPEAKER_AGENT = "AI Companion"
SPEAKER_SYSTEM = "System"

SPEAKER_LABELS = {
    "user": SPEAKER_USER,
    "assistant": SPEAKER_AGENT,
    "agent": SPEAKER_AGENT,
    "system": SPEAKER_SYSTEM,
}


def normalize_speaker(speaker: str) -> str:
    """Map a role name to its display label; unknown labels pass through."""
    return SPEAKER_LABELS.get(speaker.lower(), speaker)


def first_present(data: Mapping[str, Any], *keys: str) -> Any:
    """Return the first truthy value among keys, or None."""
    for key in keys:
        value = data.get(key)
        if value:
            return value
    return None


def _has_text(data: Mapping[str, Any]) -> bool:
    return bool(data.get("transcript") or data.get("text"))


def _role_is(data: Mapping[str, Any], role: str) -> bool:
    return data.get("role") == role or data.get("speaker") == role


InferenceRule = tuple[Callable[[Mapping[str, Any]], bool], MessageKind]

INFERENCE_RULES: list[InferenceRule] = [
    (lambda d: _has_text(d) and _role_is(d, "user"), MessageKind.USER_SPEECH),
    (lambda d: _has_text(d) and _role_is(d, "assistant"), MessageKind.AGENT_RESPONSE),
    (_has_text, MessageKind.TRANSCRIPT),
    (lambda d: bool(d.get("thinking")) or d.get("state") == "thinking", MessageKind.AGENT_THINKING),
    (lambda d: bool(d.get("response")), MessageKind.AGENT_RESPONSE),
    (lambda d: bool(d.get("conversation_state")), MessageKind.CONVERSATION_STATE),
]


def infer_message_kind(data: Mapping[str, Any]) -> MessageKind:
    """Infer a kind from payload shape alone."""
    for matches, kind in INFERENCE_RULES:
        if matches(data):
            return kind
    return MessageKind.UNKNOWN


def classify_message(data: Any, wire_message_type: str | None = None) -> MessageKind:
    """
    Classify a decoded payload.

    Precedence: payload ``type``, then the custom envelope's type segment
    (when it names a known kind), then shape inference.

    Args:
        data: DecodedEnvelope.data
        wire_message_type: DecodedEnvelope.wire_message_type, if any

    Returns:
        MessageKind; UNKNOWN for non-mapping payloads and unrecognized types
    """
    if not isinstance(data, Mapping):
        return MessageKind.UNKNOWN

    message_type = data.get("type")
    if message_type:
        return MessageKind.from_type(message_type)

    if wire_message_type:
        kind = MessageKind.from_type(wire_message_type)
        if kind is not MessageKind.UNKNOWN:
            return kind

    return infer_message_kind(data)
