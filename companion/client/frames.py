"""
Frame Decoder

Turns raw data-stream frames into DecodedEnvelope records.

Wire formats:
  JSON text:        '{"type": "transcript", "text": "hello"}'
  Custom envelope:  'msg-1|1|transcript|eyJ0ZXh0IjogImhlbGxvIn0='
                    (id|version|type|base64(utf8(JSON)), bytes frames only)
  Anything else:    {"type": "raw_text", "text": <original text>}

Decoding never raises. Unparseable input degrades to a raw_text,
agora_protocol or parse_error envelope so the transcript can still show
something.
"""

import base64
import binascii
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from companion.utils.logging import preview

logger = logging.getLogger(__name__)

PROTOCOL_DELIMITER = "|"
PROTOCOL_MIN_SEGMENTS = 4

# Envelope types produced by the decoder itself
RAW_TEXT = "raw_text"
AGORA_PROTOCOL = "agora_protocol"
PARSE_ERROR = "parse_error"


@dataclass
class RawFrame:
    """One frame from the data stream, tagged with the sending participant."""

    source_id: Any
    payload: Any


@dataclass
class DecodedEnvelope:
    """
    A decoded inbound message, prior to classification.

    Attributes:
        data: Message payload. For JSON input this is exactly the parsed value.
        message_id: Envelope id (custom envelope frames only)
        version: Envelope protocol version (custom envelope frames only)
        wire_message_type: Envelope type segment (custom envelope frames only)
    """

    data: Any
    message_id: str | None = None
    version: str | None = None
    wire_message_type: str | None = None

    @property
    def message_type(self) -> str | None:
        """The payload's ``type`` tag, or None when absent."""
        if isinstance(self.data, Mapping):
            value = self.data.get("type")
            if value:
                return str(value)
        return None

    @property
    def is_protocol(self) -> bool:
        """True if the frame arrived in the custom pipe-delimited envelope."""
        return self.message_id is not None

    def get(self, key: str, default: Any = None) -> Any:
        """Read a payload field; non-mapping payloads have no fields."""
        if isinstance(self.data, Mapping):
            return self.data.get(key, default)
        return default

    @classmethod
    def raw_text(cls, text: str) -> "DecodedEnvelope":
        """Envelope for text that is not a structured message."""
        return cls(data={"type": RAW_TEXT, "text": text})

    @classmethod
    def parse_error(cls, original: str, error: Exception) -> "DecodedEnvelope":
        """Envelope for input that broke the decoder."""
        return cls(
            data={
                "type": PARSE_ERROR,
                "text": f"Parse error: {preview(original)}...",
                "error": str(error),
            }
        )

    def __repr__(self) -> str:
        if self.is_protocol:
            return (
                f"DecodedEnvelope({self.message_type or 'untyped'}, "
                f"id={self.message_id}, wire={self.wire_message_type})"
            )
        return f"DecodedEnvelope({self.message_type or 'untyped'})"


def _reject_constant(name: str) -> Any:
    # NaN/Infinity are not JSON
    raise ValueError(f"Invalid JSON constant: {name}")


def _loads(text: str) -> Any:
    return json.loads(text, parse_constant=_reject_constant)


def _b64decode(data: str) -> bytes:
    """Decode base64, ignoring whitespace and tolerating missing padding."""
    compact = "".join(data.split())
    padded = compact + "=" * (-len(compact) % 4)
    return base64.b64decode(padded, validate=True)


def _as_text(payload: Any) -> str:
    if isinstance(payload, str):
        return payload
    if isinstance(payload, (bytes, bytearray, memoryview)):
        return bytes(payload).decode("utf-8", errors="replace")
    return repr(payload)


def decode_text(text: str) -> DecodedEnvelope:
    """Parse a text frame as JSON, falling back to raw text."""
    try:
        return DecodedEnvelope(data=_loads(text))
    except ValueError:
        return DecodedEnvelope.raw_text(text)


def decode_protocol_message(text: str) -> DecodedEnvelope:
    """
    Parse the custom envelope ``id|version|type|base64(JSON)``.

    Delimiters after the third one belong to the payload segment. Fewer than
    four segments means the text is not an envelope at all.

    Returns:
        DecodedEnvelope with protocol metadata set; an agora_protocol
        envelope when the payload segment does not decode to a JSON object.
    """
    parts = text.split(PROTOCOL_DELIMITER)
    if len(parts) < PROTOCOL_MIN_SEGMENTS:
        return DecodedEnvelope.raw_text(text)

    message_id, version, wire_type = parts[:3]
    raw_data = PROTOCOL_DELIMITER.join(parts[3:])

    try:
        data = _loads(_b64decode(raw_data).decode("utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    except ValueError as e:
        # binascii.Error, UnicodeDecodeError and JSONDecodeError all land here
        logger.warning(f"Failed to decode protocol payload {message_id}|{version}|{wire_type}: {e}")
        return DecodedEnvelope(
            data={
                "type": AGORA_PROTOCOL,
                "messageId": message_id,
                "version": version,
                "wireMessageType": wire_type,
                "rawData": raw_data,
                "text": f"Protocol message: {wire_type}",
            },
            message_id=message_id,
            version=version,
            wire_message_type=wire_type,
        )

    return DecodedEnvelope(
        data=data,
        message_id=message_id,
        version=version,
        wire_message_type=wire_type,
    )


def decode_payload(payload: Any) -> DecodedEnvelope:
    """
    Decode one frame payload.

    Args:
        payload: Text, bytes-like, or an already-structured value

    Returns:
        DecodedEnvelope (never raises)
    """
    try:
        if isinstance(payload, str):
            return decode_text(payload)

        if isinstance(payload, (bytes, bytearray, memoryview)):
            text = bytes(payload).decode("utf-8", errors="replace")
            if PROTOCOL_DELIMITER in text:
                return decode_protocol_message(text)
            return decode_text(text)

        return DecodedEnvelope(data=payload)

    except Exception as e:
        original = _as_text(payload)
        logger.error(f"Error decoding frame: {e} (payload: {preview(original)!r})")
        return DecodedEnvelope.parse_error(original, e)


def decode_frame(frame: RawFrame) -> DecodedEnvelope:
    """Decode a RawFrame. See decode_payload()."""
    return decode_payload(frame.payload)


def encode_protocol_message(
    message_id: str | int, version: str | int, wire_type: str, payload: Mapping[str, Any]
) -> str:
    """Build a custom envelope frame: ``id|version|type|base64(utf8(JSON))``."""
    body = base64.b64encode(json.dumps(dict(payload)).encode("utf-8")).decode("ascii")
    return PROTOCOL_DELIMITER.join([str(message_id), str(version), wire_type, body])
