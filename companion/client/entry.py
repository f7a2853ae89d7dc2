"""
Transcript Entry Data Classes

TranscriptEntry is one line of the conversation record; InterimSlot holds
a speaker's pending (not yet final) utterance.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class EntryKind(str, Enum):
    """Display kind of a transcript entry."""

    FINAL = "final"
    INTERIM = "interim"
    THINKING = "thinking"
    AGENT = "agent"
    USER = "user"
    SYSTEM = "system"


@dataclass
class TranscriptEntry:
    """
    One line in the conversation transcript.

    Attributes:
        speaker: Display label ("You", "AI Companion", "System" or a raw label)
        text: Entry text, never blank
        kind: EntryKind of the entry
        id: Message id from the sender, or a generated one
        timestamp: When the entry was captured locally
    """

    speaker: str
    text: str
    kind: EntryKind = EntryKind.FINAL
    id: Any = None
    timestamp: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        self.kind = EntryKind(self.kind)
        if not self.id:
            self.id = uuid.uuid4().hex

    @property
    def is_interim(self) -> bool:
        return self.kind is EntryKind.INTERIM

    def to_dict(self) -> dict[str, Any]:
        """Plain dict for JSON output."""
        return {
            "id": self.id,
            "speaker": self.speaker,
            "text": self.text,
            "kind": self.kind.value,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        text = f"{self.text[:50]}..." if len(self.text) > 50 else self.text
        return f"[{self.kind.value}] {self.speaker}: {text}"


@dataclass
class InterimSlot:
    """Latest interim utterance for one speaker."""

    speaker: str
    text: str
    id: Any = None
