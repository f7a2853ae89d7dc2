"""
Transcript Manager

Turns the agent data stream into an ordered, display-ready transcript.

Protocol:
  Agent sends: {"type": "transcript", "text": "hel", "speaker": "user", "is_final": false}
  Agent sends: {"type": "transcript", "text": "hello", "speaker": "user"}
  Agent sends: {"response": "Hi there!"}                  # untyped, inferred
  Agent sends: b"7|1|transcript|<base64 JSON>"             # custom envelope

Client logic:
  - Interim update: replace the speaker's interim slot, append an interim entry
  - Final update: clear the speaker's interim slot, append a final entry
  - Entries are never edited; the UI supersedes interim lines itself

History is bounded: past max_history entries, the oldest are dropped
down to keep_history.
"""

import json
import logging
import time
from collections.abc import Callable, Mapping
from typing import Any

from companion.config.settings import TRANSCRIPT_HISTORY_KEEP, TRANSCRIPT_HISTORY_MAX

from .entry import EntryKind, InterimSlot, TranscriptEntry
from .frames import DecodedEnvelope, decode_payload
from .messages import (
    SPEAKER_AGENT,
    SPEAKER_SYSTEM,
    SPEAKER_USER,
    MessageKind,
    classify_message,
    first_present,
    normalize_speaker,
)
from .transport import DataStreamTransport, RenderSink

logger = logging.getLogger(__name__)

THINKING_FALLBACK = "AI is thinking..."


def build_user_message(text: str) -> dict[str, Any]:
    """Outbound chat message sent to the agent over the data stream."""
    return {
        "type": "user_message",
        "text": text,
        "timestamp": int(time.time() * 1000),
        "sender": "user",
    }


class TranscriptManager:
    """
    Decodes, classifies and records agent data-stream messages.

    Simple API:
        manager = TranscriptManager(sink=ui, transport=rtc_client)
        manager.handle_stream_message(uid, payload)   # inbound frame
        await manager.send_message("hello")          # outbound chat

        manager.get_history()         # list of TranscriptEntry
        manager.get_interim("You")    # pending interim utterance or None

    The sink sees every appended entry as render(speaker, text, kind). Sink
    errors are logged and never reach the caller.
    """

    def __init__(
        self,
        sink: RenderSink | None = None,
        transport: DataStreamTransport | None = None,
        max_history: int = TRANSCRIPT_HISTORY_MAX,
        keep_history: int = TRANSCRIPT_HISTORY_KEEP,
    ):
        """
        Initialize transcript manager.

        Args:
            sink: UI sink receiving each appended entry
            transport: Data stream used by send_message()
            max_history: Entry count that triggers eviction
            keep_history: Newest entries retained after eviction
        """
        if not 0 <= keep_history <= max_history:
            raise ValueError(
                f"keep_history must be between 0 and max_history ({keep_history} > {max_history})"
            )

        self.sink = sink
        self.transport = transport
        self._max_history = max_history
        self._keep_history = keep_history

        self._history: list[TranscriptEntry] = []
        # Normalized speaker label -> pending interim utterance
        self._interim: dict[str, InterimSlot] = {}

        self._handlers: dict[MessageKind, Callable[[Mapping[str, Any]], TranscriptEntry | None]] = {
            MessageKind.TRANSCRIPT: self._handle_transcript,
            MessageKind.AGENT_THINKING: self._handle_agent_thinking,
            MessageKind.AGENT_RESPONSE: self._handle_agent_response,
            MessageKind.USER_SPEECH: self._handle_user_speech,
            MessageKind.CONVERSATION_STATE: self._handle_conversation_state,
        }

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------

    def handle_stream_message(self, source_id: Any, payload: Any) -> TranscriptEntry | None:
        """
        Decode and ingest one data-stream frame.

        Args:
            source_id: Participant uid that sent the frame
            payload: Text, bytes, or already-structured message

        Returns:
            The appended entry, or None if the frame produced no entry
        """
        return self.process_message(decode_payload(payload), source_id)

    def process_message(
        self, message: DecodedEnvelope | Mapping[str, Any], source_id: Any = None
    ) -> TranscriptEntry | None:
        """
        Classify one decoded message and append at most one entry.

        Failures inside classification or handling become a System entry.
        """
        envelope = message if isinstance(message, DecodedEnvelope) else DecodedEnvelope(data=message)

        try:
            kind = classify_message(envelope.data, envelope.wire_message_type)
            logger.debug(f"Processing message from {source_id}: {kind.value} {envelope!r}")

            handler = self._handlers.get(kind)
            if handler is None:
                logger.info(
                    f"Unknown message type from {source_id}: "
                    f"{envelope.message_type or 'untyped'} {envelope.data!r:.200}"
                )
                return None
            return handler(envelope.data)

        except Exception as e:
            logger.error(f"Error processing message from {source_id}: {e}")
            return self.add_entry(SPEAKER_SYSTEM, f"Error parsing message: {e}", EntryKind.SYSTEM)

    def _handle_transcript(self, data: Mapping[str, Any]) -> TranscriptEntry | None:
        """Speech-to-text update, interim or final."""
        text = first_present(data, "transcript", "text", "content")
        speaker = normalize_speaker(data.get("speaker") or data.get("role") or "Unknown")
        is_final = data.get("is_final") is not False
        message_id = data.get("id") or data.get("message_id")

        if not text or not text.strip():
            return None
        text = text.strip()

        if is_final:
            if self._interim.pop(speaker, None) is not None:
                logger.debug(f"[FINAL] {speaker}: interim cleared")
            return self.add_entry(speaker, text, EntryKind.FINAL, message_id)

        entry = self.add_entry(speaker, text, EntryKind.INTERIM, message_id)
        self._interim[speaker] = InterimSlot(speaker=speaker, text=text, id=entry.id)
        return entry

    def _handle_agent_thinking(self, data: Mapping[str, Any]) -> TranscriptEntry | None:
        thinking = data.get("thinking")
        text = thinking if isinstance(thinking, str) and thinking else THINKING_FALLBACK
        return self.add_entry(SPEAKER_SYSTEM, text, EntryKind.THINKING)

    def _handle_agent_response(self, data: Mapping[str, Any]) -> TranscriptEntry | None:
        text = first_present(data, "response", "text", "content")
        if text and text.strip():
            return self.add_entry(SPEAKER_AGENT, text.strip(), EntryKind.AGENT)
        return None

    def _handle_user_speech(self, data: Mapping[str, Any]) -> TranscriptEntry | None:
        text = first_present(data, "text", "content", "transcript")
        if text and text.strip():
            return self.add_entry(SPEAKER_USER, text.strip(), EntryKind.USER)
        return None

    def _handle_conversation_state(self, data: Mapping[str, Any]) -> TranscriptEntry | None:
        state = first_present(data, "conversation_state", "state")
        if state is None or not str(state).strip():
            return None
        return self.add_entry(SPEAKER_SYSTEM, f"Conversation state: {state}", EntryKind.SYSTEM)

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    async def send_message(self, text: str) -> bool:
        """
        Send a user chat message to the agent over the data stream.

        Sends UTF-8 JSON bytes first and retries once with a JSON string.
        On success the message is added to the transcript immediately.

        Returns:
            True if either attempt succeeded
        """
        if self.transport is None:
            logger.error("No data stream transport available")
            return False

        message = json.dumps(build_user_message(text))

        try:
            await self.transport.send_stream_message(message.encode("utf-8"))
        except Exception as e:
            logger.warning(f"Failed to send message as bytes, retrying as text: {e}")
            try:
                await self.transport.send_stream_message(message)
            except Exception as fallback_error:
                logger.error(f"Fallback send also failed: {fallback_error}")
                self.add_entry(SPEAKER_SYSTEM, f"Failed to send message: {e}", EntryKind.SYSTEM)
                return False

        self.add_entry(SPEAKER_USER, text, EntryKind.USER)
        logger.info(f"Message sent to agent: {text[:50]}")
        return True

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def add_entry(
        self,
        speaker: str,
        text: str,
        kind: EntryKind | str = EntryKind.FINAL,
        entry_id: Any = None,
    ) -> TranscriptEntry | None:
        """
        Append an entry to the history and render it.

        Returns:
            The new entry, or None when text is blank
        """
        if not text or not text.strip():
            logger.debug(f"Dropping blank {kind} entry from {speaker}")
            return None

        entry = TranscriptEntry(speaker=speaker, text=text, kind=kind, id=entry_id)
        self._history.append(entry)

        if len(self._history) > self._max_history:
            evicted = len(self._history) - self._keep_history
            del self._history[:evicted]
            logger.debug(f"Evicted {evicted} transcript entries")

        self._render(entry)
        return entry

    def _render(self, entry: TranscriptEntry) -> None:
        if self.sink is None:
            return
        try:
            self.sink.render(entry.speaker, entry.text, entry.kind.value)
        except Exception as e:
            logger.warning(f"Render sink failed for {entry.kind.value} entry: {e}")

    def get_history(self) -> list[TranscriptEntry]:
        """All retained entries, oldest first."""
        return list(self._history)

    @property
    def history(self) -> list[TranscriptEntry]:
        """Copy of the retained entries; mutating it leaves the manager intact."""
        return list(self._history)

    def get_transcript_history(self) -> list[dict[str, Any]]:
        """Retained entries as plain dicts, oldest first."""
        return [entry.to_dict() for entry in self._history]

    def get_last_entry(self) -> TranscriptEntry | None:
        return self._history[-1] if self._history else None

    def get_interim(self, speaker: str) -> InterimSlot | None:
        """Pending interim utterance for a display label (e.g. "You")."""
        return self._interim.get(speaker)

    @property
    def interim_slots(self) -> dict[str, InterimSlot]:
        return dict(self._interim)

    def clear(self) -> None:
        """Drop all entries and pending interim utterances."""
        self._history.clear()
        self._interim.clear()

    @property
    def is_empty(self) -> bool:
        return not self._history

    def __repr__(self) -> str:
        return f"TranscriptManager({len(self._history)} entries, {len(self._interim)} interim)"

    def __len__(self) -> int:
        return len(self._history)
