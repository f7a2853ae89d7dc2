"""
Unit tests for companion.client.messages module.
"""

import pytest

from companion.client.messages import (
    MessageKind,
    classify_message,
    first_present,
    infer_message_kind,
    normalize_speaker,
)


class TestClassifyExplicitType:
    """An explicit type always selects the kind."""

    @pytest.mark.parametrize("kind", [k for k in MessageKind if k is not MessageKind.UNKNOWN])
    def test_known_types(self, kind):
        assert classify_message({"type": kind.value}) is kind

    def test_unrecognized_type_is_unknown(self):
        """Decoder fallbacks and outbound types are not transcript kinds."""
        assert classify_message({"type": "raw_text", "text": "hi"}) is MessageKind.UNKNOWN
        assert classify_message({"type": "user_message", "text": "hi"}) is MessageKind.UNKNOWN

    def test_type_wins_over_shape(self):
        """Shape inference is skipped when type is present."""
        data = {"type": "conversation_state", "text": "hi", "role": "user"}
        assert classify_message(data) is MessageKind.CONVERSATION_STATE

    def test_empty_type_falls_back_to_inference(self):
        assert classify_message({"type": "", "response": "ok"}) is MessageKind.AGENT_RESPONSE


class TestClassifyEnvelopeType:
    """The custom envelope's type segment is used when the payload has no type."""

    def test_envelope_type_used_when_payload_untyped(self):
        data = {"text": "hi", "speaker": "user"}
        assert classify_message(data) is MessageKind.USER_SPEECH
        assert classify_message(data, "transcript") is MessageKind.TRANSCRIPT

    def test_payload_type_wins(self):
        data = {"type": "agent_thinking", "text": "hi"}
        assert classify_message(data, "transcript") is MessageKind.AGENT_THINKING

    def test_unrecognized_envelope_type_falls_back_to_inference(self):
        assert classify_message({"response": "ok"}, "metrics") is MessageKind.AGENT_RESPONSE
        assert classify_message({"foo": "bar"}, "metrics") is MessageKind.UNKNOWN

    def test_non_mapping_ignores_envelope_type(self):
        assert classify_message([1, 2], "transcript") is MessageKind.UNKNOWN


class TestInferMessageKind:
    """Tests for shape-based inference."""

    def test_user_role_with_text(self):
        assert infer_message_kind({"text": "hi", "role": "user"}) is MessageKind.USER_SPEECH
        assert infer_message_kind({"transcript": "hi", "speaker": "user"}) is MessageKind.USER_SPEECH

    def test_assistant_role_with_text(self):
        assert infer_message_kind({"text": "hi", "role": "assistant"}) is MessageKind.AGENT_RESPONSE

    def test_text_without_role(self):
        assert infer_message_kind({"text": "hi"}) is MessageKind.TRANSCRIPT
        assert infer_message_kind({"transcript": "hi", "speaker": "agent"}) is MessageKind.TRANSCRIPT

    def test_thinking(self):
        assert infer_message_kind({"thinking": "hmm"}) is MessageKind.AGENT_THINKING
        assert infer_message_kind({"state": "thinking"}) is MessageKind.AGENT_THINKING

    def test_response(self):
        assert infer_message_kind({"response": "hello"}) is MessageKind.AGENT_RESPONSE

    def test_conversation_state(self):
        assert infer_message_kind({"conversation_state": "idle"}) is MessageKind.CONVERSATION_STATE

    def test_text_beats_thinking(self):
        """Rules apply in order."""
        assert infer_message_kind({"text": "hi", "thinking": "hmm"}) is MessageKind.TRANSCRIPT

    def test_empty_text_does_not_count(self):
        assert infer_message_kind({"text": "", "response": "ok"}) is MessageKind.AGENT_RESPONSE

    def test_nothing_matches(self):
        assert infer_message_kind({"foo": "bar"}) is MessageKind.UNKNOWN
        assert infer_message_kind({"content": "only content"}) is MessageKind.UNKNOWN

    def test_non_mapping_is_unknown(self):
        assert classify_message([1, 2]) is MessageKind.UNKNOWN
        assert classify_message("text") is MessageKind.UNKNOWN
        assert classify_message(None) is MessageKind.UNKNOWN


class TestNormalizeSpeaker:
    """Tests for normalize_speaker function."""

    def test_known_roles(self):
        assert normalize_speaker("user") == "You"
        assert normalize_speaker("assistant") == "AI Companion"
        assert normalize_speaker("agent") == "AI Companion"
        assert normalize_speaker("system") == "System"

    def test_case_insensitive(self):
        assert normalize_speaker("USER") == "You"
        assert normalize_speaker("Assistant") == "AI Companion"

    def test_unknown_label_passes_through(self):
        assert normalize_speaker("Narrator") == "Narrator"


class TestFirstPresent:
    """Tests for first_present function."""

    def test_priority_order(self):
        data = {"text": "b", "transcript": "a"}
        assert first_present(data, "transcript", "text") == "a"

    def test_skips_falsy(self):
        data = {"transcript": "", "text": None, "content": "c"}
        assert first_present(data, "transcript", "text", "content") == "c"

    def test_none_when_missing(self):
        assert first_present({}, "text") is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
