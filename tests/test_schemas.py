"""Tests for message models and hook result normalization."""
import pytest
from pydantic import ValidationError

from models.schemas import (
    IncomingMediaMessage, IncomingStringMessage, OptionMessage,
    OutgoingStringMessage, parse_incoming_message,
)
from utils.messages import normalize_hook_result, to_outgoing_message


class TestIncomingMessages:
    def test_parse_string_message(self):
        msg = parse_incoming_message({"type": "string", "text": "hi", "timestamp": 1700000000000})
        assert isinstance(msg, IncomingStringMessage)
        assert msg.text == "hi"
        assert msg.timestamp == 1700000000000

    def test_parse_media_message(self):
        msg = parse_incoming_message({
            "type": "media",
            "attachments": [{"url": "https://example.com/a.png"}, {"url": "https://example.com/b.png"}],
        })
        assert isinstance(msg, IncomingMediaMessage)
        assert [a.url for a in msg.attachments] == [
            "https://example.com/a.png", "https://example.com/b.png",
        ]
        assert msg.timestamp is None

    def test_model_passes_through(self):
        msg = IncomingStringMessage(text="hello")
        assert parse_incoming_message(msg) is msg

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            parse_incoming_message({"type": "sticker", "id": "42"})

    def test_string_message_requires_text(self):
        with pytest.raises(ValidationError):
            parse_incoming_message({"type": "string"})


class TestNormalization:
    def test_bare_string_becomes_string_message(self):
        assert normalize_hook_result("hello") == [OutgoingStringMessage(text="hello")]

    def test_none_is_empty(self):
        assert normalize_hook_result(None) == []

    def test_empty_string_is_empty(self):
        assert normalize_hook_result("") == []

    def test_empty_list_is_empty(self):
        assert normalize_hook_result([]) == []

    def test_list_passes_through_in_order(self):
        result = normalize_hook_result([
            "one",
            OutgoingStringMessage(text="two"),
            OptionMessage(values=["a", "b"]),
        ])
        assert [m.type for m in result] == ["string", "string", "option"]
        assert result[0].text == "one"
        assert result[1].text == "two"
        assert result[2].values == ["a", "b"]

    def test_single_element_list(self):
        assert normalize_hook_result(["only"]) == [OutgoingStringMessage(text="only")]

    def test_tuple_treated_as_sequence(self):
        assert len(normalize_hook_result(("a", "b"))) == 2

    def test_structured_message_is_wrapped(self):
        opt = OptionMessage(values=["yes", "no"])
        assert normalize_hook_result(opt) == [opt]

    def test_dict_validated_into_option(self):
        msg = to_outgoing_message({"type": "option", "values": ["red", "blue"]})
        assert isinstance(msg, OptionMessage)
        assert msg.values == ["red", "blue"]

    def test_dict_validated_into_string(self):
        msg = to_outgoing_message({"type": "string", "text": "hey"})
        assert isinstance(msg, OutgoingStringMessage)

    def test_invalid_dict_rejected(self):
        with pytest.raises(ValidationError):
            to_outgoing_message({"type": "video", "url": "x"})
