"""Tests for the message codec."""

from __future__ import annotations

import json

import pytest

from termbridge.domain.models import MessageKind, TerminalMessage
from termbridge.protocol.codec import DecodeError, UnknownKindError, decode, encode, encode_message


class TestEncode:
    def test_encode_input_is_flat_two_field_object(self) -> None:
        wire = encode(MessageKind.INPUT, "ls -la")
        assert json.loads(wire) == {"type": "input", "content": "ls -la"}

    def test_encode_accepts_plain_string_kind(self) -> None:
        assert json.loads(encode("warning", "careful")) == {"type": "warning", "content": "careful"}

    def test_encode_keeps_newlines_and_empty_content(self) -> None:
        assert json.loads(encode("output", "a\r\nb\n"))["content"] == "a\r\nb\n"
        assert json.loads(encode("clear", ""))["content"] == ""

    def test_encode_rejects_unknown_kind(self) -> None:
        with pytest.raises(ValueError, match="Cannot encode"):
            encode("banana", "x")

    def test_encode_message(self) -> None:
        msg = TerminalMessage(kind=MessageKind.SUCCESS, content="done")
        assert json.loads(encode_message(msg)) == {"type": "success", "content": "done"}


class TestDecode:
    def test_round_trip_every_kind(self) -> None:
        for kind in MessageKind:
            msg = decode(encode(kind, f"text for {kind.value}\n"))
            assert msg.kind is kind
            assert msg.content == f"text for {kind.value}\n"

    def test_decode_bytes(self) -> None:
        msg = decode(b'{"type": "error", "content": "permission denied"}')
        assert msg.kind is MessageKind.ERROR
        assert msg.content == "permission denied"

    def test_decode_ignores_extra_fields(self) -> None:
        msg = decode('{"type": "output", "content": "x", "seq": 3}')
        assert msg.content == "x"

    @pytest.mark.parametrize(
        "wire",
        [
            "not json at all",
            "",
            "[1, 2]",
            '"just a string"',
            '{"content": "missing type"}',
            '{"type": "output"}',
            '{"kind": "error", "content": "x"}',
            '{"type": "output", "content": 5}',
            '{"type": null, "content": "x"}',
        ],
    )
    def test_malformed_frames_raise_decode_error(self, wire: str) -> None:
        with pytest.raises(DecodeError) as excinfo:
            decode(wire)
        assert excinfo.value.raw == wire

    def test_invalid_utf8_raises_decode_error(self) -> None:
        with pytest.raises(DecodeError):
            decode(b'{"type": "output", "content": "\xff\xfe"}')

    def test_decode_error_names_the_field(self) -> None:
        with pytest.raises(DecodeError, match="type"):
            decode('{"content": "x"}')

    def test_field_names_are_not_accepted_in_place_of_wire_names(self) -> None:
        with pytest.raises(DecodeError) as excinfo:
            decode('{"kind": "error", "content": "x"}')
        assert not isinstance(excinfo.value, UnknownKindError)
        assert "type" in str(excinfo.value)

    def test_unknown_type_keeps_tag_and_content(self) -> None:
        wire = '{"type": "banana", "content": "still shown"}'
        with pytest.raises(UnknownKindError) as excinfo:
            decode(wire)
        assert isinstance(excinfo.value, DecodeError)
        assert excinfo.value.kind == "banana"
        assert excinfo.value.content == "still shown"
        assert excinfo.value.raw == wire

    def test_tags_are_case_sensitive(self) -> None:
        with pytest.raises(UnknownKindError):
            decode('{"type": "ERROR", "content": "x"}')
