from __future__ import annotations

import datetime
import json
import logging
from typing import Any

import pytest

from hubwire import (
    CompletionMessage,
    DecodingError,
    InvalidMessageError,
    InvalidOperationError,
    InvocationMessage,
    JSONHubProtocol,
    JSONTypeConverter,
    MessageType,
    SerializationError,
    StreamItemMessage,
    TransferFormat,
    UnknownMessageTypeError,
    UnsupportedTypeError,
)


def frames(*documents: Any) -> bytes:
    return b"".join(json.dumps(d).encode("utf-8") + b"\x1e" for d in documents)


def test_protocol_identity() -> None:
    protocol = JSONHubProtocol()
    assert protocol.name == "json"
    assert protocol.transfer_format == TransferFormat.TEXT
    assert isinstance(protocol.type_converter, JSONTypeConverter)


def test_parse_invocation() -> None:
    data = frames({"type": 1, "invocationId": "7", "target": "Send", "arguments": ["a", 1, [2]], "nonBlocking": True})
    assert JSONHubProtocol().parse_messages(data) == [InvocationMessage("7", "Send", ("a", 1, [2]), True)]


def test_parse_invocation_defaults() -> None:
    messages = JSONHubProtocol().parse_messages(
        frames(
            {"type": 1, "invocationId": "1", "target": "Ping"},
            {"type": 1, "invocationId": "2", "target": "Ping", "arguments": "nope", "nonBlocking": "yes"},
        )
    )
    assert messages == [InvocationMessage("1", "Ping"), InvocationMessage("2", "Ping")]
    assert messages[0].arguments == ()
    assert messages[0].non_blocking is False


def test_parse_stream_item_keeps_item() -> None:
    messages = JSONHubProtocol().parse_messages(
        frames({"type": 2, "invocationId": "1", "item": [1, 2]}, {"type": 2, "invocationId": "1"})
    )
    assert messages == [StreamItemMessage("1", [1, 2]), StreamItemMessage("1", None)]
    assert messages[0].message_type == MessageType.STREAM_ITEM


def test_parse_completion_variants() -> None:
    protocol = JSONHubProtocol()
    assert protocol.parse_messages(b'{"type":3,"invocationId":"1","error":"bad"}\x1e') == [
        CompletionMessage.with_error("1", "bad")
    ]
    assert protocol.parse_messages(b'{"type":3,"invocationId":"1","result":42}\x1e') == [
        CompletionMessage.with_result("1", 42)
    ]
    [void] = protocol.parse_messages(b'{"type":3,"invocationId":"1"}\x1e')
    assert void.error is None
    assert void.has_result is False
    assert void.result is None


def test_parse_completion_null_result() -> None:
    [msg] = JSONHubProtocol().parse_messages(b'{"type":3,"invocationId":"1","result":null}\x1e')
    assert msg.has_result is True
    assert msg.result is None


def test_parse_completion_error_wins_over_result() -> None:
    [msg] = JSONHubProtocol().parse_messages(b'{"type":3,"invocationId":"1","error":"bad","result":42}\x1e')
    assert msg.error == "bad"
    assert msg.has_result is False
    assert msg.result is None


def test_parse_completion_ignores_non_string_error() -> None:
    [msg] = JSONHubProtocol().parse_messages(b'{"type":3,"invocationId":"1","error":5,"result":1}\x1e')
    assert msg == CompletionMessage.with_result("1", 1)


def test_parse_completion_rejects_empty_error() -> None:
    with pytest.raises(InvalidMessageError):
        JSONHubProtocol().parse_messages(b'{"type":3,"invocationId":"1","error":""}\x1e')


def test_parse_keeps_frame_order() -> None:
    messages = JSONHubProtocol().parse_messages(
        frames({"type": 3, "invocationId": "1"}, {"type": 2, "invocationId": "2", "item": 1})
    )
    assert [m.invocation_id for m in messages] == ["1", "2"]


def test_parse_without_separator_is_empty() -> None:
    assert JSONHubProtocol().parse_messages(b'{"type":3,"invocationId":"1"}') == []
    assert JSONHubProtocol().parse_messages(b"") == []


def test_parse_ignores_unterminated_tail() -> None:
    data = b'{"type":3,"invocationId":"1"}\x1e{"type":3,"invoca'
    assert JSONHubProtocol().parse_messages(data) == [CompletionMessage.void("1")]


def test_parse_accepts_str() -> None:
    assert JSONHubProtocol().parse_messages('{"type":3,"invocationId":"1"}\x1e') == [CompletionMessage.void("1")]


def test_malformed_frame_fails_whole_call() -> None:
    data = b'{"type":3,"invocationId":"1"}\x1e{"type":3,\x1e'
    with pytest.raises(DecodingError) as excinfo:
        JSONHubProtocol().parse_messages(data)
    assert excinfo.value.frame_index == 1


def test_invalid_utf8_is_decoding_error() -> None:
    with pytest.raises(DecodingError):
        JSONHubProtocol().parse_messages(b'{"type":3,"invocationId":"\xff"}\x1e')


@pytest.mark.parametrize(
    "payload",
    [
        b'{"type":9,"invocationId":"1"}',
        b'{"type":0,"invocationId":"1"}',
        b'{"invocationId":"1"}',
        b'{"type":"1","invocationId":"1"}',
        b'{"type":true,"invocationId":"1"}',
        b'{"type":1.0,"invocationId":"1"}',
        b"[1,2]",
        b"42",
    ],
)
def test_unknown_message_type(payload: bytes) -> None:
    with pytest.raises(UnknownMessageTypeError):
        JSONHubProtocol().parse_messages(payload + b"\x1e")


@pytest.mark.parametrize(
    "payload, field",
    [
        (b'{"type":1,"invocationId":"1"}', "target"),
        (b'{"type":1,"invocationId":"1","target":5}', "target"),
        (b'{"type":1,"target":"Send"}', "invocationId"),
        (b'{"type":1,"invocationId":"","target":"Send"}', "invocationId"),
        (b'{"type":2,"invocationId":5}', "invocationId"),
        (b'{"type":3}', "invocationId"),
    ],
)
def test_invalid_message(payload: bytes, field: str) -> None:
    with pytest.raises(InvalidMessageError) as excinfo:
        JSONHubProtocol().parse_messages(payload + b"\x1e")
    assert excinfo.value.field == field


def test_write_invocation() -> None:
    msg = InvocationMessage("1", "Send", ("a", 1), False)
    assert JSONHubProtocol().write_message(msg) == (
        b'{"type":1,"invocationId":"1","target":"Send","arguments":["a",1],"nonBlocking":false}\x1e'
    )


def test_write_then_parse_round_trip() -> None:
    protocol = JSONHubProtocol()
    msg = InvocationMessage("abc", "Update", ("a", 1, 2.5, None, True, [1, 2], {"k": "v"}), True)
    assert protocol.parse_messages(protocol.write_message(msg)) == [msg]


@pytest.mark.parametrize(
    "msg",
    [StreamItemMessage("1", 5), CompletionMessage.with_result("1", 5), CompletionMessage.void("1")],
)
def test_write_rejects_non_invocation(msg: Any) -> None:
    with pytest.raises(InvalidOperationError):
        JSONHubProtocol().write_message(msg)


def test_write_rejects_opaque_argument() -> None:
    msg = InvocationMessage("1", "Send", ("ok", object()))
    with pytest.raises(UnsupportedTypeError):
        JSONHubProtocol().write_message(msg)


class DateConverter(JSONTypeConverter):
    def convert_to_wire(self, obj: Any) -> Any:
        if isinstance(obj, datetime.date):
            return obj.isoformat()
        return super().convert_to_wire(obj)


def test_write_with_substituted_converter() -> None:
    msg = InvocationMessage("1", "Schedule", (datetime.date(2024, 1, 2),))
    frame = JSONHubProtocol(DateConverter()).write_message(msg)
    assert b'"arguments":["2024-01-02"]' in frame


class PassThrough:
    def convert_to_wire(self, obj: Any) -> Any:
        return obj

    def convert_from_wire(self, obj: Any, target_type: Any) -> Any:
        return obj


def test_write_surfaces_serialization_failure() -> None:
    msg = InvocationMessage("1", "Send", (object(),))
    with pytest.raises(SerializationError):
        JSONHubProtocol(PassThrough()).write_message(msg)


def test_parse_logs_at_debug(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="hubwire.protocol")
    JSONHubProtocol().parse_messages(b'{"type":3,"invocationId":"1"}\x1e')
    assert "parsed 1 message" in caplog.text


def test_write_rejects_too_deep_argument() -> None:
    nested: list = []
    for _ in range(5000):
        nested = [nested]
    with pytest.raises(UnsupportedTypeError):
        JSONHubProtocol().write_message(InvocationMessage("1", "Send", (nested,)))


def test_parse_ignores_tail_cut_inside_utf8_character() -> None:
    data = b'{"type":3,"invocationId":"1"}\x1e{"type":3,"invocationId":"\xc3'
    assert JSONHubProtocol().parse_messages(data) == [CompletionMessage.void("1")]
