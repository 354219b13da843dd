"""Unit tests for daemon protocol module."""

import json

import pytest

from kamune_bridge.adapters.daemon.protocol import LINE_TERMINATOR, decode, encode
from kamune_bridge.domain.exceptions import DecodingError, EncodingError, ProtocolError
from kamune_bridge.domain.messages import Command, Event


class TestEncode:
    """Tests for encode()."""

    def test_encode_produces_single_terminated_line(self) -> None:
        """Test that the record is one line ending in a newline."""
        command = Command(name="dial", id="abc", params={"addr": "127.0.0.1:9000"})

        result = encode(command)

        assert result.endswith(LINE_TERMINATOR)
        assert result.count(b"\n") == 1

    def test_encode_wire_shape(self) -> None:
        """Test the exact JSON object sent to the daemon."""
        command = Command(name="dial", id="abc", params={"addr": "127.0.0.1:9000"})

        data = json.loads(encode(command))

        assert data == {
            "type": "cmd",
            "cmd": "dial",
            "id": "abc",
            "params": {"addr": "127.0.0.1:9000"},
        }

    def test_encode_is_compact(self) -> None:
        """Test that no insignificant whitespace is emitted."""
        command = Command(name="echo", id="x", params={"a": 1})

        assert encode(command) == b'{"type":"cmd","cmd":"echo","id":"x","params":{"a":1}}\n'

    def test_encode_escapes_newlines_in_params(self) -> None:
        """Test that embedded newlines never split the record."""
        command = Command(name="echo", id="x", params={"text": "line1\nline2"})

        result = encode(command)

        assert result.count(b"\n") == 1
        assert json.loads(result)["params"]["text"] == "line1\nline2"

    def test_encode_keeps_unicode(self) -> None:
        """Test that non-ASCII params survive as UTF-8."""
        command = Command(name="echo", id="x", params={"text": "héllo ✓"})

        assert json.loads(encode(command).decode("utf-8"))["params"]["text"] == "héllo ✓"

    def test_encode_raises_on_unserializable_params(self) -> None:
        """Test that params JSON cannot represent raise EncodingError."""
        command = Command(name="echo", id="x", params={"value": object()})

        with pytest.raises(EncodingError):
            encode(command)

    def test_encode_raises_on_nan(self) -> None:
        """Test that NaN is rejected instead of emitting invalid JSON."""
        command = Command(name="echo", id="x", params={"value": float("nan")})

        with pytest.raises(EncodingError):
            encode(command)

    def test_encoding_error_is_protocol_error(self) -> None:
        """Test the exception hierarchy used by callers."""
        assert issubclass(EncodingError, ProtocolError)
        assert issubclass(DecodingError, ProtocolError)


class TestDecode:
    """Tests for decode()."""

    def test_decode_reply_event(self) -> None:
        """Test decoding an event that replies to a command."""
        line = b'{"type":"evt","evt":"dial_result","id":"abc","data":{"ok":true}}\n'

        event = decode(line)

        assert event == Event(name="dial_result", data={"ok": True}, id="abc")
        assert event.correlation_id == "abc"

    def test_decode_push_event_without_id(self) -> None:
        """Test that a missing id yields a pure push event."""
        event = decode('{"type":"evt","evt":"peer_joined","data":{"peer":"p1"}}')

        assert event is not None
        assert event.id is None
        assert event.correlation_id is None

    def test_decode_null_id_is_push_event(self) -> None:
        """Test that an explicit null id is treated as absent."""
        event = decode('{"type":"evt","evt":"peer_joined","id":null,"data":null}')

        assert event is not None
        assert event.correlation_id is None

    def test_decode_empty_id_has_no_correlation(self) -> None:
        """Test that an empty string id does not correlate."""
        event = decode('{"type":"evt","evt":"tick","id":"","data":1}')

        assert event is not None
        assert event.correlation_id is None

    def test_decode_missing_data_raises(self) -> None:
        """Test that an event without a data field is malformed."""
        with pytest.raises(DecodingError, match="data"):
            decode(b'{"type":"evt","evt":"x","id":"abc"}')

    def test_decode_null_data(self) -> None:
        """Test that an explicit null data is accepted."""
        event = decode('{"type":"evt","evt":"ready","data":null}')

        assert event is not None
        assert event.data is None

    def test_decode_accepts_str(self) -> None:
        """Test that text lines are accepted as well as bytes."""
        event = decode('{"type":"evt","evt":"ready","data":{}}\n')

        assert event is not None
        assert event.name == "ready"

    def test_decode_blank_line_returns_none(self) -> None:
        """Test that blank lines are skipped."""
        assert decode(b"\n") is None
        assert decode("   ") is None

    @pytest.mark.parametrize(
        "line",
        [
            b"not json",
            b'{"type":"evt","evt":',
            b"[1, 2, 3]",
            b'"just a string"',
            b'{"evt":"ready"}',
            b'{"type":"evt"}',
            b'{"type":"evt","evt":42}',
            b'{"type":"evt","evt":"ready","id":7}',
        ],
    )
    def test_decode_raises_on_malformed_lines(self, line: bytes) -> None:
        """Test that malformed lines raise DecodingError."""
        with pytest.raises(DecodingError):
            decode(line)

    def test_decode_raises_on_invalid_utf8(self) -> None:
        """Test that undecodable bytes raise DecodingError."""
        with pytest.raises(DecodingError) as exc_info:
            decode(b'{"type":"evt","evt":"\xff"}')

        assert "UTF-8" in str(exc_info.value)

    def test_decode_error_event(self) -> None:
        """Test decoding an error reply."""
        event = decode('{"type":"evt","evt":"error","id":"abc","data":{"error":"boom"}}')

        assert event is not None
        assert event.is_error()
        assert event.error_message() == "boom"
