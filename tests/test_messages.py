"""
GossipChain Network Message Tests
"""

import json

import pytest

from conftest import make_chain
from gossipchain.errors import ErrorCode, MalformedMessageError, UnknownMessageTypeError
from gossipchain.network.messages import (
    Message,
    MessageType,
    parse_message,
    query_all_message,
    query_latest_message,
    response_blockchain_message,
)


class TestMessageEncoding:
    """Tests for wire encoding."""

    def test_query_latest(self):
        """Test QUERY_LATEST carries only its type."""
        assert json.loads(query_latest_message().serialize()) == {"type": 0}

    def test_query_all(self):
        """Test QUERY_ALL carries only its type."""
        assert json.loads(query_all_message().serialize()) == {"type": 1}

    def test_response_data_is_json_string(self, genesis):
        """Test response blocks are double-encoded as a string."""
        wire = json.loads(response_blockchain_message([genesis]).serialize())
        assert wire["type"] == 2
        assert isinstance(wire["data"], str)
        assert json.loads(wire["data"]) == [genesis.to_dict()]


class TestMessageParsing:
    """Tests for parse_message."""

    def test_parse_queries(self):
        """Test query frames decode to their type."""
        assert parse_message('{"type": 0}').msg_type == MessageType.QUERY_LATEST
        assert parse_message('{"type": 1}').msg_type == MessageType.QUERY_ALL

    def test_parse_response(self):
        """Test response frames decode their blocks."""
        chain = make_chain(3)
        message = parse_message(response_blockchain_message(chain).serialize())
        assert message.msg_type == MessageType.RESPONSE_BLOCKCHAIN
        assert message.blocks == chain

    def test_parse_bytes(self):
        """Test binary frames are decoded as UTF-8."""
        assert parse_message(b'{"type": 1}').msg_type == MessageType.QUERY_ALL

    def test_parse_predecoded_block_array(self, genesis):
        """Test an array in place of the encoded string is accepted."""
        raw = json.dumps({"type": 2, "data": [genesis.to_dict()]})
        assert parse_message(raw).blocks == [genesis]

    @pytest.mark.parametrize("raw", [
        "not json",
        "[1, 2]",
        '{"type": 2}',
        '{"type": 2, "data": "not json"}',
        '{"type": 2, "data": "[]"}',
        '{"type": 2, "data": "[{\\"index\\": 1}]"}',
        b"\xff\xfe",
        12345,
        "[" * 100000,
        '{"type": ' + "9" * 5000 + "}",
    ])
    def test_malformed(self, raw):
        """Test malformed frames raise MalformedMessageError."""
        with pytest.raises(MalformedMessageError):
            parse_message(raw)

    @pytest.mark.parametrize("msg_type", [3, -1, "0", None, True])
    def test_unknown_type(self, msg_type):
        """Test unknown types are reported distinctly."""
        with pytest.raises(UnknownMessageTypeError) as exc:
            parse_message(json.dumps({"type": msg_type}))
        assert exc.value.code == ErrorCode.UNKNOWN_MESSAGE_TYPE

    def test_message_defaults(self):
        """Test messages default to no blocks."""
        assert Message(MessageType.QUERY_ALL).blocks == []
