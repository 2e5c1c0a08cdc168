"""
GossipChain Network Messages

Message types and JSON serialization for peer communication.
"""

from __future__ import annotations
import json
import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Iterable, List, Optional

from gossipchain.core.block import Block, blocks_from_dicts, blocks_to_dicts
from gossipchain.errors import (
    MalformedBlockError,
    MalformedMessageError,
    UnknownMessageTypeError,
)

logger = logging.getLogger(__name__)


class MessageType(IntEnum):
    """Network message types."""
    QUERY_LATEST = 0
    QUERY_ALL = 1
    RESPONSE_BLOCKCHAIN = 2


@dataclass
class Message:
    """
    A decoded gossip message.

    Only RESPONSE_BLOCKCHAIN carries blocks. On the wire its ``data`` field
    is itself a JSON-encoded string holding the block array.
    """
    msg_type: MessageType
    blocks: List[Block] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Export as the wire JSON object."""
        result: dict = {"type": int(self.msg_type)}
        if self.msg_type == MessageType.RESPONSE_BLOCKCHAIN:
            result["data"] = json.dumps(blocks_to_dicts(self.blocks))
        return result

    def serialize(self) -> str:
        """Encode as a JSON text frame."""
        return json.dumps(self.to_dict())


def query_latest_message() -> Message:
    """Ask a peer for its tip."""
    return Message(MessageType.QUERY_LATEST)


def query_all_message() -> Message:
    """Ask a peer for its whole chain."""
    return Message(MessageType.QUERY_ALL)


def response_blockchain_message(blocks: Iterable[Block]) -> Message:
    """Send blocks to a peer."""
    return Message(MessageType.RESPONSE_BLOCKCHAIN, list(blocks))


def parse_message(raw: Any) -> Message:
    """
    Decode a wire message.

    Args:
        raw: Text frame (str or bytes)

    Returns:
        Decoded Message

    Raises:
        MalformedMessageError: Not JSON, not an object, unknown type,
            or a response whose block payload cannot be decoded
    """
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedMessageError("frame is not valid UTF-8") from e

    if not isinstance(raw, str):
        raise MalformedMessageError(f"unsupported frame type {type(raw).__name__}")

    try:
        data = json.loads(raw)
    except (ValueError, RecursionError) as e:
        raise MalformedMessageError(f"invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise MalformedMessageError("message must be a JSON object")

    raw_type = data.get("type")
    msg_type = _parse_type(raw_type)

    if msg_type != MessageType.RESPONSE_BLOCKCHAIN:
        return Message(msg_type)

    return Message(msg_type, _parse_blocks(data.get("data")))


def _parse_type(raw_type: Any) -> MessageType:
    if isinstance(raw_type, bool) or not isinstance(raw_type, int):
        raise UnknownMessageTypeError(raw_type)
    try:
        return MessageType(raw_type)
    except ValueError:
        raise UnknownMessageTypeError(raw_type) from None


def _parse_blocks(payload: Optional[Any]) -> List[Block]:
    if payload is None:
        raise MalformedMessageError("response without data")

    # Accept an already-decoded array as well as the double-encoded string.
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except (ValueError, RecursionError) as e:
            raise MalformedMessageError(f"invalid block payload: {e}") from e

    try:
        blocks = blocks_from_dicts(payload)
    except MalformedBlockError as e:
        raise MalformedMessageError(e.message) from e

    if not blocks:
        raise MalformedMessageError("response with no blocks")

    return blocks
