"""
GossipChain Block Structure

Immutable block record and its content-hash integrity rule.
"""

from __future__ import annotations
import time
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Union

from gossipchain.crypto.hash import calculate_hash
from gossipchain.errors import MalformedBlockError


@dataclass(frozen=True, slots=True)
class Block:
    """
    One unit of the ledger.

    ``block_hash`` is both the integrity check over the other four fields
    and the key the successor links to through ``previous_hash``.
    """
    index: int                          # Position in chain, genesis = 0
    previous_hash: str                  # Hash of predecessor
    timestamp: Union[int, float]        # Producer time, unvalidated
    data: str                           # Opaque payload
    block_hash: str                     # H(index, previous_hash, timestamp, data)

    def compute_hash(self) -> str:
        """Recompute the content hash from the block fields."""
        return calculate_hash(self.index, self.previous_hash, self.timestamp, self.data)

    def has_valid_hash(self) -> bool:
        """Check the stored hash against the block contents."""
        return self.compute_hash() == self.block_hash

    def to_dict(self) -> Dict[str, Any]:
        """Export as the wire JSON shape."""
        return {
            "index": self.index,
            "previousHash": self.previous_hash,
            "timestamp": self.timestamp,
            "data": self.data,
            "hash": self.block_hash,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Block":
        """
        Build a block from its wire JSON shape.

        Args:
            data: Decoded JSON object

        Returns:
            Block

        Raises:
            MalformedBlockError: Missing fields or wrong field types
        """
        if not isinstance(data, dict):
            raise MalformedBlockError(f"expected object, got {type(data).__name__}")

        missing = [k for k in ("index", "previousHash", "timestamp", "data", "hash") if k not in data]
        if missing:
            raise MalformedBlockError(f"missing fields {', '.join(missing)}")

        index = data["index"]
        if not _is_integer(index) or index < 0:
            raise MalformedBlockError(f"index must be a non-negative integer, got {index!r}")

        timestamp = data["timestamp"]
        if not _is_number(timestamp):
            raise MalformedBlockError(f"timestamp must be numeric, got {timestamp!r}")

        for key in ("previousHash", "data", "hash"):
            if not isinstance(data[key], str):
                raise MalformedBlockError(f"{key} must be a string")

        return cls(
            index=index,
            previous_hash=data["previousHash"],
            timestamp=timestamp,
            data=data["data"],
            block_hash=data["hash"],
        )

    def __repr__(self) -> str:
        return (
            f"Block(index={self.index}, "
            f"hash={self.block_hash[:16]}..., "
            f"prev={self.previous_hash[:16]})"
        )


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def create_block(
    index: int,
    previous_hash: str,
    timestamp: Union[int, float],
    data: str
) -> Block:
    """Create a block with its hash computed from the given fields."""
    return Block(
        index=index,
        previous_hash=previous_hash,
        timestamp=timestamp,
        data=data,
        block_hash=calculate_hash(index, previous_hash, timestamp, data),
    )


def generate_next_block(
    previous: Block,
    data: str,
    timestamp: Optional[Union[int, float]] = None
) -> Block:
    """
    Build the block that extends ``previous`` with ``data``.

    Args:
        previous: Current tip
        data: Payload for the new block
        timestamp: Block time in seconds (defaults to now)

    Returns:
        Block whose index and previous hash link to ``previous``
    """
    if timestamp is None:
        timestamp = time.time()
    return create_block(previous.index + 1, previous.block_hash, timestamp, data)


def blocks_to_dicts(blocks: Iterable[Block]) -> List[Dict[str, Any]]:
    """Export a sequence of blocks as wire JSON objects."""
    return [block.to_dict() for block in blocks]


def blocks_from_dicts(items: Any) -> List[Block]:
    """
    Parse a JSON array of blocks.

    Raises:
        MalformedBlockError: Not a list, or any element is malformed
    """
    if not isinstance(items, list):
        raise MalformedBlockError(f"expected array of blocks, got {type(items).__name__}")
    return [Block.from_dict(item) for item in items]
