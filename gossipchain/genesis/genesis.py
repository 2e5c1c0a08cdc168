"""
GossipChain Genesis Block

The fixed first block every valid chain begins with.
"""

from __future__ import annotations
import logging

from gossipchain.constants import (
    GENESIS_INDEX,
    GENESIS_PREVIOUS_HASH,
    GENESIS_TIMESTAMP,
    GENESIS_DATA,
    GENESIS_HASH,
)
from gossipchain.core.block import Block

logger = logging.getLogger(__name__)


def create_genesis_block() -> Block:
    """
    Create the genesis block.

    The hash is the hard-coded network constant, not recomputed.

    Returns:
        Genesis block
    """
    return Block(
        index=GENESIS_INDEX,
        previous_hash=GENESIS_PREVIOUS_HASH,
        timestamp=GENESIS_TIMESTAMP,
        data=GENESIS_DATA,
        block_hash=GENESIS_HASH,
    )


GENESIS_BLOCK: Block = create_genesis_block()


def is_genesis_block(block: Block) -> bool:
    """Check structural equality with the genesis constant."""
    return block == GENESIS_BLOCK


def verify_genesis() -> bool:
    """Verify the hard-coded genesis hash matches its contents."""
    valid = GENESIS_BLOCK.has_valid_hash()
    if not valid:
        logger.error("Genesis hash does not match genesis contents")
    return valid
