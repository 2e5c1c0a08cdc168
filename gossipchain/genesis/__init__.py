"""
GossipChain Genesis
"""

from gossipchain.genesis.genesis import (
    GENESIS_BLOCK,
    create_genesis_block,
    is_genesis_block,
    verify_genesis,
)

__all__ = [
    "GENESIS_BLOCK",
    "create_genesis_block",
    "is_genesis_block",
    "verify_genesis",
]
