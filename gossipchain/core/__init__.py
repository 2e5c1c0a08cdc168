"""
GossipChain Core Data Structures
"""

from gossipchain.core.block import (
    Block,
    create_block,
    generate_next_block,
    blocks_to_dicts,
    blocks_from_dicts,
)

__all__ = [
    "Block",
    "create_block",
    "generate_next_block",
    "blocks_to_dicts",
    "blocks_from_dicts",
]
