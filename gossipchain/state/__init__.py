"""
GossipChain State
Canonical chain ownership.
"""

from gossipchain.state.store import ChainStore

__all__ = [
    "ChainStore",
]
