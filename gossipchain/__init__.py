"""
GossipChain Node

Minimal distributed ledger: content-addressed blocks, a three-message
gossip protocol, and longest-valid-chain conflict resolution.
"""

__version__ = "0.1.0"
__author__ = "GossipChain"

from gossipchain.constants import GENESIS_HASH, DEFAULT_HTTP_PORT, DEFAULT_P2P_PORT

__all__ = [
    "GENESIS_HASH",
    "DEFAULT_HTTP_PORT",
    "DEFAULT_P2P_PORT",
    "__version__",
]
