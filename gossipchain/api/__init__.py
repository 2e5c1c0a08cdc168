"""
GossipChain HTTP API
"""

from gossipchain.api.server import APIServer
from gossipchain.api.client import (
    NodeRequestError,
    get_blocks,
    mine_block,
    get_peers,
    add_peer,
    get_status,
)

__all__ = [
    "APIServer",
    "NodeRequestError",
    "get_blocks",
    "mine_block",
    "get_peers",
    "add_peer",
    "get_status",
]
