"""
GossipChain Node
"""

from gossipchain.node.config import (
    NodeConfig,
    NetworkConfig,
    APIConfig,
    LogConfig,
    parse_peer_list,
    setup_logging,
)
from gossipchain.node.node import Node, NodeStatus, main

__all__ = [
    "NodeConfig",
    "NetworkConfig",
    "APIConfig",
    "LogConfig",
    "parse_peer_list",
    "setup_logging",
    "Node",
    "NodeStatus",
    "main",
]
