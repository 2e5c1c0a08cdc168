"""
GossipChain Network Protocol

Peer communication and chain synchronization.
"""

from gossipchain.network.messages import (
    MessageType,
    Message,
    parse_message,
    query_latest_message,
    query_all_message,
    response_blockchain_message,
)
from gossipchain.network.peer import (
    Peer,
    PeerRegistry,
    PeerState,
    normalize_peer_address,
)
from gossipchain.network.gossip import (
    GossipProtocol,
    SyncAction,
    decide_sync_action,
)
from gossipchain.network.transport import P2PServer

__all__ = [
    # Messages
    "MessageType",
    "Message",
    "parse_message",
    "query_latest_message",
    "query_all_message",
    "response_blockchain_message",
    # Peer
    "Peer",
    "PeerRegistry",
    "PeerState",
    "normalize_peer_address",
    # Gossip
    "GossipProtocol",
    "SyncAction",
    "decide_sync_action",
    # Transport
    "P2PServer",
]
