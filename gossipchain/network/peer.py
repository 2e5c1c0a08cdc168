"""
GossipChain Peer Management

Peer connection state and the registry of open connections.
"""

from __future__ import annotations
import itertools
import logging
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from gossipchain.constants import PEER_URL_SCHEME
from gossipchain.errors import InvalidPeerAddressError, InvalidPeerStateError
from gossipchain.network.messages import Message

logger = logging.getLogger(__name__)

_connection_ids = itertools.count(1)


def normalize_peer_address(address: str) -> str:
    """
    Normalize a peer address to ``ws://host:port``.

    Args:
        address: ``host:port`` or a ws/wss URL

    Returns:
        Normalized URL without path

    Raises:
        InvalidPeerAddressError: Empty, wrong scheme, or no host
    """
    raw = (address or "").strip()
    if not raw:
        raise InvalidPeerAddressError(address, "must not be empty")
    if "://" not in raw:
        raw = f"{PEER_URL_SCHEME}://{raw}"

    parsed = urlparse(raw)
    if parsed.scheme not in {"ws", "wss"}:
        raise InvalidPeerAddressError(address, "scheme must be ws or wss")
    if not parsed.hostname:
        raise InvalidPeerAddressError(address, "must include a host")
    try:
        parsed.port
    except ValueError as e:
        raise InvalidPeerAddressError(address, "invalid port") from e

    return f"{parsed.scheme}://{parsed.netloc}"


class PeerState(Enum):
    """Peer connection state."""
    CONNECTING = auto()
    OPEN = auto()
    CLOSED = auto()


_TRANSITIONS = {
    PeerState.CONNECTING: {PeerState.OPEN, PeerState.CLOSED},
    PeerState.OPEN: {PeerState.CLOSED},
    PeerState.CLOSED: set(),
}


@dataclass
class PeerStats:
    """Statistics for a peer connection."""
    messages_sent: int = 0
    messages_received: int = 0
    send_errors: int = 0
    connect_time: float = 0.0
    last_message_time: float = 0.0


@dataclass
class Peer:
    """
    One connection to a remote node.

    ``ws`` is any WebSocket object with ``send_str`` and ``close``
    coroutines (aiohttp server or client side).
    """
    address: str
    ws: Any = None
    inbound: bool = False

    state: PeerState = PeerState.CONNECTING
    stats: PeerStats = field(default_factory=PeerStats)
    connection_id: int = field(default_factory=lambda: next(_connection_ids))

    @property
    def peer_id(self) -> int:
        """Unique per connection."""
        return self.connection_id

    @property
    def is_open(self) -> bool:
        return self.state == PeerState.OPEN

    def transition(self, target: PeerState) -> None:
        """
        Move to ``target`` state.

        Raises:
            InvalidPeerStateError: Transition not allowed (CLOSED is terminal)
        """
        if target not in _TRANSITIONS[self.state]:
            raise InvalidPeerStateError(self.address, self.state.name, target.name)

        logger.debug(f"Peer {self.address}: {self.state.name} -> {target.name}")
        self.state = target
        if target == PeerState.OPEN:
            self.stats.connect_time = time.time()

    def mark_closed(self) -> bool:
        """
        Move to CLOSED unless already there.

        Returns:
            True if this call performed the transition
        """
        if self.state == PeerState.CLOSED:
            return False
        self.transition(PeerState.CLOSED)
        return True

    async def send(self, message: Message) -> bool:
        """
        Serialize and send a message without waiting for any reply.

        Returns:
            True if the frame was handed to the transport
        """
        if not self.is_open or self.ws is None:
            return False

        try:
            await self.ws.send_str(message.serialize())
        except Exception as e:
            self.stats.send_errors += 1
            logger.warning(f"Failed to send message to {self.address}: {e}")
            return False

        self.stats.messages_sent += 1
        return True

    async def close(self) -> None:
        """Close the underlying transport."""
        if self.ws is not None:
            try:
                await self.ws.close()
            except Exception as e:
                logger.debug(f"Error closing {self.address}: {e}")

    def to_dict(self) -> dict:
        """Export peer info as dictionary."""
        return {
            "connection_id": self.connection_id,
            "address": self.address,
            "inbound": self.inbound,
            "state": self.state.name,
            "messages_sent": self.stats.messages_sent,
            "messages_received": self.stats.messages_received,
            "send_errors": self.stats.send_errors,
        }


@dataclass
class PeerRegistry:
    """
    Set of currently open peer connections.

    Keyed by connection, not address: a second connection to the same
    endpoint is registered alongside the first.

    Peers enter on their OPEN transition and leave on CLOSED. Writes are
    fire-and-forget: no acknowledgement, no retry, no ordering across peers.
    """
    _peers: Dict[int, Peer] = field(default_factory=dict)

    def __post_init__(self):
        self._peers = {}

    def register(self, peer: Peer) -> None:
        """Add an open peer to the broadcast set."""
        if not peer.is_open:
            raise InvalidPeerStateError(peer.address, peer.state.name, "registered")
        self._peers[peer.peer_id] = peer
        logger.info(f"Registered peer {peer.address} ({len(self._peers)} connected)")

    def deregister(self, peer: Peer) -> None:
        """Remove a peer from the broadcast set."""
        if self._peers.get(peer.peer_id) is peer:
            del self._peers[peer.peer_id]
            logger.info(f"Connection to peer {peer.address} closed ({len(self._peers)} connected)")

    @property
    def peer_count(self) -> int:
        return len(self._peers)

    @property
    def peers(self) -> List[Peer]:
        return list(self._peers.values())

    def get_peer(self, address: str) -> Optional[Peer]:
        """Get the first registered peer at ``address``."""
        for peer in self._peers.values():
            if peer.address == address:
                return peer
        return None

    def addresses(self) -> List[str]:
        """Endpoint addresses of all registered peers."""
        return [peer.address for peer in self._peers.values()]

    async def write(self, peer: Peer, message: Message) -> bool:
        """Send a message to one peer."""
        return await peer.send(message)

    async def broadcast(self, message: Message) -> int:
        """
        Send a message to every registered peer.

        Returns:
            Number of peers the message was handed to
        """
        sent_count = 0
        for peer in list(self._peers.values()):
            if await self.write(peer, message):
                sent_count += 1

        logger.debug(f"Broadcast {message.msg_type.name} to {sent_count} peers")
        return sent_count

    async def disconnect_all(self) -> None:
        """Close every registered peer."""
        for peer in list(self._peers.values()):
            await peer.close()
        self._peers.clear()

    def to_dict(self) -> List[dict]:
        """Export all peers as list of dictionaries."""
        return [peer.to_dict() for peer in self._peers.values()]
