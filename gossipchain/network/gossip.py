"""
GossipChain Gossip Protocol

Three-message synchronization state machine.
"""

from __future__ import annotations
import logging
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Tuple

from gossipchain.core.block import Block
from gossipchain.errors import MalformedMessageError
from gossipchain.network.messages import (
    Message,
    MessageType,
    parse_message,
    query_all_message,
    query_latest_message,
    response_blockchain_message,
)
from gossipchain.network.peer import Peer, PeerRegistry, PeerState
from gossipchain.state.store import ChainStore

logger = logging.getLogger(__name__)


class SyncAction(Enum):
    """What to do with a received RESPONSE_BLOCKCHAIN."""
    IGNORE = auto()         # We are at least as current
    APPEND = auto()         # Received tip extends our tip
    QUERY_ALL = auto()      # Lone block that does not link; ask for chains
    REPLACE = auto()        # Treat received blocks as a candidate chain


# Keyed by (single_block, links_to_local_tip, received_longer)
SYNC_DECISION_TABLE: Dict[Tuple[bool, bool, bool], SyncAction] = {
    (True, True, True): SyncAction.APPEND,
    (True, False, True): SyncAction.QUERY_ALL,
    (False, True, True): SyncAction.APPEND,
    (False, False, True): SyncAction.REPLACE,
    (True, True, False): SyncAction.IGNORE,
    (True, False, False): SyncAction.IGNORE,
    (False, True, False): SyncAction.IGNORE,
    (False, False, False): SyncAction.IGNORE,
}


def decide_sync_action(
    received_count: int,
    links_to_local_tip: bool,
    received_longer: bool
) -> SyncAction:
    """
    Look up the sync action for a received block list.

    Args:
        received_count: Number of blocks received
        links_to_local_tip: Received tip's previous hash equals our tip hash
        received_longer: Received tip index is above our tip index

    Returns:
        SyncAction
    """
    return SYNC_DECISION_TABLE[(received_count == 1, links_to_local_tip, received_longer)]


@dataclass
class GossipStats:
    """Gossip statistics."""
    messages_received: int = 0
    messages_dropped: int = 0
    queries_answered: int = 0
    responses_ignored: int = 0
    blocks_appended: int = 0
    appends_rejected: int = 0
    chains_replaced: int = 0
    replacements_rejected: int = 0
    query_all_broadcasts: int = 0


@dataclass
class GossipProtocol:
    """
    Gossip protocol driving chain synchronization.

    Owns the peer connection state transitions, answers queries from the
    chain store, and turns received blocks into append or replace
    proposals. Every successful chain mutation is followed by a broadcast
    of the new tip.
    """
    store: ChainStore
    registry: PeerRegistry

    stats: GossipStats = field(default_factory=GossipStats)

    def __post_init__(self):
        self.stats = GossipStats()

    # Connection state machine

    async def open_peer(self, peer: Peer) -> None:
        """
        CONNECTING -> OPEN.

        Registers the peer and asks it for its tip.
        """
        peer.transition(PeerState.OPEN)
        self.registry.register(peer)
        await self.registry.write(peer, query_latest_message())

    def close_peer(self, peer: Peer) -> None:
        """-> CLOSED. Removes the peer from the broadcast set."""
        if peer.mark_closed():
            self.registry.deregister(peer)

    # Message handling

    async def handle_message(self, peer: Peer, raw: Any) -> None:
        """
        Handle one frame received from ``peer``.

        Malformed frames are dropped; the connection stays open.
        """
        self.stats.messages_received += 1
        peer.stats.messages_received += 1
        peer.stats.last_message_time = time.time()

        try:
            message = parse_message(raw)
        except MalformedMessageError as e:
            self.stats.messages_dropped += 1
            logger.debug(f"Dropped message from {peer.address}: {e.message}")
            return

        logger.debug(f"Received {message.msg_type.name} from {peer.address}")

        if message.msg_type == MessageType.QUERY_LATEST:
            self.stats.queries_answered += 1
            await self.registry.write(peer, self.latest_message())

        elif message.msg_type == MessageType.QUERY_ALL:
            self.stats.queries_answered += 1
            await self.registry.write(peer, self.chain_message())

        elif message.msg_type == MessageType.RESPONSE_BLOCKCHAIN:
            await self.handle_blockchain_response(message.blocks)

    async def handle_blockchain_response(self, blocks: List[Block]) -> SyncAction:
        """
        Reconcile received blocks with the local chain.

        Args:
            blocks: Non-empty list of received blocks, any order

        Returns:
            The action taken
        """
        received = sorted(blocks, key=lambda b: b.index)
        received_tip = received[-1]
        local_tip = self.store.tip()

        action = decide_sync_action(
            len(received),
            received_tip.previous_hash == local_tip.block_hash,
            received_tip.index > local_tip.index,
        )

        if action == SyncAction.IGNORE:
            self.stats.responses_ignored += 1
            logger.debug(
                f"Received blockchain is not longer than ours "
                f"(ours {local_tip.index}, peer {received_tip.index})"
            )
            return action

        logger.info(
            f"Blockchain possibly behind. We got: {local_tip.index} "
            f"Peer got: {received_tip.index}"
        )

        if action == SyncAction.APPEND:
            if await self.store.try_append(received_tip) is not None:
                self.stats.blocks_appended += 1
                await self.broadcast_latest()
            else:
                self.stats.appends_rejected += 1

        elif action == SyncAction.QUERY_ALL:
            logger.info("We have to query the chain from our peers")
            self.stats.query_all_broadcasts += 1
            await self.registry.broadcast(query_all_message())

        elif action == SyncAction.REPLACE:
            if await self.store.try_replace(received):
                self.stats.chains_replaced += 1
                await self.broadcast_latest()
            else:
                self.stats.replacements_rejected += 1

        return action

    # Outbound

    def latest_message(self) -> Message:
        """Response carrying only our tip."""
        return response_blockchain_message([self.store.tip()])

    def chain_message(self) -> Message:
        """Response carrying our whole chain."""
        return response_blockchain_message(self.store.all())

    async def broadcast_latest(self) -> int:
        """Send our tip to every peer."""
        return await self.registry.broadcast(self.latest_message())

    def get_statistics(self) -> dict:
        """Get gossip statistics."""
        return {
            "messages_received": self.stats.messages_received,
            "messages_dropped": self.stats.messages_dropped,
            "queries_answered": self.stats.queries_answered,
            "responses_ignored": self.stats.responses_ignored,
            "blocks_appended": self.stats.blocks_appended,
            "appends_rejected": self.stats.appends_rejected,
            "chains_replaced": self.stats.chains_replaced,
            "replacements_rejected": self.stats.replacements_rejected,
            "query_all_broadcasts": self.stats.query_all_broadcasts,
        }
