"""
GossipChain Test Fixtures
"""

import pytest
from typing import List
from unittest.mock import AsyncMock

from gossipchain.core.block import Block, generate_next_block
from gossipchain.genesis.genesis import GENESIS_BLOCK
from gossipchain.network.gossip import GossipProtocol
from gossipchain.network.peer import Peer, PeerRegistry, PeerState
from gossipchain.state.store import ChainStore


def make_chain(length: int, prefix: str = "block", start_time: int = 1700000000) -> List[Block]:
    """Build a valid chain of ``length`` blocks starting at genesis."""
    chain = [GENESIS_BLOCK]
    for i in range(1, length):
        chain.append(generate_next_block(chain[-1], f"{prefix}-{i}", start_time + i))
    return chain


class FakeWebSocket:
    """Records frames written to it."""

    def __init__(self, fail: bool = False):
        self.sent: List[str] = []
        self.closed = False
        self.send_str = AsyncMock(side_effect=self._send)
        self._fail = fail

    async def _send(self, data: str) -> None:
        if self._fail:
            raise ConnectionResetError("connection reset")
        self.sent.append(data)

    async def close(self) -> None:
        self.closed = True


def open_peer(address: str = "10.0.0.1:50000", fail: bool = False) -> Peer:
    """Create a peer already in OPEN state on a fake socket."""
    peer = Peer(address=address, ws=FakeWebSocket(fail=fail), inbound=True)
    peer.transition(PeerState.OPEN)
    return peer


@pytest.fixture
def genesis() -> Block:
    """The genesis block."""
    return GENESIS_BLOCK


@pytest.fixture
def store() -> ChainStore:
    """Fresh chain store holding only genesis."""
    return ChainStore()


@pytest.fixture
def registry() -> PeerRegistry:
    """Empty peer registry."""
    return PeerRegistry()


@pytest.fixture
def gossip(store, registry) -> GossipProtocol:
    """Gossip protocol over the fresh store and registry."""
    return GossipProtocol(store, registry)


@pytest.fixture
def peer(registry) -> Peer:
    """One open peer, registered."""
    p = open_peer()
    registry.register(p)
    return p
