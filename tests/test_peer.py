"""
GossipChain Peer Management Tests
"""

import json

import pytest

from conftest import FakeWebSocket, open_peer
from gossipchain.errors import InvalidPeerAddressError, InvalidPeerStateError
from gossipchain.network.messages import query_all_message
from gossipchain.network.peer import Peer, PeerRegistry, PeerState, normalize_peer_address


# =============================================================================
# Test: Address Normalization
# =============================================================================

class TestNormalizePeerAddress:
    """Tests for normalize_peer_address."""

    @pytest.mark.parametrize("raw,expected", [
        ("localhost:6001", "ws://localhost:6001"),
        ("ws://localhost:6001", "ws://localhost:6001"),
        ("ws://10.0.0.2:6002/", "ws://10.0.0.2:6002"),
        ("  node.example:6001  ", "ws://node.example:6001"),
        ("wss://node.example:443", "wss://node.example:443"),
    ])
    def test_valid(self, raw, expected):
        """Test accepted address forms."""
        assert normalize_peer_address(raw) == expected

    @pytest.mark.parametrize("raw", ["", "   ", "http://host:6001", "ws://:6001", "host:notaport"])
    def test_invalid(self, raw):
        """Test rejected address forms."""
        with pytest.raises(InvalidPeerAddressError):
            normalize_peer_address(raw)


# =============================================================================
# Test: Peer State Machine
# =============================================================================

class TestPeerState:
    """Tests for peer connection states."""

    def test_initial_state(self):
        """Test peers start CONNECTING."""
        peer = Peer(address="ws://a:1")
        assert peer.state == PeerState.CONNECTING
        assert not peer.is_open

    def test_connecting_to_open(self):
        """Test the handshake transition."""
        peer = Peer(address="ws://a:1")
        peer.transition(PeerState.OPEN)
        assert peer.is_open
        assert peer.stats.connect_time > 0

    def test_connecting_to_closed(self):
        """Test a failed connect goes straight to CLOSED."""
        peer = Peer(address="ws://a:1")
        assert peer.mark_closed()
        assert peer.state == PeerState.CLOSED

    def test_closed_is_terminal(self):
        """Test CLOSED cannot be left."""
        peer = Peer(address="ws://a:1")
        peer.mark_closed()
        with pytest.raises(InvalidPeerStateError):
            peer.transition(PeerState.OPEN)

    def test_mark_closed_idempotent(self):
        """Test closing twice is a no-op."""
        peer = open_peer()
        assert peer.mark_closed()
        assert not peer.mark_closed()

    def test_open_to_open_rejected(self):
        """Test an open peer cannot reopen."""
        peer = open_peer()
        with pytest.raises(InvalidPeerStateError):
            peer.transition(PeerState.OPEN)


# =============================================================================
# Test: Peer Send
# =============================================================================

class TestPeerSend:
    """Tests for Peer.send."""

    @pytest.mark.asyncio
    async def test_send_open(self):
        """Test open peers receive serialized frames."""
        peer = open_peer()
        assert await peer.send(query_all_message())
        assert json.loads(peer.ws.sent[0]) == {"type": 1}
        assert peer.stats.messages_sent == 1

    @pytest.mark.asyncio
    async def test_send_not_open(self):
        """Test nothing is written before OPEN."""
        ws = FakeWebSocket()
        peer = Peer(address="ws://a:1", ws=ws)
        assert not await peer.send(query_all_message())
        ws.send_str.assert_not_called()

    @pytest.mark.asyncio
    async def test_send_failure_counted(self):
        """Test transport errors are swallowed and counted."""
        peer = open_peer(fail=True)
        assert not await peer.send(query_all_message())
        assert peer.stats.send_errors == 1

    @pytest.mark.asyncio
    async def test_close(self):
        """Test close reaches the socket."""
        peer = open_peer()
        await peer.close()
        assert peer.ws.closed


# =============================================================================
# Test: Peer Registry
# =============================================================================

class TestPeerRegistry:
    """Tests for PeerRegistry."""

    def test_register_requires_open(self, registry):
        """Test only open peers enter the broadcast set."""
        with pytest.raises(InvalidPeerStateError):
            registry.register(Peer(address="ws://a:1"))
        assert registry.peer_count == 0

    def test_register_and_lookup(self, registry):
        """Test registration and lookup by address."""
        peer = open_peer("10.0.0.5:4000")
        registry.register(peer)
        assert registry.get_peer("10.0.0.5:4000") is peer
        assert registry.addresses() == ["10.0.0.5:4000"]
        assert registry.peers == [peer]

    def test_deregister(self, registry, peer):
        """Test deregistration removes the peer."""
        registry.deregister(peer)
        assert registry.peer_count == 0

    def test_deregister_ignores_unregistered_peer(self, registry, peer):
        """Test a peer that was never registered is a no-op to remove."""
        stale = open_peer(peer.address)
        registry.deregister(stale)
        assert registry.peers == [peer]

    @pytest.mark.asyncio
    async def test_two_connections_same_address(self, registry):
        """Test both connections to one address stay in the broadcast set."""
        first = open_peer("ws://localhost:6002")
        second = open_peer("ws://localhost:6002")
        registry.register(first)
        registry.register(second)

        assert registry.peer_count == 2
        assert registry.addresses() == ["ws://localhost:6002", "ws://localhost:6002"]
        assert await registry.broadcast(query_all_message()) == 2
        assert len(first.ws.sent) == 1
        assert len(second.ws.sent) == 1

        registry.deregister(first)
        assert registry.peers == [second]

    @pytest.mark.asyncio
    async def test_broadcast_reaches_all(self, registry):
        """Test broadcast writes to every open peer."""
        peers = [open_peer(f"10.0.0.{i}:5000") for i in range(3)]
        for p in peers:
            registry.register(p)

        assert await registry.broadcast(query_all_message()) == 3
        for p in peers:
            assert len(p.ws.sent) == 1

    @pytest.mark.asyncio
    async def test_broadcast_survives_failing_peer(self, registry):
        """Test one failing peer does not stop the others."""
        bad = open_peer("10.0.0.1:5000", fail=True)
        good = open_peer("10.0.0.2:5000")
        registry.register(bad)
        registry.register(good)

        assert await registry.broadcast(query_all_message()) == 1
        assert len(good.ws.sent) == 1

    @pytest.mark.asyncio
    async def test_disconnect_all(self, registry, peer):
        """Test all peers are closed and cleared."""
        await registry.disconnect_all()
        assert peer.ws.closed
        assert registry.peer_count == 0

    def test_to_dict(self, registry, peer):
        """Test registry export."""
        exported = registry.to_dict()
        assert exported[0]["address"] == peer.address
        assert exported[0]["state"] == "OPEN"
