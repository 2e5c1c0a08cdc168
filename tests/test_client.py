"""
GossipChain HTTP Client Tests
"""

import pytest
from unittest.mock import AsyncMock, Mock

import httpx
from aiohttp import test_utils

from gossipchain.api.client import (
    NodeRequestError,
    add_peer,
    get_blocks,
    get_peers,
    get_status,
    mine_block,
)
from gossipchain.core.block import generate_next_block
from gossipchain.genesis.genesis import GENESIS_BLOCK
from gossipchain.node.config import NodeConfig
from gossipchain.node.node import Node


def mock_response(status_code: int, body) -> Mock:
    resp = Mock()
    resp.status_code = status_code
    resp.json.return_value = body
    return resp


# =============================================================================
# Test: Client Helpers (Mocked)
# =============================================================================

class TestClientMocked:
    """Tests for client helpers with a mocked httpx client."""

    @pytest.mark.asyncio
    async def test_get_blocks(self):
        """Test chain download parses blocks."""
        mock_client = AsyncMock()
        mock_client.get = AsyncMock(return_value=mock_response(200, [GENESIS_BLOCK.to_dict()]))

        blocks = await get_blocks(mock_client, "http://node:3001/")

        assert blocks == [GENESIS_BLOCK]
        mock_client.get.assert_awaited_once_with("http://node:3001/blocks", timeout=5.0)

    @pytest.mark.asyncio
    async def test_mine_block(self):
        """Test mining returns the new block."""
        block = generate_next_block(GENESIS_BLOCK, "hi", 1700000000)
        mock_client = AsyncMock()
        mock_client.post = AsyncMock(return_value=mock_response(200, block.to_dict()))

        assert await mine_block(mock_client, "http://node:3001", "hi") == block
        mock_client.post.assert_awaited_once_with(
            "http://node:3001/mineBlock", json={"data": "hi"}, timeout=5.0
        )

    @pytest.mark.asyncio
    async def test_mine_block_rejected(self):
        """Test a 409 surfaces as NodeRequestError with the error body."""
        error = {"code": 7007, "name": "BLOCK_REJECTED", "message": "Block 1 rejected"}
        mock_client = AsyncMock()
        mock_client.post = AsyncMock(return_value=mock_response(409, {"error": error}))

        with pytest.raises(NodeRequestError) as exc:
            await mine_block(mock_client, "http://node:3001", "hi")

        assert exc.value.status_code == 409
        assert exc.value.error == error

    @pytest.mark.asyncio
    async def test_error_without_json_body(self):
        """Test non-JSON error bodies still raise."""
        resp = Mock()
        resp.status_code = 500
        resp.json.side_effect = ValueError("no json")
        mock_client = AsyncMock()
        mock_client.get = AsyncMock(return_value=resp)

        with pytest.raises(NodeRequestError) as exc:
            await get_peers(mock_client, "http://node:3001")
        assert exc.value.error is None

    @pytest.mark.asyncio
    async def test_add_peer(self):
        """Test addPeer posts the peer address."""
        mock_client = AsyncMock()
        mock_client.post = AsyncMock(
            return_value=mock_response(200, {"ok": True, "peer": "ws://b:6001"})
        )

        result = await add_peer(mock_client, "http://node:3001", "b:6001")
        assert result["peer"] == "ws://b:6001"


# =============================================================================
# Test: Client Against a Live Server
# =============================================================================

class TestClientLive:
    """Tests for client helpers against a running control server."""

    @pytest.mark.asyncio
    async def test_mine_then_read(self):
        """Test mining through HTTP and reading the chain back."""
        node = Node(NodeConfig())
        server = test_utils.TestServer(node.api.build_app())
        await server.start_server()
        base_url = str(server.make_url(""))

        try:
            async with httpx.AsyncClient() as client:
                mined = await mine_block(client, base_url, "over http")
                chain = await get_blocks(client, base_url)
                peers = await get_peers(client, base_url)
                status = await get_status(client, base_url)
        finally:
            await server.close()

        assert chain == [GENESIS_BLOCK, mined]
        assert peers == []
        assert status["chain"]["length"] == 2
