"""
GossipChain HTTP Control Server

Operator endpoints for reading the chain, mining, and managing peers.
"""

from __future__ import annotations
import json
import logging
from dataclasses import dataclass
from typing import Any, Optional, TYPE_CHECKING

from aiohttp import web

from gossipchain.constants import DEFAULT_BIND_HOST, DEFAULT_HTTP_PORT
from gossipchain.core.block import blocks_to_dicts
from gossipchain.errors import (
    BlockRejectedError,
    GossipChainError,
    InvalidParameterError,
    InvalidPeerAddressError,
)
from gossipchain.network.peer import normalize_peer_address

if TYPE_CHECKING:
    from gossipchain.node.node import Node

logger = logging.getLogger(__name__)


def error_response(error: GossipChainError, status: int) -> web.Response:
    """JSON error body for a node error."""
    return web.json_response({"error": error.to_dict()}, status=status)


async def _read_json(request: web.Request) -> dict:
    try:
        body = await request.text()
        data = json.loads(body) if body else {}
    except json.JSONDecodeError as e:
        raise InvalidParameterError("body", f"invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise InvalidParameterError("body", "must be a JSON object")
    return data


@dataclass
class APIServer:
    """
    HTTP control server.

    Thin request/response wrappers around the node; all chain logic lives
    in the node's store and gossip protocol.
    """
    node: "Node"
    host: str = DEFAULT_BIND_HOST
    port: int = DEFAULT_HTTP_PORT

    _runner: Optional[web.AppRunner] = None
    _site: Optional[web.TCPSite] = None
    _running: bool = False

    def build_app(self) -> web.Application:
        """Create the aiohttp application with all routes."""
        app = web.Application()

        app.router.add_get("/blocks", self._handle_blocks)
        app.router.add_post("/mineBlock", self._handle_mine_block)
        app.router.add_get("/peers", self._handle_peers)
        app.router.add_post("/addPeer", self._handle_add_peer)
        app.router.add_get("/health", self._handle_health)
        app.router.add_get("/status", self._handle_status)

        return app

    async def start(self) -> None:
        """
        Start the API server.

        Raises:
            OSError: Port cannot be bound
        """
        self._runner = web.AppRunner(self.build_app())
        await self._runner.setup()

        self._site = web.TCPSite(self._runner, self.host, self.port)
        await self._site.start()

        self._running = True
        logger.info(f"Listening http on port: {self.port}")

    async def stop(self) -> None:
        """Stop the API server."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            self._running = False
            logger.info("API server stopped")

    async def _handle_blocks(self, request: web.Request) -> web.Response:
        """GET /blocks"""
        return web.json_response(blocks_to_dicts(self.node.store.all()))

    async def _handle_mine_block(self, request: web.Request) -> web.Response:
        """POST /mineBlock {data: string}"""
        try:
            body = await _read_json(request)
            data = body.get("data")
            if not isinstance(data, str):
                raise InvalidParameterError("data", "must be a string")
        except InvalidParameterError as e:
            return error_response(e, 400)

        try:
            block = await self.node.mine_block(data)
        except BlockRejectedError as e:
            logger.warning(f"Mining rejected: {e.message}")
            return error_response(e, 409)

        return web.json_response(block.to_dict())

    async def _handle_peers(self, request: web.Request) -> web.Response:
        """GET /peers"""
        return web.json_response(self.node.registry.addresses())

    async def _handle_add_peer(self, request: web.Request) -> web.Response:
        """POST /addPeer {peer: string}"""
        try:
            body = await _read_json(request)
            peer = body.get("peer")
            if not isinstance(peer, str):
                raise InvalidParameterError("peer", "must be a string")
            url = normalize_peer_address(peer)
        except (InvalidParameterError, InvalidPeerAddressError) as e:
            return error_response(e, 400)

        self.node.add_peer(url)
        return web.json_response({"ok": True, "peer": url})

    async def _handle_health(self, request: web.Request) -> web.Response:
        """GET /health"""
        return web.json_response({
            "status": "ok",
            "height": self.node.store.tip().index,
            "peers": self.node.registry.peer_count,
        })

    async def _handle_status(self, request: web.Request) -> Any:
        """GET /status"""
        return web.json_response(self.node.get_status())
