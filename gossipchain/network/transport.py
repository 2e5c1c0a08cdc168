"""
GossipChain P2P Transport

WebSocket server and outbound connections carrying gossip frames.
"""

from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Set

import aiohttp
from aiohttp import web

from gossipchain.constants import (
    DEFAULT_BIND_HOST,
    DEFAULT_P2P_PORT,
    MAX_MESSAGE_SIZE,
    P2P_WEBSOCKET_PATH,
)
from gossipchain.errors import InvalidPeerAddressError, PeerUnreachableError
from gossipchain.network.gossip import GossipProtocol
from gossipchain.network.peer import Peer, normalize_peer_address

logger = logging.getLogger(__name__)


@dataclass
class P2PServer:
    """
    Peer-to-peer WebSocket endpoint.

    Accepts inbound connections on ``host:port`` and opens outbound ones on
    request. Each connection runs its own read loop, so frames from one peer
    are handled in arrival order while different peers proceed
    independently.
    """
    gossip: GossipProtocol
    host: str = DEFAULT_BIND_HOST
    port: int = DEFAULT_P2P_PORT

    _runner: Optional[web.AppRunner] = None
    _site: Optional[web.TCPSite] = None
    _session: Optional[aiohttp.ClientSession] = None
    _tasks: Set[asyncio.Task] = field(default_factory=set)
    _running: bool = False

    def __post_init__(self):
        self._tasks = set()

    def build_app(self) -> web.Application:
        """Create the aiohttp application serving the WebSocket route."""
        app = web.Application()
        app.router.add_get(P2P_WEBSOCKET_PATH, self._handle_websocket)
        return app

    async def start(self) -> None:
        """
        Bind the P2P port.

        Raises:
            OSError: Port cannot be bound
        """
        self._runner = web.AppRunner(self.build_app())
        await self._runner.setup()

        self._site = web.TCPSite(self._runner, self.host, self.port)
        await self._site.start()

        self._running = True
        logger.info(f"Listening websocket p2p port on: {self.port}")

    async def stop(self) -> None:
        """Close all peers and the listening socket."""
        self._running = False

        await self.gossip.registry.disconnect_all()

        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

        if self._session is not None:
            await self._session.close()
            self._session = None

        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None

        logger.info("P2P server stopped")

    # Inbound

    async def _handle_websocket(self, request: web.Request) -> web.WebSocketResponse:
        """Handle an inbound peer connection."""
        ws = web.WebSocketResponse(max_msg_size=MAX_MESSAGE_SIZE)
        await ws.prepare(request)

        peer = Peer(address=_remote_address(request), ws=ws, inbound=True)
        await self.run_connection(peer, ws)
        return ws

    # Outbound

    async def connect(self, address: str) -> Peer:
        """
        Open an outbound connection to ``address``.

        Returns:
            The connected peer; its read loop runs in the background

        Raises:
            InvalidPeerAddressError: Address cannot be normalized
            PeerUnreachableError: WebSocket handshake failed
        """
        url = normalize_peer_address(address)
        peer = Peer(address=url, inbound=False)

        if self._session is None:
            self._session = aiohttp.ClientSession()

        try:
            ws = await self._session.ws_connect(url, max_msg_size=MAX_MESSAGE_SIZE)
        except (aiohttp.ClientError, OSError) as e:
            self.gossip.close_peer(peer)
            raise PeerUnreachableError(url, str(e)) from e

        peer.ws = ws
        self._spawn(self.run_connection(peer, ws))
        return peer

    def connect_to_peers(self, addresses: Iterable[str]) -> None:
        """Start outbound connections in the background."""
        for address in addresses:
            self._spawn(self._connect_logged(address))

    async def _connect_logged(self, address: str) -> None:
        try:
            await self.connect(address)
        except (InvalidPeerAddressError, PeerUnreachableError) as e:
            logger.warning(f"Connection failed: {e.message}")

    # Connection lifecycle

    async def run_connection(self, peer: Peer, ws: Any) -> None:
        """
        Drive one connection from OPEN to CLOSED.

        Args:
            peer: Peer in CONNECTING state
            ws: Established aiohttp WebSocket (server or client side)
        """
        try:
            await self.gossip.open_peer(peer)

            async for msg in ws:
                if msg.type in (aiohttp.WSMsgType.TEXT, aiohttp.WSMsgType.BINARY):
                    await self.gossip.handle_message(peer, msg.data)
                elif msg.type == aiohttp.WSMsgType.ERROR:
                    logger.warning(f"Connection error from peer {peer.address}: {ws.exception()}")
                    break
        finally:
            self.gossip.close_peer(peer)
            if not ws.closed:
                await ws.close()

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task


def _remote_address(request: web.Request) -> str:
    peername = request.transport.get_extra_info("peername") if request.transport else None
    if peername:
        return f"{peername[0]}:{peername[1]}"
    return request.remote or "unknown"
