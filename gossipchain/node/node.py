"""
GossipChain Full Node
Main node orchestrator.
"""

from __future__ import annotations
import argparse
import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from gossipchain import __version__
from gossipchain.api.server import APIServer
from gossipchain.core.block import Block
from gossipchain.errors import InvalidConfigError
from gossipchain.genesis.genesis import verify_genesis
from gossipchain.network.gossip import GossipProtocol
from gossipchain.network.peer import PeerRegistry
from gossipchain.network.transport import P2PServer
from gossipchain.node.config import NodeConfig, parse_peer_list, setup_logging
from gossipchain.state.store import ChainStore

logger = logging.getLogger(__name__)


@dataclass
class NodeStatus:
    """Node status information."""
    started: bool = False
    start_time: float = 0.0
    blocks_mined: int = 0
    mining_rejections: int = 0


@dataclass
class Node:
    """
    GossipChain full node.

    Wires the chain store, peer registry, gossip protocol, P2P transport
    and HTTP control server together.
    """
    config: NodeConfig = field(default_factory=NodeConfig)

    # Core components
    store: ChainStore = field(default_factory=ChainStore)
    registry: PeerRegistry = field(default_factory=PeerRegistry)
    gossip: Optional[GossipProtocol] = None

    # Servers
    p2p: Optional[P2PServer] = None
    api: Optional[APIServer] = None

    # Status
    status: NodeStatus = field(default_factory=NodeStatus)

    def __post_init__(self):
        self.gossip = GossipProtocol(self.store, self.registry)
        self.p2p = P2PServer(
            self.gossip,
            host=self.config.network.p2p_host,
            port=self.config.network.p2p_port,
        )
        self.api = APIServer(self, host=self.config.api.host, port=self.config.api.port)
        self.status = NodeStatus()

    async def start(self) -> None:
        """
        Bind both servers and connect to the initial peers.

        Raises:
            OSError: A configured port cannot be bound
        """
        if self.status.started:
            return

        logger.info(f"Starting node: {self.config.name} (v{__version__})")

        await self.p2p.start()
        try:
            await self.api.start()
        except OSError:
            await self.p2p.stop()
            raise

        self.status.started = True
        self.status.start_time = time.time()

        if self.config.network.initial_peers:
            logger.info(f"Connecting to {len(self.config.network.initial_peers)} initial peers")
            self.p2p.connect_to_peers(self.config.network.initial_peers)

    async def stop(self) -> None:
        """Stop the node."""
        if not self.status.started:
            return

        logger.info("Stopping node...")
        await self.api.stop()
        await self.p2p.stop()
        self.status.started = False
        logger.info("Node stopped")

    # Public API methods

    async def mine_block(self, data: str) -> Block:
        """
        Mine a block with ``data`` and broadcast it.

        Raises:
            BlockRejectedError: Generated block failed validation
        """
        try:
            block = await self.store.mine(data)
        except Exception:
            self.status.mining_rejections += 1
            raise

        self.status.blocks_mined += 1
        logger.info(f"Block added: {block.to_dict()}")
        await self.gossip.broadcast_latest()
        return block

    def add_peer(self, address: str) -> None:
        """Start an outbound connection to ``address`` in the background."""
        self.p2p.connect_to_peers([address])

    def get_status(self) -> dict:
        """Get node status."""
        uptime = int(time.time() - self.status.start_time) if self.status.started else 0
        return {
            "name": self.config.name,
            "version": __version__,
            "started": self.status.started,
            "uptime_seconds": uptime,
            "chain": self.store.to_dict(),
            "peers": self.registry.to_dict(),
            "blocks_mined": self.status.blocks_mined,
            "mining_rejections": self.status.mining_rejections,
            "gossip": self.gossip.get_statistics(),
        }


def build_config(args: argparse.Namespace) -> NodeConfig:
    """Config file (if any), then environment, then command-line flags."""
    config = NodeConfig.load(args.config) if args.config else None
    config = NodeConfig.from_env(config)

    if args.http_port is not None:
        config.api.port = args.http_port
    if args.p2p_port is not None:
        config.network.p2p_port = args.p2p_port
    if args.peers is not None:
        config.network.initial_peers = parse_peer_list(args.peers)
    if args.log_level is not None:
        config.log.level = args.log_level

    config.ensure_valid()
    return config


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="GossipChain Node")
    parser.add_argument("--config", "-c", type=str, help="Path to JSON config file")
    parser.add_argument("--http-port", type=int, help="HTTP control port (default: 3001)")
    parser.add_argument("--p2p-port", type=int, help="P2P WebSocket port (default: 6001)")
    parser.add_argument("--peers", type=str, help="Comma-separated initial peers")
    parser.add_argument("--log-level", type=str, help="Log level")
    return parser.parse_args(argv)


async def run_node(config: NodeConfig) -> None:
    """Run a node until cancelled."""
    node = Node(config)
    await node.start()
    try:
        await asyncio.Event().wait()
    finally:
        await node.stop()


def main(argv: Optional[List[Any]] = None) -> int:
    args = parse_args(argv)

    try:
        config = build_config(args)
    except InvalidConfigError as e:
        logging.basicConfig(level=logging.ERROR)
        logger.error(e.message)
        return 2

    setup_logging(config.log)

    if not verify_genesis():
        return 1

    try:
        asyncio.run(run_node(config))
    except KeyboardInterrupt:
        logger.info("Interrupted")
    except OSError as e:
        logger.error(f"Cannot bind configured ports: {e}")
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
