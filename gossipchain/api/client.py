"""
GossipChain HTTP Client

Async helpers for calling a node's control endpoints.
"""

from __future__ import annotations
import logging
from typing import Any, List, Optional

import httpx

from gossipchain.core.block import Block, blocks_from_dicts

logger = logging.getLogger(__name__)


class NodeRequestError(Exception):
    """A control endpoint answered with a non-2xx status."""

    def __init__(self, url: str, status_code: int, error: Optional[dict] = None):
        self.url = url
        self.status_code = status_code
        self.error = error
        message = f"HTTP {status_code} calling {url}"
        if error:
            message += f": {error.get('message', error)}"
        super().__init__(message)


def _join_url(base_url: str, path: str) -> str:
    return f"{base_url.rstrip('/')}{path}"


def _check(resp: Any, url: str) -> Any:
    if resp.status_code // 100 != 2:
        error = None
        try:
            error = resp.json().get("error")
        except (ValueError, AttributeError):
            pass
        raise NodeRequestError(url, resp.status_code, error)
    return resp.json()


async def get_blocks(client: httpx.AsyncClient, base_url: str, timeout: float = 5.0) -> List[Block]:
    """Fetch a node's whole chain."""
    url = _join_url(base_url, "/blocks")
    resp = await client.get(url, timeout=timeout)
    return blocks_from_dicts(_check(resp, url))


async def mine_block(
    client: httpx.AsyncClient,
    base_url: str,
    data: str,
    timeout: float = 5.0
) -> Block:
    """
    Ask a node to mine a block.

    Raises:
        NodeRequestError: Node rejected the request (409 if the block was
            rejected by validation)
    """
    url = _join_url(base_url, "/mineBlock")
    resp = await client.post(url, json={"data": data}, timeout=timeout)
    return Block.from_dict(_check(resp, url))


async def get_peers(client: httpx.AsyncClient, base_url: str, timeout: float = 5.0) -> List[str]:
    """List a node's connected peers."""
    url = _join_url(base_url, "/peers")
    resp = await client.get(url, timeout=timeout)
    return list(_check(resp, url))


async def add_peer(
    client: httpx.AsyncClient,
    base_url: str,
    peer: str,
    timeout: float = 5.0
) -> dict:
    """Ask a node to connect to ``peer``."""
    url = _join_url(base_url, "/addPeer")
    resp = await client.post(url, json={"peer": peer}, timeout=timeout)
    return _check(resp, url)


async def get_status(client: httpx.AsyncClient, base_url: str, timeout: float = 5.0) -> dict:
    """Fetch a node's status."""
    url = _join_url(base_url, "/status")
    resp = await client.get(url, timeout=timeout)
    return _check(resp, url)
