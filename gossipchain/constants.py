"""
GossipChain Constants

All protocol constants defined here for single source of truth.
"""

from typing import Final

# ==============================================================================
# GENESIS
# ==============================================================================

GENESIS_INDEX: Final[int] = 0
GENESIS_PREVIOUS_HASH: Final[str] = "0"            # Sentinel, no predecessor
GENESIS_TIMESTAMP: Final[int] = 1465154705
GENESIS_DATA: Final[str] = "my genesis block!!"
GENESIS_HASH: Final[str] = (
    "816534932c2b7154836da6afc367695e6337db8a921823784c14378abed4f7d7"
)

# ==============================================================================
# NETWORK
# ==============================================================================

DEFAULT_HTTP_PORT: Final[int] = 3001
DEFAULT_P2P_PORT: Final[int] = 6001
DEFAULT_BIND_HOST: Final[str] = "0.0.0.0"

PEER_URL_SCHEME: Final[str] = "ws"
P2P_WEBSOCKET_PATH: Final[str] = "/"
MAX_MESSAGE_SIZE: Final[int] = 100 * 1024 * 1024   # Full-chain replies of long chains

# ==============================================================================
# ENVIRONMENT
# ==============================================================================

ENV_HTTP_PORT: Final[str] = "HTTP_PORT"
ENV_P2P_PORT: Final[str] = "P2P_PORT"
ENV_PEERS: Final[str] = "PEERS"
ENV_LOG_LEVEL: Final[str] = "LOG_LEVEL"
