"""
GossipChain Node Configuration
"""

from __future__ import annotations
import json
import logging
import os
from dataclasses import dataclass, field, asdict
from typing import List, Optional

from dotenv import load_dotenv

from gossipchain.constants import (
    DEFAULT_BIND_HOST,
    DEFAULT_HTTP_PORT,
    DEFAULT_P2P_PORT,
    ENV_HTTP_PORT,
    ENV_LOG_LEVEL,
    ENV_P2P_PORT,
    ENV_PEERS,
)
from gossipchain.errors import InvalidConfigError

logger = logging.getLogger(__name__)


@dataclass
class NetworkConfig:
    """P2P network configuration."""
    p2p_host: str = DEFAULT_BIND_HOST
    p2p_port: int = DEFAULT_P2P_PORT
    initial_peers: List[str] = field(default_factory=list)


@dataclass
class APIConfig:
    """HTTP control server configuration."""
    host: str = DEFAULT_BIND_HOST
    port: int = DEFAULT_HTTP_PORT


@dataclass
class LogConfig:
    """Logging configuration."""
    level: str = "INFO"
    file: Optional[str] = None
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    max_size_mb: int = 100
    backup_count: int = 5


def parse_peer_list(value: Optional[str]) -> List[str]:
    """Split a comma-separated peer list, dropping blanks."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class NodeConfig:
    """
    Complete node configuration.

    Read once at startup; there is no reload.
    """
    name: str = "gossipchain-node"

    # Sub-configurations
    network: NetworkConfig = field(default_factory=NetworkConfig)
    api: APIConfig = field(default_factory=APIConfig)
    log: LogConfig = field(default_factory=LogConfig)

    def validate(self) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if not 0 <= self.network.p2p_port <= 65535:
            errors.append(f"Invalid P2P port: {self.network.p2p_port}")

        if not 0 <= self.api.port <= 65535:
            errors.append(f"Invalid HTTP port: {self.api.port}")

        if self.api.port and self.api.port == self.network.p2p_port:
            errors.append("HTTP and P2P ports must differ")

        if not isinstance(logging.getLevelName(self.log.level.upper()), int):
            errors.append(f"Unknown log level: {self.log.level}")

        return errors

    def ensure_valid(self) -> None:
        """Raise InvalidConfigError if :meth:`validate` reports anything."""
        errors = self.validate()
        if errors:
            raise InvalidConfigError(errors)

    def to_dict(self) -> dict:
        """Export configuration as dictionary."""
        return {
            "name": self.name,
            "network": asdict(self.network),
            "api": asdict(self.api),
            "log": asdict(self.log),
        }

    def save(self, path: str) -> None:
        """Save configuration to file."""
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

        logger.info(f"Configuration saved to {path}")

    @classmethod
    def load(cls, path: str) -> "NodeConfig":
        """Load configuration from file."""
        with open(path, 'r') as f:
            data = json.load(f)

        config = cls(name=data.get("name", "gossipchain-node"))

        if "network" in data:
            config.network = NetworkConfig(**data["network"])

        if "api" in data:
            config.api = APIConfig(**data["api"])

        if "log" in data:
            config.log = LogConfig(**data["log"])

        logger.info(f"Configuration loaded from {path}")
        return config

    @classmethod
    def from_env(cls, base: Optional["NodeConfig"] = None) -> "NodeConfig":
        """
        Load configuration from environment variables.

        A ``.env`` file in the working directory is read first; variables
        already set in the environment win.

        Args:
            base: Configuration to override (defaults to a fresh one)
        """
        load_dotenv()
        config = base or cls()

        if os.getenv(ENV_HTTP_PORT):
            config.api.port = _parse_port(ENV_HTTP_PORT, os.getenv(ENV_HTTP_PORT))
        if os.getenv(ENV_P2P_PORT):
            config.network.p2p_port = _parse_port(ENV_P2P_PORT, os.getenv(ENV_P2P_PORT))
        if os.getenv(ENV_PEERS):
            config.network.initial_peers = parse_peer_list(os.getenv(ENV_PEERS))
        if os.getenv(ENV_LOG_LEVEL):
            config.log.level = os.getenv(ENV_LOG_LEVEL)

        return config


def _parse_port(name: str, value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise InvalidConfigError([f"{name} must be an integer, got {value!r}"]) from None


def setup_logging(config: LogConfig) -> None:
    """Configure logging based on config."""
    level = getattr(logging, config.level.upper(), logging.INFO)

    handlers = [logging.StreamHandler()]

    if config.file:
        from logging.handlers import RotatingFileHandler
        file_handler = RotatingFileHandler(
            config.file,
            maxBytes=config.max_size_mb * 1024 * 1024,
            backupCount=config.backup_count,
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format=config.format,
        handlers=handlers,
    )
