"""
GossipChain Error Handling

All error codes and exception classes.
"""

from enum import IntEnum
from typing import Optional, Any


class ErrorCode(IntEnum):
    """Node error codes."""

    # 1xxx - General errors
    UNKNOWN_ERROR = 1000
    INVALID_PARAMETER = 1001
    INTERNAL_ERROR = 1002
    INVALID_CONFIG = 1003

    # 7xxx - Block and chain errors
    INVALID_INDEX = 7001
    INVALID_PREVIOUS_HASH = 7002
    INVALID_BLOCK_HASH = 7003
    INVALID_GENESIS = 7004
    EMPTY_CHAIN = 7005
    MALFORMED_BLOCK = 7006
    BLOCK_REJECTED = 7007

    # 8xxx - Network errors
    PEER_UNREACHABLE = 8001
    MALFORMED_MESSAGE = 8002
    UNKNOWN_MESSAGE_TYPE = 8003
    INVALID_PEER_STATE = 8004
    INVALID_PEER_ADDRESS = 8005


class GossipChainError(Exception):
    """Base exception for all node errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[Any] = None
    ):
        self.code = code
        self.message = message
        self.details = details
        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict for API responses."""
        result = {
            "code": self.code.value,
            "name": self.code.name,
            "message": self.message,
        }
        if self.details is not None:
            result["details"] = self.details
        return result


# ==============================================================================
# General Errors (1xxx)
# ==============================================================================

class InvalidParameterError(GossipChainError):
    def __init__(self, param: str, message: str = ""):
        msg = f"Invalid parameter: {param}"
        if message:
            msg += f" - {message}"
        super().__init__(ErrorCode.INVALID_PARAMETER, msg, {"parameter": param})


class InvalidConfigError(GossipChainError):
    def __init__(self, errors: list):
        super().__init__(
            ErrorCode.INVALID_CONFIG,
            f"Invalid configuration: {'; '.join(errors)}",
            {"errors": list(errors)}
        )


# ==============================================================================
# Block Errors (7xxx)
# ==============================================================================

class BlockValidationError(GossipChainError):
    """Base class for the per-block invariant violations."""


class InvalidIndexError(BlockValidationError):
    def __init__(self, index: int, expected: int):
        super().__init__(
            ErrorCode.INVALID_INDEX,
            f"Invalid block index: {index} (expected: {expected})",
            {"index": index, "expected": expected}
        )


class InvalidPreviousHashError(BlockValidationError):
    def __init__(self, expected: str, got: str):
        super().__init__(
            ErrorCode.INVALID_PREVIOUS_HASH,
            "Block previous hash does not link to predecessor",
            {"expected": expected, "got": got}
        )


class InvalidBlockHashError(BlockValidationError):
    def __init__(self, expected: str, got: str):
        super().__init__(
            ErrorCode.INVALID_BLOCK_HASH,
            "Block hash does not match its contents",
            {"expected": expected, "got": got}
        )


class InvalidGenesisError(BlockValidationError):
    def __init__(self, got_hash: str):
        super().__init__(
            ErrorCode.INVALID_GENESIS,
            "First block is not the genesis block",
            {"got": got_hash}
        )


class EmptyChainError(BlockValidationError):
    def __init__(self):
        super().__init__(ErrorCode.EMPTY_CHAIN, "Chain is empty")


class MalformedBlockError(GossipChainError):
    def __init__(self, reason: str):
        super().__init__(
            ErrorCode.MALFORMED_BLOCK,
            f"Malformed block: {reason}",
            {"reason": reason}
        )


class BlockRejectedError(GossipChainError):
    def __init__(self, index: int, reason: str):
        super().__init__(
            ErrorCode.BLOCK_REJECTED,
            f"Block {index} rejected: {reason}",
            {"index": index, "reason": reason}
        )


# ==============================================================================
# Network Errors (8xxx)
# ==============================================================================

class PeerUnreachableError(GossipChainError):
    def __init__(self, address: str, reason: str = ""):
        msg = f"Peer unreachable: {address}"
        if reason:
            msg += f" ({reason})"
        super().__init__(
            ErrorCode.PEER_UNREACHABLE,
            msg,
            {"address": address}
        )


class MalformedMessageError(GossipChainError):
    def __init__(self, reason: str, code: ErrorCode = ErrorCode.MALFORMED_MESSAGE):
        super().__init__(
            code,
            f"Malformed message: {reason}",
            {"reason": reason}
        )


class UnknownMessageTypeError(MalformedMessageError):
    def __init__(self, msg_type: Any):
        super().__init__(f"unknown message type {msg_type!r}", ErrorCode.UNKNOWN_MESSAGE_TYPE)


class InvalidPeerStateError(GossipChainError):
    def __init__(self, peer: str, current: str, target: str):
        super().__init__(
            ErrorCode.INVALID_PEER_STATE,
            f"Invalid state transition for {peer}: {current} -> {target}",
            {"peer": peer, "current": current, "target": target}
        )


class InvalidPeerAddressError(GossipChainError):
    def __init__(self, address: str, reason: str):
        super().__init__(
            ErrorCode.INVALID_PEER_ADDRESS,
            f"Invalid peer address {address!r}: {reason}",
            {"address": address, "reason": reason}
        )
