"""
GossipChain Validation Rules

Single-block and whole-chain validity checks.
"""

from __future__ import annotations
import logging
from typing import Sequence

from gossipchain.core.block import Block
from gossipchain.errors import (
    EmptyChainError,
    InvalidBlockHashError,
    InvalidGenesisError,
    InvalidIndexError,
    InvalidPreviousHashError,
)
from gossipchain.genesis.genesis import is_genesis_block

logger = logging.getLogger(__name__)


# ==============================================================================
# Block Validation
# ==============================================================================

def validate_new_block(candidate: Block, predecessor: Block) -> None:
    """
    Validate that ``candidate`` may follow ``predecessor``.

    Checks, in order:
    - Index contiguity
    - Hash linkage to the predecessor
    - Content hash integrity

    Raises:
        InvalidIndexError: Index is not predecessor.index + 1
        InvalidPreviousHashError: previous_hash is not predecessor.block_hash
        InvalidBlockHashError: Stored hash does not match contents
    """
    expected_index = predecessor.index + 1
    if candidate.index != expected_index:
        raise InvalidIndexError(candidate.index, expected_index)

    if candidate.previous_hash != predecessor.block_hash:
        raise InvalidPreviousHashError(predecessor.block_hash, candidate.previous_hash)

    computed = candidate.compute_hash()
    if computed != candidate.block_hash:
        raise InvalidBlockHashError(computed, candidate.block_hash)


def is_valid_new_block(candidate: Block, predecessor: Block) -> bool:
    """
    Check whether ``candidate`` may follow ``predecessor``.

    Logs which check failed; never raises.
    """
    try:
        validate_new_block(candidate, predecessor)
    except InvalidIndexError as e:
        logger.warning(f"Invalid index for block {candidate.index}: {e.message}")
        return False
    except InvalidPreviousHashError:
        logger.warning(f"Invalid previous hash for block {candidate.index}")
        return False
    except InvalidBlockHashError as e:
        logger.warning(
            f"Invalid hash for block {candidate.index}: "
            f"{e.details['got'][:16]} != {e.details['expected'][:16]}"
        )
        return False
    return True


# ==============================================================================
# Chain Validation
# ==============================================================================

def validate_chain(chain: Sequence[Block]) -> None:
    """
    Validate a whole candidate chain.

    The first block must equal the genesis constant and every later block
    must pass :func:`validate_new_block` against its predecessor. Stops at
    the first failure.

    Raises:
        EmptyChainError: No blocks
        InvalidGenesisError: First block is not genesis
        BlockValidationError: First per-block violation
    """
    if not chain:
        raise EmptyChainError()

    if not is_genesis_block(chain[0]):
        raise InvalidGenesisError(chain[0].block_hash)

    for i in range(1, len(chain)):
        validate_new_block(chain[i], chain[i - 1])


def is_valid_chain(chain: Sequence[Block]) -> bool:
    """Check whether ``chain`` is a valid chain. Logs the reason on failure."""
    if not chain:
        logger.warning("Received empty chain")
        return False

    if not is_genesis_block(chain[0]):
        logger.warning("Chain does not start with the genesis block")
        return False

    for i in range(1, len(chain)):
        if not is_valid_new_block(chain[i], chain[i - 1]):
            return False

    return True

