"""
GossipChain Chain Store

Sole owner of the canonical chain.
"""

from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

from gossipchain.consensus.fork_choice import ForkChoiceRule
from gossipchain.consensus.validation import is_valid_new_block
from gossipchain.core.block import Block, generate_next_block
from gossipchain.errors import BlockRejectedError
from gossipchain.genesis.genesis import GENESIS_BLOCK

logger = logging.getLogger(__name__)


@dataclass
class ChainStore:
    """
    Canonical chain holder.

    The chain only changes through :meth:`try_append`, :meth:`try_replace`
    and :meth:`mine`, each of which checks and mutates under one lock so a
    concurrent append and replace can never interleave. Readers get tuples,
    never the underlying list.
    """
    fork_choice: ForkChoiceRule = field(default_factory=ForkChoiceRule)

    _chain: List[Block] = field(default_factory=list)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    def __post_init__(self):
        self._chain = [GENESIS_BLOCK]
        self._lock = asyncio.Lock()

    # Read accessors

    def tip(self) -> Block:
        """Get the last block of the canonical chain."""
        return self._chain[-1]

    def all(self) -> Tuple[Block, ...]:
        """Get the full canonical chain in order."""
        return tuple(self._chain)

    @property
    def length(self) -> int:
        """Number of blocks in the canonical chain."""
        return len(self._chain)

    # Mutations

    async def try_append(self, block: Block) -> Optional[Block]:
        """
        Append ``block`` at the tip if it validly extends it.

        Args:
            block: Candidate next block

        Returns:
            The new tip, or None if the block was rejected
        """
        async with self._lock:
            return self._append_unlocked(block)

    async def try_replace(self, candidate: Sequence[Block]) -> bool:
        """
        Swap in ``candidate`` if it is valid and strictly longer.

        Args:
            candidate: Proposed full chain, genesis first

        Returns:
            True if the canonical chain was replaced
        """
        async with self._lock:
            winner = self.fork_choice.select(candidate, self._chain)
            if winner is None:
                return False

            self._chain = list(winner)
            logger.info(
                f"Replaced chain: new length {len(self._chain)}, "
                f"tip {self._chain[-1].block_hash[:16]}"
            )
            return True

    async def mine(
        self,
        data: str,
        timestamp: Optional[Union[int, float]] = None
    ) -> Block:
        """
        Build the next block on the current tip and append it.

        The tip is read and extended under the same lock, so the new block
        always links to the block it was built from.

        Args:
            data: Block payload
            timestamp: Block time (defaults to now)

        Returns:
            The appended block

        Raises:
            BlockRejectedError: Generated block failed validation
        """
        async with self._lock:
            block = generate_next_block(self._chain[-1], data, timestamp)
            if self._append_unlocked(block) is None:
                raise BlockRejectedError(block.index, "failed validation against tip")
            return block

    def _append_unlocked(self, block: Block) -> Optional[Block]:
        if not is_valid_new_block(block, self._chain[-1]):
            return None

        self._chain.append(block)
        logger.info(f"Appended block {block.index} ({block.block_hash[:16]})")
        return block

    def to_dict(self) -> dict:
        """Export chain summary."""
        tip = self.tip()
        return {
            "length": self.length,
            "tip_index": tip.index,
            "tip_hash": tip.block_hash,
            "fork_choice": self.fork_choice.get_statistics(),
        }
