"""
GossipChain Fork Choice Rule

Chain selection by length among already-validated chains.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from gossipchain.consensus.validation import is_valid_chain
from gossipchain.core.block import Block

logger = logging.getLogger(__name__)


@dataclass
class ForkChoiceRule:
    """
    Longest-valid-chain rule.

    A candidate wins only if it is valid and strictly longer than the
    current chain. Equal length keeps the current chain.
    """
    replacements: int = 0
    rejections: int = 0

    def should_replace(self, candidate: Sequence[Block], current_length: int) -> bool:
        """
        Decide whether ``candidate`` replaces a chain of ``current_length``.

        Args:
            candidate: Proposed full chain
            current_length: Length of the canonical chain

        Returns:
            True if the candidate is valid and longer
        """
        if len(candidate) <= current_length:
            logger.info(
                f"Candidate chain not longer than ours "
                f"({len(candidate)} <= {current_length})"
            )
            self.rejections += 1
            return False

        if not is_valid_chain(candidate):
            logger.warning("Received blockchain invalid")
            self.rejections += 1
            return False

        self.replacements += 1
        return True

    def select(
        self,
        candidate: Sequence[Block],
        current: Sequence[Block]
    ) -> Optional[Sequence[Block]]:
        """
        Select the winning chain.

        Returns:
            ``candidate`` if it should replace ``current``, else None
        """
        if self.should_replace(candidate, len(current)):
            return candidate
        return None

    def get_statistics(self) -> dict:
        """Get fork choice statistics."""
        return {
            "replacements": self.replacements,
            "rejections": self.rejections,
        }
