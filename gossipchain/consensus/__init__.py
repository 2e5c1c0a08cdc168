"""
GossipChain Consensus
Validation and fork choice.
"""

from gossipchain.consensus.validation import (
    validate_new_block,
    is_valid_new_block,
    validate_chain,
    is_valid_chain,
)
from gossipchain.consensus.fork_choice import ForkChoiceRule

__all__ = [
    "validate_new_block",
    "is_valid_new_block",
    "validate_chain",
    "is_valid_chain",
    "ForkChoiceRule",
]
