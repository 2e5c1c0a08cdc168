"""
GossipChain Cryptographic Primitives
"""

from gossipchain.crypto.hash import calculate_hash, format_number, sha256_hex

__all__ = [
    "calculate_hash",
    "format_number",
    "sha256_hex",
]
