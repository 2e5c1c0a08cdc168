"""
GossipChain Hash Functions

SHA-256 content hash binding a block's fields.
"""

from __future__ import annotations
import hashlib
import math
from decimal import Decimal
from typing import Union

Number = Union[int, float]


def format_number(value: Number) -> str:
    """
    Render a number the way it is concatenated into the hash preimage.

    Floats follow the ECMAScript Number-to-String rules the rest of the
    network hashes with: shortest round-trip digits, integral values without
    ``.0`` (``1465154705.0`` hashes like ``1465154705``), plain notation for
    magnitudes in [1e-6, 1e21), exponent form such as ``1e-7`` or ``1e+21``
    outside it.

    Args:
        value: Integer or float field value

    Returns:
        str: Decimal representation
    """
    if not isinstance(value, float):
        return str(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    _, digit_tuple, exponent = Decimal(repr(abs(value))).normalize().as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    k = len(digits)
    n = k + exponent            # value == 0.digits * 10**n

    if k <= n <= 21:
        body = digits + "0" * (n - k)
    elif 0 < n <= 21:
        body = f"{digits[:n]}.{digits[n:]}"
    elif -6 < n <= 0:
        body = "0." + "0" * -n + digits
    else:
        mantissa = digits if k == 1 else f"{digits[0]}.{digits[1:]}"
        body = f"{mantissa}e{'+' if n - 1 >= 0 else '-'}{abs(n - 1)}"

    return sign + body


def sha256_hex(data: Union[bytes, bytearray, memoryview]) -> str:
    """SHA-256 hex digest."""
    return hashlib.sha256(data).hexdigest()


def calculate_hash(
    index: int,
    previous_hash: str,
    timestamp: Number,
    data: str
) -> str:
    """
    Compute the content hash of a block.

    Preimage is the plain concatenation
    ``index || previous_hash || timestamp || data``.

    Args:
        index: Block index
        previous_hash: Hash of the predecessor
        timestamp: Producer timestamp
        data: Opaque payload

    Returns:
        str: 64-character hex digest
    """
    preimage = f"{format_number(index)}{previous_hash}{format_number(timestamp)}{data}"
    return sha256_hex(preimage.encode("utf-8"))
