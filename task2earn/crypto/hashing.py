"""
Hashing Utilities
Hash primitive and byte/hex helpers for payout commitments.

This module provides:
- BLAKE2b-256 hashing for raw bytes
- Order-independent pair hashing for Merkle parents
- Hex encoding/decoding (bare lowercase hex, optional 0x prefix on input)

Security/Determinism Notes:
- Always hash raw bytes exactly as specified
- Pair hashing sorts its inputs byte-wise, so the parent does not depend
  on left/right position
- All operations are deterministic
"""
from __future__ import annotations

import hashlib

# Output width of the hash primitive in bytes
HASH_SIZE: int = 32


def blake2b_256(data: bytes) -> bytes:
    """
    Compute the 32-byte BLAKE2b digest of raw bytes.

    Args:
        data: Raw bytes to hash

    Returns:
        32-byte BLAKE2b digest

    Example:
        >>> len(blake2b_256(b"hello"))
        32
    """
    return hashlib.blake2b(data, digest_size=HASH_SIZE).digest()


def hash_bytes(data: bytes) -> bytes:
    """Alias for blake2b_256()."""
    return blake2b_256(data)


def hash_concat(left: bytes, right: bytes) -> bytes:
    """
    Hash the concatenation of two byte sequences.

    Args:
        left: First part
        right: Second part

    Returns:
        32-byte digest of left || right
    """
    return blake2b_256(left + right)


def hash_pair_sorted(a: bytes, b: bytes) -> bytes:
    """
    Hash two nodes after ordering them lexicographically (smaller first).

    hash_pair_sorted(a, b) == hash_pair_sorted(b, a) for all inputs.

    Args:
        a: One child hash
        b: The other child hash

    Returns:
        32-byte parent hash
    """
    if a <= b:
        return hash_concat(a, b)
    return hash_concat(b, a)


def to_hex(data: bytes) -> str:
    """
    Convert bytes to a lowercase hex string without prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        'deadbeef'
    """
    return data.hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert a hex string (bare or 0x-prefixed) to bytes.

    Args:
        hex_string: Hex string, optionally starting with 0x

    Returns:
        Decoded bytes

    Raises:
        ValueError: If the string has odd length or contains invalid
                    hex characters
    """
    hex_content = hex_string[2:] if hex_string.startswith(("0x", "0X")) else hex_string

    if len(hex_content) % 2 != 0:
        raise ValueError(
            f"Hex string must have even length, got length {len(hex_content)}"
        )

    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise ValueError(f"Invalid hex characters in string: {e}") from e


def is_hash(value: object) -> bool:
    """Check whether a value is a well-formed 32-byte hash."""
    return isinstance(value, (bytes, bytearray)) and len(value) == HASH_SIZE


__all__ = [
    "HASH_SIZE",
    "blake2b_256",
    "hash_bytes",
    "hash_concat",
    "hash_pair_sorted",
    "to_hex",
    "from_hex",
    "is_hash",
]
