"""
Cryptographic utilities.

Provides the 32-byte hash primitive and hex helpers used by the
commitment engine.
"""
from .hashing import (
    HASH_SIZE,
    blake2b_256,
    hash_bytes,
    hash_concat,
    hash_pair_sorted,
    to_hex,
    from_hex,
    is_hash,
)

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
