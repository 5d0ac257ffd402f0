"""
Merkle Tree Implementation
Deterministic payout-tree construction, proof generation, and verification.

This module provides:
- Leaf encoding for payout entries
- Layer-by-layer tree construction with self-duplication of odd nodes
- Proof extraction for any leaf index
- Proof folding against a root without access to the tree

Canonical Commitment Rules (Hard Contracts):
1. Leaf hashing: leaf = H(UTF8(address) || BE64(amount) || UTF8(campaign_id))
2. Parent hashing: parent = H(min(a, b) || max(a, b))  (byte-wise order)
3. Padding rule: an unpaired last node is paired with itself
4. Empty leaves: rejected with EmptySetException
5. Single leaf: root = leaf, proof is empty

H is BLAKE2b-256 (task2earn.crypto.hashing.blake2b_256).

Determinism Notes:
- Sorted-pair hashing makes parents independent of left/right position,
  so a proof is just the list of sibling hashes; no index is needed
- Leaf ordering is handled upstream (see distribution.sort_entries)
"""
from __future__ import annotations

from typing import Sequence

from task2earn.crypto.hashing import blake2b_256, hash_pair_sorted, is_hash
from task2earn.schemas.errors import EmptySetException
from task2earn.schemas.payout import MAX_AMOUNT


def encode_amount(amount: int) -> bytes:
    """
    Encode an amount as a fixed-width 8-byte big-endian integer.

    Raises:
        ValueError: If amount is not an int in [0, 2**64)
    """
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValueError(f"Amount must be an integer, got {type(amount).__name__}")
    if amount < 0 or amount > MAX_AMOUNT:
        raise ValueError(f"Amount {amount} does not fit in 8 unsigned bytes")
    return amount.to_bytes(8, "big")


def compute_leaf_hash(address: str, amount: int, campaign_id: str) -> bytes:
    """
    Compute the leaf hash of one payout entry.

    Args:
        address: Participant address
        amount: Payout amount in atomic units
        campaign_id: Campaign identifier (binds the leaf to one campaign)

    Returns:
        32-byte leaf hash

    Raises:
        ValueError: If amount cannot be framed in 8 bytes
    """
    return blake2b_256(
        address.encode("utf-8") + encode_amount(amount) + campaign_id.encode("utf-8")
    )


def merkle_parent(a: bytes, b: bytes) -> bytes:
    """Compute the parent of two nodes (position independent)."""
    return hash_pair_sorted(a, b)


def next_layer(layer: Sequence[bytes]) -> list[bytes]:
    """
    Build the parent layer of a layer.

    Pairs (0,1), (2,3), ...; an unpaired last node is paired with itself.
    Example: [a, b, c] -> [parent(a,b), parent(c,c)]
    """
    parents: list[bytes] = []
    for i in range(0, len(layer), 2):
        left = layer[i]
        right = layer[i + 1] if i + 1 < len(layer) else left
        parents.append(merkle_parent(left, right))
    return parents


def build_layers(leaves: Sequence[bytes]) -> list[list[bytes]]:
    """
    Build every layer of the tree, leaf layer first, root layer last.

    Args:
        leaves: Leaf hashes in committed order

    Returns:
        List of layers; layers[-1] == [root]

    Raises:
        EmptySetException: If leaves is empty
    """
    if len(leaves) == 0:
        raise EmptySetException("Cannot build tree with no leaves")

    layers: list[list[bytes]] = [list(leaves)]
    while len(layers[-1]) > 1:
        layers.append(next_layer(layers[-1]))
    return layers


def build_merkle_root(leaves: Sequence[bytes]) -> bytes:
    """Compute the root of a sequence of leaf hashes."""
    return build_layers(leaves)[-1][0]


def build_merkle_proof(layers: Sequence[Sequence[bytes]], index: int) -> list[bytes]:
    """
    Extract the proof for the leaf at the given index.

    Walks from the leaf upward; at each level the sibling is the node at
    index XOR 1, or the node itself when that sibling falls past the end
    of an odd-length layer.

    Args:
        layers: Tree layers as returned by build_layers()
        index: 0-based position of the leaf in layer 0

    Returns:
        Sibling hashes, leaf-level first (root-ward order)

    Raises:
        IndexError: If index is out of range
    """
    if index < 0 or index >= len(layers[0]):
        raise IndexError(
            f"Leaf index {index} out of range for {len(layers[0])} leaves"
        )

    siblings: list[bytes] = []
    current_index = index
    for layer in layers[:-1]:
        sibling_index = current_index ^ 1
        if sibling_index < len(layer):
            siblings.append(layer[sibling_index])
        else:
            siblings.append(layer[current_index])
        current_index //= 2
    return siblings


def reconstruct_root(leaf_hash: bytes, proof: Sequence[bytes]) -> bytes:
    """Fold a proof onto a leaf hash, left to right."""
    current = leaf_hash
    for sibling in proof:
        current = merkle_parent(current, sibling)
    return current


def verify_proof(leaf_hash: bytes, proof: Sequence[bytes], root: bytes) -> bool:
    """
    Verify that a leaf hash is committed under a root.

    Pure function of (leaf_hash, proof, root). Malformed input (any element
    not a 32-byte hash) yields False rather than an exception.

    Returns:
        True if folding the proof onto the leaf reproduces root byte-for-byte
    """
    if not is_hash(leaf_hash) or not is_hash(root):
        return False
    if isinstance(proof, (bytes, bytearray, str)):
        return False
    try:
        elements = list(proof)
    except TypeError:
        return False
    if not all(is_hash(element) for element in elements):
        return False

    return reconstruct_root(bytes(leaf_hash), [bytes(e) for e in elements]) == bytes(root)


def verify_payout(
    address: str,
    amount: int,
    campaign_id: str,
    proof: Sequence[bytes],
    root: bytes,
) -> bool:
    """
    Verify a payout entry against a committed root.

    Recomputes the leaf hash exactly as construction does, then verifies
    the proof. Out-of-range amounts and non-string identifiers fail
    verification instead of raising.
    """
    if not isinstance(address, str) or not isinstance(campaign_id, str):
        return False
    try:
        leaf_hash = compute_leaf_hash(address, amount, campaign_id)
    except ValueError:
        return False
    return verify_proof(leaf_hash, proof, root)


def compute_tree_depth(num_leaves: int) -> int:
    """
    Number of layers of a tree with the given number of leaves.

    A single leaf has depth 1, two leaves have depth 2, three have depth 3.
    Returns 0 for an empty tree.
    """
    if num_leaves <= 0:
        return 0
    return proof_length(num_leaves) + 1


def proof_length(num_leaves: int) -> int:
    """Proof length for a tree of num_leaves leaves: ceil(log2(n))."""
    if num_leaves <= 1:
        return 0
    return (num_leaves - 1).bit_length()


__all__ = [
    "encode_amount",
    "compute_leaf_hash",
    "merkle_parent",
    "next_layer",
    "build_layers",
    "build_merkle_root",
    "build_merkle_proof",
    "reconstruct_root",
    "verify_proof",
    "verify_payout",
    "compute_tree_depth",
    "proof_length",
]
