"""
Merkle Tree and Commitments
Deterministic payout-tree construction + proof generation/verification.

This module provides:
- PayoutTree: Immutable tree over one campaign's payout entries
- generate_distribution: Build a tree plus every participant's proof
- verify_payout: Verify (address, amount, campaign_id, proof) against a root
- verify_proof: Verify a raw leaf hash against a root

Canonical Commitment Rules:
1. Leaf hashing: H(UTF8(address) || BE64(amount) || UTF8(campaign_id))
2. Parent hashing: H(min(a, b) || max(a, b))
3. Padding: An unpaired last node is paired with itself
4. Empty tree: EmptySetException
5. Single leaf: root = leaf

Usage:
    from task2earn.merkle import PayoutTree, verify_payout

    tree = PayoutTree(entries, campaign_id="c1")
    proof = tree.get_proof("addr_a")
    assert verify_payout("addr_a", 50_000_000, "c1", proof, tree.root)
"""
from .merkle_tree import (
    encode_amount,
    compute_leaf_hash,
    merkle_parent,
    build_layers,
    build_merkle_root,
    build_merkle_proof,
    reconstruct_root,
    verify_proof,
    verify_payout,
    compute_tree_depth,
    proof_length,
)

from .distribution import (
    Distribution,
    PayoutTree,
    ProofRecord,
    generate_distribution,
    sort_entries,
)


__all__ = [
    # Core functions
    "encode_amount",
    "compute_leaf_hash",
    "merkle_parent",
    "build_layers",
    "build_merkle_root",
    "build_merkle_proof",
    "reconstruct_root",
    "verify_proof",
    "verify_payout",
    "compute_tree_depth",
    "proof_length",
    # Trees and distributions
    "PayoutTree",
    "ProofRecord",
    "Distribution",
    "generate_distribution",
    "sort_entries",
]
