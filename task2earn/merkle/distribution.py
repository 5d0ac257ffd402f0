"""
Payout Distribution Trees
Class-based interface over the functional Merkle engine.

This module provides:
- PayoutTree: an immutable tree built from payout entries for one campaign
- Distribution: a tree plus the proof set handed to participants
- generate_distribution: build both in one call

A PayoutTree is built once, off the claim path, and never mutated.
Claim-time verification only needs verify_payout() and the committed root.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Sequence

from task2earn.crypto.hashing import from_hex, to_hex
from task2earn.merkle.merkle_tree import (
    build_layers,
    build_merkle_proof,
    compute_leaf_hash,
    verify_payout,
)
from task2earn.schemas.canonical import dumps_canonical, loads_canonical
from task2earn.schemas.errors import (
    EmptySetException,
    MerkleVerificationException,
    NotFoundException,
)
from task2earn.schemas.payout import Leaf, LeafExport, PayoutEntry, TreeExport

logger = logging.getLogger(__name__)


EntryLike = PayoutEntry | Mapping[str, Any]


def sort_entries(entries: Iterable[EntryLike]) -> list[PayoutEntry]:
    """
    Sort entries into committed order.

    Order is byte-wise on the UTF-8 address, then by amount, so that the
    result never depends on the caller's ordering or the platform locale.
    """
    coerced = [
        entry if isinstance(entry, PayoutEntry) else PayoutEntry.model_validate(entry)
        for entry in entries
    ]
    return sorted(coerced, key=lambda e: (e.address.encode("utf-8"), e.amount))


@dataclass(frozen=True)
class ProofRecord:
    """Proof material for one participant."""

    amount: int
    proof: list[bytes]

    @property
    def proof_hex(self) -> list[str]:
        return [to_hex(p) for p in self.proof]


class PayoutTree:
    """
    Merkle tree committing a set of payouts for one campaign.

    Example:
        >>> tree = PayoutTree([PayoutEntry(address="A", amount=5)], "c1")
        >>> tree.verify("A", 5, tree.get_proof("A"))
        True
    """

    def __init__(self, entries: Iterable[EntryLike], campaign_id: str) -> None:
        sorted_entries = sort_entries(entries)
        if not sorted_entries:
            raise EmptySetException(
                "Cannot build tree with no payout entries",
                details={"campaign_id": campaign_id},
            )

        self._campaign_id = campaign_id
        self._leaves: tuple[Leaf, ...] = tuple(
            Leaf(
                address=entry.address,
                amount=entry.amount,
                hash=compute_leaf_hash(entry.address, entry.amount, campaign_id),
                index=index,
            )
            for index, entry in enumerate(sorted_entries)
        )
        layers = build_layers([leaf.hash for leaf in self._leaves])
        self._layers: tuple[tuple[bytes, ...], ...] = tuple(tuple(layer) for layer in layers)

        # First leaf wins for duplicated addresses
        self._index_by_address: dict[str, int] = {}
        for leaf in self._leaves:
            self._index_by_address.setdefault(leaf.address, leaf.index)

        logger.debug(
            f"Built payout tree for campaign {campaign_id!r}: "
            f"{len(self._leaves)} leaves, {len(self._layers)} layers, root {self.root_hex}"
        )

    @property
    def campaign_id(self) -> str:
        return self._campaign_id

    @property
    def root(self) -> bytes:
        """The 32-byte Merkle root."""
        return self._layers[-1][0]

    @property
    def root_hex(self) -> str:
        return to_hex(self.root)

    @property
    def leaves(self) -> tuple[Leaf, ...]:
        return self._leaves

    @property
    def layers(self) -> tuple[tuple[bytes, ...], ...]:
        return self._layers

    def __len__(self) -> int:
        return len(self._leaves)

    def __contains__(self, address: object) -> bool:
        return address in self._index_by_address

    def get_leaf(self, address: str) -> Leaf | None:
        index = self._index_by_address.get(address)
        return None if index is None else self._leaves[index]

    def get_proof(self, address: str) -> list[bytes] | None:
        """
        Get the inclusion proof for an address.

        Returns:
            Sibling hashes in root-ward order, or None if the address is
            not in the tree
        """
        index = self._index_by_address.get(address)
        if index is None:
            return None
        return build_merkle_proof(self._layers, index)

    def require_proof(self, address: str) -> list[bytes]:
        """
        Get the inclusion proof for an address.

        Raises:
            NotFoundException: If the address is not in the tree
        """
        proof = self.get_proof(address)
        if proof is None:
            raise NotFoundException(
                f"Address {address!r} is not part of this distribution",
                address=address,
                details={"campaign_id": self._campaign_id},
            )
        return proof

    def verify(self, address: str, amount: int, proof: Sequence[bytes]) -> bool:
        """Verify a payout against this tree's root and campaign id."""
        return verify_payout(address, amount, self._campaign_id, proof, self.root)

    def get_all_proofs(self) -> dict[str, ProofRecord]:
        """Proof material for every participant, keyed by address."""
        return {
            address: ProofRecord(
                amount=self._leaves[index].amount,
                proof=build_merkle_proof(self._layers, index),
            )
            for address, index in self._index_by_address.items()
        }

    # -------------------------------------------------------------------------
    # Export / rebuild
    # -------------------------------------------------------------------------

    def to_export(self) -> TreeExport:
        """Export the tree in its persisted form."""
        return TreeExport(
            root=self.root_hex,
            leaves=[
                LeafExport(
                    address=leaf.address,
                    amount=str(leaf.amount),
                    hash=to_hex(leaf.hash),
                    index=leaf.index,
                )
                for leaf in self._leaves
            ],
            layers=[[to_hex(h) for h in layer] for layer in self._layers],
        )

    def to_json(self) -> str:
        """Export the tree as canonical JSON."""
        return dumps_canonical(self.to_export())

    @classmethod
    def from_export(cls, export: TreeExport | Mapping[str, Any], campaign_id: str) -> "PayoutTree":
        """
        Rebuild a tree from its exported form.

        Leaf hashes are re-derived from (address, amount, campaign_id) and
        the layers recomputed, then compared with the export.

        Raises:
            MerkleVerificationException: If any exported hash, layer, or the
                root disagrees with the recomputation
        """
        if not isinstance(export, TreeExport):
            export = TreeExport.model_validate(export)

        ordered = sorted(export.leaves, key=lambda leaf: leaf.index)
        if [leaf.index for leaf in ordered] != list(range(len(ordered))):
            raise MerkleVerificationException(
                "Exported leaf indices are not a contiguous 0-based sequence",
                details={"indices": [leaf.index for leaf in export.leaves]},
            )

        tree = cls(
            [PayoutEntry(address=leaf.address, amount=int(leaf.amount)) for leaf in ordered],
            campaign_id,
        )

        for exported, rebuilt in zip(ordered, tree.leaves):
            if exported.address != rebuilt.address or int(exported.amount) != rebuilt.amount:
                raise MerkleVerificationException(
                    "Exported leaves are not in committed order",
                    leaf_index=exported.index,
                )
            if from_hex(exported.hash) != rebuilt.hash:
                raise MerkleVerificationException(
                    f"Leaf hash mismatch for {exported.address!r}",
                    leaf_index=exported.index,
                    details={"expected": exported.hash, "actual": to_hex(rebuilt.hash)},
                )

        rebuilt_layers = [[to_hex(h) for h in layer] for layer in tree.layers]
        if rebuilt_layers != export.layers:
            raise MerkleVerificationException(
                "Exported layers do not match the recomputed tree",
            )
        if tree.root_hex != export.root:
            raise MerkleVerificationException(
                "Root mismatch",
                details={"expected": export.root, "actual": tree.root_hex},
            )
        return tree

    @classmethod
    def from_json(cls, text: str, campaign_id: str) -> "PayoutTree":
        """Rebuild a tree from the output of to_json()."""
        return cls.from_export(TreeExport.model_validate(loads_canonical(text)), campaign_id)

    def __repr__(self) -> str:
        return (
            f"PayoutTree(campaign_id={self._campaign_id!r}, "
            f"leaves={len(self._leaves)}, root={self.root_hex[:16]}...)"
        )


@dataclass(frozen=True)
class Distribution:
    """A built tree with the proof set for its participants."""

    tree: PayoutTree
    root_hex: str
    proofs: dict[str, ProofRecord] = field(default_factory=dict)


def generate_distribution(entries: Iterable[EntryLike], campaign_id: str) -> Distribution:
    """
    Build a payout tree and the proof set for every participant.

    Raises:
        EmptySetException: If entries is empty
    """
    tree = PayoutTree(entries, campaign_id)
    logger.info(
        f"Generated distribution for campaign {campaign_id!r}: "
        f"{len(tree)} participants, root {tree.root_hex}"
    )
    return Distribution(tree=tree, root_hex=tree.root_hex, proofs=tree.get_all_proofs())


__all__ = [
    "EntryLike",
    "sort_entries",
    "ProofRecord",
    "PayoutTree",
    "Distribution",
    "generate_distribution",
]
