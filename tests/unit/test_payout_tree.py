"""
Payout Tree Unit Tests
Tests for task2earn/merkle/distribution.py

1. Order independence - any input permutation gives the same root
2. Every leaf verifies for trees of 1..5 leaves (self-duplication)
3. Tamper sensitivity - address, amount, campaign id, any proof byte
4. Export round trip - rebuild reproduces root and proofs
"""
import itertools
import json
import random

import pytest
from pydantic import ValidationError

from task2earn.crypto.hashing import to_hex
from task2earn.merkle import (
    PayoutTree,
    generate_distribution,
    proof_length,
    sort_entries,
    verify_payout,
)
from task2earn.schemas.errors import EmptySetException, MerkleVerificationException, NotFoundException
from task2earn.schemas.payout import PayoutEntry, TreeExport

from fixtures import ADDR_A, ADDR_B, ADDR_C, CAMPAIGN_ID, make_payout_entries


class TestConstruction:
    def test_empty_entries_raise(self):
        with pytest.raises(EmptySetException):
            PayoutTree([], CAMPAIGN_ID)

    def test_leaves_sorted_by_address_bytes(self):
        entries = [
            PayoutEntry(address="b", amount=1),
            PayoutEntry(address="B", amount=1),
            PayoutEntry(address="a", amount=1),
        ]
        tree = PayoutTree(entries, CAMPAIGN_ID)

        # Byte order puts upper case first, unlike a locale comparison
        assert [leaf.address for leaf in tree.leaves] == ["B", "a", "b"]
        assert [leaf.index for leaf in tree.leaves] == [0, 1, 2]

    def test_accepts_plain_mappings(self):
        tree = PayoutTree([{"address": "x", "amount": 5}], CAMPAIGN_ID)

        assert tree.get_leaf("x").amount == 5

    def test_invalid_entry_rejected(self):
        with pytest.raises(ValidationError):
            PayoutTree([{"address": "x", "amount": -5}], CAMPAIGN_ID)

    def test_root_is_last_layer(self, payout_tree):
        assert payout_tree.root == payout_tree.layers[-1][0]
        assert len(payout_tree.root) == 32
        assert payout_tree.root_hex == payout_tree.root.hex()

    def test_contains_and_len(self, payout_tree):
        assert len(payout_tree) == 3
        assert ADDR_A in payout_tree
        assert "nobody" not in payout_tree


class TestOrderIndependence:
    def test_all_permutations_same_root(self, payout_entries):
        roots = {
            PayoutTree(list(perm), CAMPAIGN_ID).root
            for perm in itertools.permutations(payout_entries)
        }

        assert len(roots) == 1

    def test_shuffled_large_set_same_root(self):
        entries = make_payout_entries(37)
        shuffled = list(entries)
        random.Random(7).shuffle(shuffled)

        assert PayoutTree(entries, CAMPAIGN_ID).root == PayoutTree(shuffled, CAMPAIGN_ID).root

    def test_duplicate_addresses_order_independent(self):
        entries = [
            PayoutEntry(address="dup", amount=2),
            PayoutEntry(address="dup", amount=1),
            PayoutEntry(address="x", amount=3),
        ]

        assert PayoutTree(entries, CAMPAIGN_ID).root == PayoutTree(entries[::-1], CAMPAIGN_ID).root

    def test_sort_entries_tie_breaks_on_amount(self):
        ordered = sort_entries([{"address": "d", "amount": 9}, {"address": "d", "amount": 1}])

        assert [e.amount for e in ordered] == [1, 9]

    def test_campaign_id_changes_root(self, payout_entries):
        assert PayoutTree(payout_entries, "c1").root != PayoutTree(payout_entries, "c2").root


class TestProofs:
    @pytest.mark.parametrize("size", [1, 2, 3, 4, 5])
    def test_every_leaf_verifies(self, size):
        tree = PayoutTree(make_payout_entries(size), CAMPAIGN_ID)

        for leaf in tree.leaves:
            proof = tree.get_proof(leaf.address)
            assert len(proof) == proof_length(size)
            assert verify_payout(leaf.address, leaf.amount, CAMPAIGN_ID, proof, tree.root)
            assert tree.verify(leaf.address, leaf.amount, proof)

    def test_missing_address_returns_none(self, payout_tree):
        assert payout_tree.get_proof("nobody") is None

    def test_require_proof_raises_not_found(self, payout_tree):
        with pytest.raises(NotFoundException) as exc_info:
            payout_tree.require_proof("nobody")

        assert exc_info.value.details["address"] == "nobody"

    def test_get_all_proofs(self, payout_tree):
        proofs = payout_tree.get_all_proofs()

        assert set(proofs) == {ADDR_A, ADDR_B, ADDR_C}
        record = proofs[ADDR_B]
        assert record.amount == 30_000_000
        assert record.proof == payout_tree.get_proof(ADDR_B)
        assert record.proof_hex == [to_hex(p) for p in record.proof]

    def test_duplicate_address_proves_first_leaf(self):
        tree = PayoutTree(
            [PayoutEntry(address="dup", amount=2), PayoutEntry(address="dup", amount=1)],
            CAMPAIGN_ID,
        )

        assert tree.get_leaf("dup").amount == 1
        assert tree.verify("dup", 1, tree.get_proof("dup"))


class TestTamperSensitivity:
    """Changing any single input makes verification fail."""

    @pytest.fixture
    def claim(self, payout_tree):
        return ADDR_B, 30_000_000, payout_tree.get_proof(ADDR_B), payout_tree.root

    def test_baseline_verifies(self, claim):
        address, amount, proof, root = claim

        assert verify_payout(address, amount, CAMPAIGN_ID, proof, root)

    def test_tampered_address(self, claim):
        address, amount, proof, root = claim

        assert not verify_payout(address + "x", amount, CAMPAIGN_ID, proof, root)

    def test_tampered_amount(self, claim):
        address, amount, proof, root = claim

        assert not verify_payout(address, amount + 1, CAMPAIGN_ID, proof, root)

    def test_tampered_campaign_id(self, claim):
        address, amount, proof, root = claim

        assert not verify_payout(address, amount, "c2", proof, root)

    def test_every_proof_byte(self, claim):
        address, amount, proof, root = claim

        for element_index, element in enumerate(proof):
            for byte_index in range(len(element)):
                flipped = bytearray(element)
                flipped[byte_index] ^= 0x01
                tampered = list(proof)
                tampered[element_index] = bytes(flipped)
                assert not verify_payout(address, amount, CAMPAIGN_ID, tampered, root), (
                    f"Tampered byte {byte_index} of element {element_index} still verified"
                )

    def test_wrong_width_element(self, claim):
        address, amount, proof, root = claim
        tampered = [proof[0] + b"\x00"] + list(proof[1:])

        assert verify_payout(address, amount, CAMPAIGN_ID, tampered, root) is False


class TestExport:
    def test_export_schema(self, payout_tree):
        export = payout_tree.to_export()

        assert export.root == payout_tree.root_hex
        assert [leaf.address for leaf in export.leaves] == [leaf.address for leaf in payout_tree.leaves]
        assert export.leaves[0].amount == str(payout_tree.leaves[0].amount)
        assert export.layers[0] == [leaf.hash.hex() for leaf in payout_tree.leaves]
        assert export.layers[-1] == [export.root]

    def test_json_keys(self, payout_tree):
        data = json.loads(payout_tree.to_json())

        assert set(data) == {"root", "leaves", "layers"}
        assert set(data["leaves"][0]) == {"address", "amount", "hash", "index"}
        assert isinstance(data["leaves"][0]["amount"], str)

    @pytest.mark.parametrize("size", [1, 2, 3, 5, 12])
    def test_round_trip_reproduces_root_and_proofs(self, size):
        tree = PayoutTree(make_payout_entries(size), CAMPAIGN_ID)

        rebuilt = PayoutTree.from_json(tree.to_json(), CAMPAIGN_ID)

        assert rebuilt.root == tree.root
        for leaf in tree.leaves:
            assert rebuilt.get_proof(leaf.address) == tree.get_proof(leaf.address)

    def test_from_export_accepts_dict(self, payout_tree):
        data = payout_tree.to_export().model_dump()

        assert PayoutTree.from_export(data, CAMPAIGN_ID).root == payout_tree.root

    def test_wrong_campaign_id_detected(self, payout_tree):
        with pytest.raises(MerkleVerificationException, match="Leaf hash mismatch"):
            PayoutTree.from_export(payout_tree.to_export(), "c2")

    def test_tampered_amount_detected(self, payout_tree):
        data = payout_tree.to_export().model_dump()
        data["leaves"][0]["amount"] = str(int(data["leaves"][0]["amount"]) + 1)

        with pytest.raises(MerkleVerificationException):
            PayoutTree.from_export(data, CAMPAIGN_ID)

    def test_tampered_layer_detected(self, payout_tree):
        data = payout_tree.to_export().model_dump()
        data["layers"][1][0] = "00" * 32

        with pytest.raises(MerkleVerificationException, match="layers"):
            PayoutTree.from_export(data, CAMPAIGN_ID)

    def test_malformed_export_rejected(self, payout_tree):
        data = payout_tree.to_export().model_dump()
        data["root"] = "not-hex"

        with pytest.raises(ValidationError):
            TreeExport.model_validate(data)

    def test_non_contiguous_indices_detected(self, payout_tree):
        data = payout_tree.to_export().model_dump()
        data["leaves"][0]["index"] = 7

        with pytest.raises(MerkleVerificationException, match="contiguous"):
            PayoutTree.from_export(data, CAMPAIGN_ID)


class TestGenerateDistribution:
    def test_distribution(self, payout_entries):
        dist = generate_distribution(payout_entries, CAMPAIGN_ID)

        assert dist.root_hex == dist.tree.root_hex
        assert set(dist.proofs) == {e.address for e in payout_entries}
        for entry in payout_entries:
            record = dist.proofs[entry.address]
            assert record.amount == entry.amount
            assert verify_payout(entry.address, entry.amount, CAMPAIGN_ID, record.proof, dist.tree.root)

    def test_empty_distribution_raises(self):
        with pytest.raises(EmptySetException):
            generate_distribution([], CAMPAIGN_ID)
