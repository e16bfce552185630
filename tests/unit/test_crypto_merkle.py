"""Tests for crypto Merkle tree module."""

from __future__ import annotations

import hashlib

import pytest

from proofchain.core.crypto.merkle import (
    EMPTY_MERKLE_ROOT,
    MerkleTree,
    compute_inclusion_proof,
    compute_merkle_root,
    verify_inclusion_proof,
)


def _sha256_hex(data: str) -> str:
    return hashlib.sha256(data.encode()).hexdigest()


class TestComputeMerkleRoot:
    """Tests for Merkle root computation."""

    def test_empty_is_digest_of_empty_string(self) -> None:
        root = compute_merkle_root([])
        assert root == hashlib.sha256(b"").hexdigest()
        assert root == EMPTY_MERKLE_ROOT
        assert len(root) == 64

    def test_single_leaf_returned_unchanged(self) -> None:
        h = _sha256_hex("leaf0")
        assert compute_merkle_root([h]) == h

    def test_single_non_digest_leaf_returned_unchanged(self) -> None:
        assert compute_merkle_root(["not-a-hash"]) == "not-a-hash"

    def test_two_leaves(self) -> None:
        h0 = _sha256_hex("leaf0")
        h1 = _sha256_hex("leaf1")
        expected = hashlib.sha256((h0 + h1).encode()).hexdigest()
        assert compute_merkle_root([h0, h1]) == expected

    def test_odd_count_duplicates_last(self) -> None:
        h0, h1, h2 = (_sha256_hex(f"leaf{i}") for i in range(3))
        left = _sha256_hex(h0 + h1)
        right = _sha256_hex(h2 + h2)
        assert compute_merkle_root([h0, h1, h2]) == _sha256_hex(left + right)

    def test_five_leaves_recurse_with_duplication_at_each_level(self) -> None:
        leaves = [_sha256_hex(f"leaf{i}") for i in range(5)]
        level1 = [
            _sha256_hex(leaves[0] + leaves[1]),
            _sha256_hex(leaves[2] + leaves[3]),
            _sha256_hex(leaves[4] + leaves[4]),
        ]
        level2 = [_sha256_hex(level1[0] + level1[1]), _sha256_hex(level1[2] + level1[2])]
        assert compute_merkle_root(leaves) == _sha256_hex(level2[0] + level2[1])

    def test_deterministic(self) -> None:
        leaves = [_sha256_hex(f"leaf{i}") for i in range(7)]
        assert compute_merkle_root(leaves) == compute_merkle_root(list(leaves))

    def test_order_matters(self) -> None:
        h0 = _sha256_hex("a")
        h1 = _sha256_hex("b")
        assert compute_merkle_root([h0, h1]) != compute_merkle_root([h1, h0])

    def test_input_not_mutated(self) -> None:
        leaves = [_sha256_hex(f"leaf{i}") for i in range(3)]
        snapshot = list(leaves)
        compute_merkle_root(leaves)
        assert leaves == snapshot


class TestInclusionProof:
    """Tests for Merkle inclusion proof computation and verification."""

    def test_two_leaves_proof_index_0(self) -> None:
        h0 = _sha256_hex("leaf0")
        h1 = _sha256_hex("leaf1")
        root = compute_merkle_root([h0, h1])
        proof = compute_inclusion_proof([h0, h1], 0)
        assert proof == [(h1, "right")]
        assert verify_inclusion_proof(h0, proof, root)

    def test_two_leaves_proof_index_1(self) -> None:
        h0 = _sha256_hex("leaf0")
        h1 = _sha256_hex("leaf1")
        root = compute_merkle_root([h0, h1])
        proof = compute_inclusion_proof([h0, h1], 1)
        assert proof == [(h0, "left")]
        assert verify_inclusion_proof(h1, proof, root)

    @pytest.mark.parametrize("size", [3, 4, 5, 8, 11])
    def test_all_indices_verify(self, size: int) -> None:
        leaves = [_sha256_hex(f"leaf{i}") for i in range(size)]
        root = compute_merkle_root(leaves)
        for i in range(size):
            proof = compute_inclusion_proof(leaves, i)
            assert verify_inclusion_proof(leaves[i], proof, root)

    def test_unpaired_last_leaf_is_its_own_sibling(self) -> None:
        leaves = [_sha256_hex(f"leaf{i}") for i in range(5)]
        proof = compute_inclusion_proof(leaves, 4)
        # 5 -> 3 -> 2 -> 1 nodes, so one step per level below the root.
        assert len(proof) == 3
        assert proof[0] == (leaves[4], "right")
        assert verify_inclusion_proof(leaves[4], proof, compute_merkle_root(leaves))

    def test_single_leaf_empty_proof(self) -> None:
        h = _sha256_hex("solo")
        proof = compute_inclusion_proof([h], 0)
        assert proof == []
        assert verify_inclusion_proof(h, proof, h)

    def test_wrong_leaf_fails(self) -> None:
        leaves = [_sha256_hex(f"leaf{i}") for i in range(4)]
        root = compute_merkle_root(leaves)
        proof = compute_inclusion_proof(leaves, 0)
        assert not verify_inclusion_proof(_sha256_hex("wrong"), proof, root)

    def test_unknown_side_fails(self) -> None:
        leaves = [_sha256_hex(f"leaf{i}") for i in range(2)]
        root = compute_merkle_root(leaves)
        assert not verify_inclusion_proof(leaves[0], [(leaves[1], "up")], root)

    def test_empty_raises(self) -> None:
        with pytest.raises(ValueError, match="empty"):
            compute_inclusion_proof([], 0)

    def test_index_out_of_range(self) -> None:
        h = _sha256_hex("leaf")
        with pytest.raises(ValueError, match="out of range"):
            compute_inclusion_proof([h], 1)
        with pytest.raises(ValueError, match="out of range"):
            compute_inclusion_proof([h], -1)


class TestMerkleTree:
    """Tests for the MerkleTree dataclass."""

    def test_auto_computes_root(self) -> None:
        leaves = [_sha256_hex(f"leaf{i}") for i in range(4)]
        tree = MerkleTree(leaves=leaves)
        assert tree.root == compute_merkle_root(leaves)
        assert tree.size == 4

    def test_empty_tree_has_empty_root(self) -> None:
        assert MerkleTree().root == EMPTY_MERKLE_ROOT

    def test_proof_roundtrip(self) -> None:
        leaves = [_sha256_hex(f"leaf{i}") for i in range(6)]
        tree = MerkleTree(leaves=leaves)
        assert tree.verify(leaves[5], tree.inclusion_proof(5))
