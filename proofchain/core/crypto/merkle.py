"""
Merkle tree construction and inclusion proof verification.

Provides batch integrity verification by computing a single root hash from
a set of item hashes. Inclusion proofs allow verifying that a specific
item is part of a set without replaying the entire tree.

Pairs are combined by concatenating the two hex strings (left then right)
and hashing the result; an odd level duplicates its last element.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from proofchain.core.crypto.hashing import sha256_hex

EMPTY_MERKLE_ROOT = sha256_hex("")


def _hash_pair(left: str, right: str) -> str:
    """Hash two hex-encoded digests together, left first."""
    return sha256_hex(left + right)


def _levels(hashes: list[str]) -> Iterator[list[str]]:
    """Yield every tree level, leaves first and the one-element root level last."""
    level = list(hashes)
    yield level
    while len(level) > 1:
        level = [
            _hash_pair(level[i], level[i + 1] if i + 1 < len(level) else level[i])
            for i in range(0, len(level), 2)
        ]
        yield level


def compute_merkle_root(hashes: list[str]) -> str:
    """Compute the Merkle root from a list of leaf hashes.

    Parameters
    ----------
    hashes:
        List of hex-encoded leaf hashes.

    Returns
    -------
    str
        Hex-encoded Merkle root. An empty list yields the digest of the
        empty string; a single leaf is returned unchanged.
    """
    if not hashes:
        return EMPTY_MERKLE_ROOT
    *_, root_level = _levels(hashes)
    return root_level[0]


def compute_inclusion_proof(hashes: list[str], index: int) -> list[tuple[str, str]]:
    """Compute an inclusion proof for the leaf at ``index``.

    The proof is a list of ``(sibling_hash, side)`` tuples, one per level
    below the root, where ``side`` says which side the sibling sits on. A
    node without a sibling is paired with itself.

    Raises
    ------
    ValueError
        If ``hashes`` is empty or ``index`` is out of range.
    """
    if not hashes:
        raise ValueError("Cannot compute proof from empty list")
    if index < 0 or index >= len(hashes):
        raise ValueError(f"Index {index} out of range for {len(hashes)} hashes")

    proof: list[tuple[str, str]] = []
    for level in _levels(hashes):
        if len(level) == 1:
            break
        if index % 2:
            proof.append((level[index - 1], "left"))
        else:
            proof.append((level[min(index + 1, len(level) - 1)], "right"))
        index //= 2
    return proof


def verify_inclusion_proof(
    leaf_hash: str,
    proof: list[tuple[str, str]],
    root: str,
) -> bool:
    """Verify that a leaf hash is included in a Merkle tree with the given root."""
    current = leaf_hash
    for sibling_hash, side in proof:
        if side == "left":
            current = _hash_pair(sibling_hash, current)
        elif side == "right":
            current = _hash_pair(current, sibling_hash)
        else:
            return False
    return current == root


@dataclass
class MerkleTree:
    """A Merkle tree built from a set of item hashes.

    Attributes
    ----------
    leaves:
        The original leaf hashes.
    root:
        The computed Merkle root hash.
    """

    leaves: list[str] = field(default_factory=list)
    root: str = ""

    def __post_init__(self) -> None:
        if not self.root:
            self.root = compute_merkle_root(self.leaves)

    def inclusion_proof(self, index: int) -> list[tuple[str, str]]:
        """Return the inclusion proof for the leaf at ``index``."""
        return compute_inclusion_proof(self.leaves, index)

    def verify(self, leaf_hash: str, proof: list[tuple[str, str]]) -> bool:
        """Verify an inclusion proof against this tree's root."""
        return verify_inclusion_proof(leaf_hash, proof, self.root)

    @property
    def size(self) -> int:
        return len(self.leaves)
