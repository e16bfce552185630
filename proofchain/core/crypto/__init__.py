"""
Cryptographic integrity primitives.

Pure library modules for tamper-evident records:
- **canonicalization**: deterministic JSON serialization for hashing
- **hashing**: SHA-256 content digests
- **merkle**: Merkle root construction and inclusion proof verification
- **tokens**: human-readable record tokens and block nonces
"""

from proofchain.core.crypto.canonicalization import (
    CANONICALIZATION_COMPACT_JSON,
    CANONICALIZATION_RFC8785,
    UnsupportedCanonicalizationError,
    canonical_json,
)
from proofchain.core.crypto.hashing import digest, sha256_hex, verify_hash
from proofchain.core.crypto.merkle import (
    EMPTY_MERKLE_ROOT,
    MerkleTree,
    compute_inclusion_proof,
    compute_merkle_root,
    verify_inclusion_proof,
)
from proofchain.core.crypto.tokens import generate_nonce, generate_token

__all__ = [
    "canonical_json",
    "CANONICALIZATION_COMPACT_JSON",
    "CANONICALIZATION_RFC8785",
    "UnsupportedCanonicalizationError",
    "digest",
    "sha256_hex",
    "verify_hash",
    "EMPTY_MERKLE_ROOT",
    "MerkleTree",
    "compute_merkle_root",
    "compute_inclusion_proof",
    "verify_inclusion_proof",
    "generate_nonce",
    "generate_token",
]
