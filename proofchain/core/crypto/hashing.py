"""
SHA-256 content hashing.

``digest`` is the single hashing primitive used by blocks, proofs and Merkle
trees: strings are hashed as-is, everything else is hashed over its canonical
JSON serialization.
"""

from __future__ import annotations

import hashlib
import hmac
from typing import Any

from proofchain.core.crypto.canonicalization import (
    CANONICALIZATION_COMPACT_JSON,
    canonical_json,
)

DIGEST_HEX_LENGTH = 64


def sha256_hex(data: str | bytes) -> str:
    """Hex SHA-256 of raw text or bytes."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.sha256(data).hexdigest()


def digest(value: Any, *, canonicalization: str = CANONICALIZATION_COMPACT_JSON) -> str:
    """Compute the SHA-256 hex digest of ``value``.

    Parameters
    ----------
    value:
        A string (hashed directly) or any JSON-serializable value (hashed
        over its canonical serialization).

    Returns
    -------
    str
        64 lowercase hexadecimal characters.
    """
    if isinstance(value, str):
        return sha256_hex(value)
    return sha256_hex(canonical_json(value, canonicalization=canonicalization))


def is_hex_digest(value: Any) -> bool:
    """Whether ``value`` looks like a lowercase SHA-256 hex digest."""
    if not isinstance(value, str) or len(value) != DIGEST_HEX_LENGTH:
        return False
    return all(ch in "0123456789abcdef" for ch in value)


def verify_hash(
    value: Any,
    expected_hash: str,
    *,
    canonicalization: str = CANONICALIZATION_COMPACT_JSON,
) -> bool:
    """Return ``True`` if ``value`` digests to ``expected_hash``.

    Anything that is not a lowercase hex digest never matches.
    """
    if not is_hex_digest(expected_hash):
        return False
    actual = digest(value, canonicalization=canonicalization)
    return hmac.compare_digest(actual, expected_hash)
