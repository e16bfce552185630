"""
Block and chain verification utilities.

Pure functions over blocks or persisted block records. Verification never
raises for tampered or malformed input; it reports ``False`` or an invalid
:class:`ChainVerificationResult` instead.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from proofchain.core.crypto.canonicalization import CANONICALIZATION_COMPACT_JSON, canonical_json
from proofchain.core.crypto.hashing import sha256_hex
from proofchain.modules.blockchain.schemas import (
    Block,
    BlockAuditEntry,
    ChainAuditReport,
    ChainVerificationResult,
)

BlockLike = Block | Mapping[str, Any]


def _field(block: Any, attr: str, alias: str) -> Any:
    if isinstance(block, Block):
        return getattr(block, attr)
    if isinstance(block, Mapping):
        return block.get(alias, block.get(attr))
    return None


def _block_number_or_none(value: Any) -> int | None:
    """Block number fit for a result model; tampered types become ``None``."""
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _hash_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _as_block(block: Any) -> Block | None:
    if isinstance(block, Block):
        return block
    if not isinstance(block, Mapping):
        return None
    try:
        return Block.from_record(block)
    except (ValidationError, TypeError, ValueError):
        return None


def _same_json(left: Any, right: Any) -> bool:
    """Structural JSON equality that ignores key order but not value types.

    ``1`` and ``1.0`` are equal (storage may reformat numbers); ``True`` and
    ``1`` are not.
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    if isinstance(left, (int, float)) and isinstance(right, (int, float)):
        return left == right
    if isinstance(left, dict) and isinstance(right, dict):
        if left.keys() != right.keys():
            return False
        return all(_same_json(left[key], right[key]) for key in left)
    if isinstance(left, list) and isinstance(right, list):
        if len(left) != len(right):
            return False
        return all(_same_json(a, b) for a, b in zip(left, right, strict=True))
    return type(left) is type(right) and left == right


def verify_block(
    block: BlockLike | None,
    *,
    canonicalization: str = CANONICALIZATION_COMPACT_JSON,
) -> bool:
    """Verify a single block's integrity.

    Parameters
    ----------
    block:
        A :class:`Block`, a persisted record mapping, or ``None``.
    canonicalization:
        Serialization used to recompute the hash input of records that were
        stored without ``rawHashInput``.

    Returns
    -------
    bool
        ``True`` if the stored hash matches the block's own fields.
    """
    if block is None:
        return False
    if not _field(block, "hash", "hash") or not _field(block, "previous_hash", "previousHash"):
        return False

    parsed_block = _as_block(block)
    if parsed_block is None:
        return False

    payload = parsed_block.hash_payload()
    try:
        expected_text = canonical_json(payload, canonicalization=canonicalization)
    except (TypeError, ValueError):
        return False

    raw = parsed_block.raw_hash_input
    if raw is None:
        return sha256_hex(expected_text) == parsed_block.hash

    if sha256_hex(raw) != parsed_block.hash:
        return False
    try:
        hashed = json.loads(raw)
    except ValueError:
        return False
    return _same_json(hashed, json.loads(expected_text))


def verify_chain(
    blocks: Sequence[BlockLike] | None,
    *,
    canonicalization: str = CANONICALIZATION_COMPACT_JSON,
) -> ChainVerificationResult:
    """Verify chain integrity, stopping at the first violation.

    Blocks are checked in the order given. Each block must verify on its own
    and, after the first, must link to the hash of the block before it.
    """
    if not blocks:
        return ChainVerificationResult(is_valid=True, message="Empty chain")

    for i, current in enumerate(blocks):
        block_number = _field(current, "block_number", "blockNumber")

        if not verify_block(current, canonicalization=canonicalization):
            return ChainVerificationResult(
                is_valid=False,
                message=f"Block {block_number!r} has been tampered with",
                block_number=_block_number_or_none(block_number),
            )

        if i > 0:
            expected = _field(blocks[i - 1], "hash", "hash")
            actual = _field(current, "previous_hash", "previousHash")
            if actual != expected:
                return ChainVerificationResult(
                    is_valid=False,
                    message=f"Block {block_number!r} has invalid previous hash",
                    block_number=_block_number_or_none(block_number),
                    expected_hash=_hash_or_none(expected),
                    actual_hash=_hash_or_none(actual),
                )

    return ChainVerificationResult(
        is_valid=True,
        message="Chain is valid",
        total_blocks=len(blocks),
    )


def audit_chain(
    blocks: Sequence[BlockLike] | None,
    *,
    canonicalization: str = CANONICALIZATION_COMPACT_JSON,
) -> ChainAuditReport:
    """Report integrity and linkage for every block instead of stopping early."""
    if not blocks:
        return ChainAuditReport(is_valid=True, message="Empty chain", total_blocks=0)

    entries: list[BlockAuditEntry] = []
    for i, current in enumerate(blocks):
        linked = i == 0 or _field(current, "previous_hash", "previousHash") == _field(
            blocks[i - 1], "hash", "hash"
        )
        entries.append(
            BlockAuditEntry(
                block_number=_block_number_or_none(
                    _field(current, "block_number", "blockNumber")
                ),
                hash=_hash_or_none(_field(current, "hash", "hash")),
                is_valid=verify_block(current, canonicalization=canonicalization),
                linked_correctly=linked,
            )
        )

    report = ChainAuditReport(
        is_valid=True,
        message="Chain is valid",
        total_blocks=len(entries),
        blocks=entries,
    )
    broken = len(report.tampered_blocks)
    if broken:
        report.is_valid = False
        report.message = f"{broken} of {len(entries)} blocks failed integrity or linkage checks"
    return report
