"""Proof-of-existence, Merkle membership proofs and chain statistics."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from proofchain.core.crypto.hashing import digest
from proofchain.core.crypto.merkle import (
    compute_inclusion_proof,
    compute_merkle_root,
    verify_inclusion_proof,
)
from proofchain.core.timestamps import from_epoch_millis, to_epoch_millis, utc_now_millis
from proofchain.modules.blockchain.schemas import (
    Block,
    BlockSummary,
    ChainStatistics,
    MerkleProof,
    MerkleProofStep,
    ProofOfExistence,
)


def generate_proof(
    data: Any,
    *,
    clock: Callable[[], int] = utc_now_millis,
) -> ProofOfExistence:
    """Bind ``data`` to the current instant.

    ``hash`` covers ``{data, timestamp}`` so the same payload attested at two
    different instants yields two different proofs with one ``data_hash``.
    """
    timestamp_millis = clock()
    return ProofOfExistence(
        hash=digest({"data": data, "timestamp": timestamp_millis}),
        timestamp=from_epoch_millis(timestamp_millis),
        data_hash=digest(data),
    )


def verify_proof(data: Any, proof: ProofOfExistence | Mapping[str, Any] | None) -> bool:
    """Check that ``proof`` attests exactly ``data`` at its stated timestamp."""
    if proof is None:
        return False
    if not isinstance(proof, ProofOfExistence):
        if not isinstance(proof, Mapping):
            return False
        if not all(proof.get(key) for key in ("hash", "timestamp", "dataHash")):
            return False
        try:
            proof = ProofOfExistence.model_validate(dict(proof))
        except (ValidationError, TypeError, ValueError):
            return False
    if not proof.hash or not proof.data_hash:
        return False

    if digest(data) != proof.data_hash:
        return False
    expected = digest({"data": data, "timestamp": to_epoch_millis(proof.timestamp)})
    return expected == proof.hash


def create_merkle_proof(data_set: Sequence[Any] | None, index: int) -> MerkleProof | None:
    """Build a membership proof for ``data_set[index]``.

    Returns ``None`` for a missing or empty data set and for any index
    outside ``0 <= index < len(data_set)``.
    """
    if not data_set:
        return None
    if isinstance(index, bool) or not isinstance(index, int):
        return None
    if index < 0 or index >= len(data_set):
        return None

    hashes = [digest(item) for item in data_set]
    path = [
        MerkleProofStep(sibling_hash=sibling, side=side)
        for sibling, side in compute_inclusion_proof(hashes, index)
    ]
    return MerkleProof(
        merkle_root=compute_merkle_root(hashes),
        index=index,
        item_hash=hashes[index],
        total_items=len(data_set),
        path=path,
    )


def verify_merkle_proof(item: Any, proof: MerkleProof | None) -> bool:
    """Check that ``item`` is the member ``proof`` was issued for."""
    if proof is None:
        return False
    item_hash = digest(item)
    if item_hash != proof.item_hash:
        return False
    steps = [(step.sibling_hash, step.side) for step in proof.path]
    return verify_inclusion_proof(item_hash, steps, proof.merkle_root)


def _summary(block: Block | Mapping[str, Any]) -> BlockSummary:
    if isinstance(block, Block):
        return BlockSummary(number=block.block_number, timestamp=block.timestamp, hash=block.hash)
    return BlockSummary(
        number=block.get("blockNumber"),
        timestamp=from_epoch_millis(to_epoch_millis(block.get("timestamp"))),
        hash=block.get("hash"),
    )


def get_chain_statistics(blocks: Sequence[Block | Mapping[str, Any]] | None) -> ChainStatistics:
    """Describe an ordered chain: its ends, total span and mean block interval.

    Raises ``TypeError`` or ``ValueError`` when an end record lacks a usable
    timestamp, number or hash; verify the chain first.
    """
    if not blocks:
        return ChainStatistics()

    first_block = _summary(blocks[0])
    last_block = _summary(blocks[-1])
    total_timespan = to_epoch_millis(last_block.timestamp) - to_epoch_millis(
        first_block.timestamp
    )
    count = len(blocks)
    return ChainStatistics(
        total_blocks=count,
        first_block=first_block,
        last_block=last_block,
        total_timespan=total_timespan,
        average_block_time=total_timespan / (count - 1) if count > 1 else 0,
    )
