"""Pydantic schemas for blocks, verification results and proofs.

Attribute names are snake_case; aliases carry the camelCase field names of
the persisted record shape, so ``model_dump(by_alias=True)`` produces what
the document store keeps and stored documents validate straight back.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from proofchain.core.crypto.tokens import NONCE_MAX
from proofchain.core.timestamps import from_epoch_millis, to_epoch_millis, truncate_to_millis


def _coerce_timestamp(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return from_epoch_millis(value)
    if isinstance(value, str):
        return from_epoch_millis(to_epoch_millis(value))
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return truncate_to_millis(value)
    return value


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------


class Block(BaseModel):
    """One hashed, linked record.

    ``raw_hash_input`` is the exact text that was hashed. It is optional only
    so that records written before it was persisted can still be read.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    block_number: int = Field(alias="blockNumber", ge=0)
    timestamp: datetime
    data: Any = None
    previous_hash: str = Field(alias="previousHash")
    hash: str
    nonce: int = Field(ge=0, le=NONCE_MAX)
    raw_hash_input: str | None = Field(default=None, alias="rawHashInput")
    transaction_hash: str | None = Field(default=None, alias="transactionHash")

    @field_validator("timestamp", mode="before")
    @classmethod
    def _normalize_timestamp(cls, value: Any) -> Any:
        return _coerce_timestamp(value)

    @property
    def timestamp_millis(self) -> int:
        return to_epoch_millis(self.timestamp)

    def hash_payload(self) -> dict[str, Any]:
        """The hashed fields, in hashing order, with the timestamp in epoch millis."""
        return build_hash_payload(
            block_number=self.block_number,
            timestamp_millis=self.timestamp_millis,
            data=self.data,
            previous_hash=self.previous_hash,
            nonce=self.nonce,
        )

    def to_record(self) -> dict[str, Any]:
        """Persisted shape with camelCase keys."""
        return self.model_dump(by_alias=True)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Block:
        """Validate a persisted record back into a block."""
        return cls.model_validate(dict(record))


def build_hash_payload(
    *,
    block_number: int,
    timestamp_millis: int,
    data: Any,
    previous_hash: str,
    nonce: int,
) -> dict[str, Any]:
    return {
        "blockNumber": block_number,
        "timestamp": timestamp_millis,
        "data": data,
        "previousHash": previous_hash,
        "nonce": nonce,
    }


class BlockSummary(BaseModel):
    """Identifying fields of a block used in statistics."""

    model_config = ConfigDict(populate_by_name=True)

    number: int
    timestamp: datetime
    hash: str


# ---------------------------------------------------------------------------
# Verification results
# ---------------------------------------------------------------------------


class ChainVerificationResult(BaseModel):
    """Outcome of a fail-fast chain walk."""

    model_config = ConfigDict(populate_by_name=True)

    is_valid: bool = Field(alias="isValid")
    message: str
    total_blocks: int | None = Field(default=None, alias="totalBlocks")
    block_number: int | None = Field(default=None, alias="blockNumber")
    expected_hash: str | None = Field(default=None, alias="expectedHash")
    actual_hash: str | None = Field(default=None, alias="actualHash")

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class BlockAuditEntry(BaseModel):
    """Per-block line of a chain audit."""

    model_config = ConfigDict(populate_by_name=True)

    block_number: int | None = Field(default=None, alias="blockNumber")
    hash: str | None = None
    is_valid: bool = Field(alias="isValid")
    linked_correctly: bool = Field(alias="linkedCorrectly")


class ChainAuditReport(BaseModel):
    """Every block's integrity and linkage, without stopping at the first break."""

    model_config = ConfigDict(populate_by_name=True)

    is_valid: bool = Field(alias="isValid")
    message: str
    total_blocks: int = Field(alias="totalBlocks")
    blocks: list[BlockAuditEntry] = Field(default_factory=list)

    @property
    def tampered_blocks(self) -> list[BlockAuditEntry]:
        return [entry for entry in self.blocks if not (entry.is_valid and entry.linked_correctly)]


class ChainStatistics(BaseModel):
    """Descriptive statistics for an ordered chain. Durations are milliseconds."""

    model_config = ConfigDict(populate_by_name=True)

    total_blocks: int = Field(default=0, alias="totalBlocks")
    first_block: BlockSummary | None = Field(default=None, alias="firstBlock")
    last_block: BlockSummary | None = Field(default=None, alias="lastBlock")
    total_timespan: int = Field(default=0, alias="totalTimespan")
    average_block_time: float = Field(default=0, alias="averageBlockTime")


# ---------------------------------------------------------------------------
# Proofs
# ---------------------------------------------------------------------------


class ProofOfExistence(BaseModel):
    """Binds a payload's content hash to the instant it was attested."""

    model_config = ConfigDict(populate_by_name=True)

    hash: str
    timestamp: datetime
    data_hash: str = Field(alias="dataHash")

    @field_validator("timestamp", mode="before")
    @classmethod
    def _normalize_timestamp(cls, value: Any) -> Any:
        return _coerce_timestamp(value)


class MerkleProofStep(BaseModel):
    """One sibling on the path from an item hash to the Merkle root."""

    model_config = ConfigDict(populate_by_name=True)

    sibling_hash: str = Field(alias="siblingHash")
    side: Literal["left", "right"]


class MerkleProof(BaseModel):
    """Membership proof for one item of an ad hoc data set."""

    model_config = ConfigDict(populate_by_name=True)

    merkle_root: str = Field(alias="merkleRoot")
    index: int
    item_hash: str = Field(alias="itemHash")
    total_items: int = Field(alias="totalItems")
    path: list[MerkleProofStep] = Field(default_factory=list)
