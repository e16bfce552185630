"""Service facade over block creation, verification and proofs."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any

from proofchain.core.config import Settings, get_settings
from proofchain.core.crypto.canonicalization import (
    CANONICALIZATION_COMPACT_JSON,
    ensure_canonicalization,
)
from proofchain.core.logging import get_logger
from proofchain.modules.blockchain.engine import GENESIS_PREVIOUS_HASH, BlockEngine
from proofchain.modules.blockchain.ledger import build_ledger_publisher
from proofchain.modules.blockchain.proofs import (
    create_merkle_proof,
    generate_proof,
    get_chain_statistics,
    verify_merkle_proof,
    verify_proof,
)
from proofchain.modules.blockchain.schemas import (
    Block,
    ChainAuditReport,
    ChainStatistics,
    ChainVerificationResult,
    MerkleProof,
    ProofOfExistence,
)
from proofchain.modules.blockchain.verification import (
    BlockLike,
    audit_chain,
    verify_block,
    verify_chain,
)

logger = get_logger(__name__)


class BlockchainService:
    """Create, verify and prove tamper-evident records.

    Instances hold no mutable state beyond their collaborators, so one
    service may be shared by concurrent callers.
    """

    def __init__(
        self,
        engine: BlockEngine | None = None,
        *,
        canonicalization: str = CANONICALIZATION_COMPACT_JSON,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self._canonicalization = ensure_canonicalization(canonicalization)
        self._engine = engine or BlockEngine(canonicalization=self._canonicalization)
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> BlockchainService:
        """Build a service with the ledger and hashing mode from configuration."""
        settings = settings or get_settings()
        engine = BlockEngine(
            ledger=build_ledger_publisher(settings),
            canonicalization=settings.hash_canonicalization,
            ledger_timeout=settings.ledger_timeout_seconds,
        )
        return cls(engine, canonicalization=settings.hash_canonicalization)

    @property
    def engine(self) -> BlockEngine:
        return self._engine

    # ------------------------------------------------------------------
    # Block creation
    # ------------------------------------------------------------------

    def create_block_local(
        self,
        data: Any,
        previous_hash: str = GENESIS_PREVIOUS_HASH,
        block_number: int = 1,
    ) -> Block:
        return self._engine.create_block_local(data, previous_hash, block_number)

    def create_genesis_block_local(self, data: Any) -> Block:
        return self._engine.create_genesis_block_local(data)

    async def create_block(
        self,
        data: Any,
        previous_hash: str = GENESIS_PREVIOUS_HASH,
        block_number: int = 1,
    ) -> Block:
        return await self._engine.create_block(data, previous_hash, block_number)

    async def create_genesis_block(self, data: Any) -> Block:
        return await self._engine.create_genesis_block(data)

    async def publish_to_ledger(self, block: Block) -> str | None:
        return await self._engine.publish_to_ledger(block)

    async def check_ledger_integrity(self, block: Block) -> bool:
        return await self._engine.check_ledger_integrity(block)

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------

    def verify_block(self, block: BlockLike | None) -> bool:
        return verify_block(block, canonicalization=self._canonicalization)

    def verify_chain(self, blocks: Sequence[BlockLike] | None) -> ChainVerificationResult:
        result = verify_chain(blocks, canonicalization=self._canonicalization)
        if not result.is_valid:
            logger.info(
                "chain_verification_failed",
                block_number=result.block_number,
                reason=result.message,
            )
        return result

    def audit_chain(self, blocks: Sequence[BlockLike] | None) -> ChainAuditReport:
        return audit_chain(blocks, canonicalization=self._canonicalization)

    def verify_chains(self, chains: Mapping[str, Sequence[BlockLike]]) -> dict[str, Any]:
        """Verify several independently keyed chains and summarize the outcome."""
        results: dict[str, ChainVerificationResult] = {}
        total_blocks = 0
        for name, blocks in chains.items():
            results[name] = self.verify_chain(blocks)
            total_blocks += len(blocks or [])
        all_valid = all(result.is_valid for result in results.values())
        return {
            "chains": results,
            "all_chains_valid": all_valid,
            "chains_validated": len(results),
            "total_blocks_validated": total_blocks,
        }

    # ------------------------------------------------------------------
    # Proofs and statistics
    # ------------------------------------------------------------------

    def generate_proof(self, data: Any) -> ProofOfExistence:
        if self._clock is None:
            return generate_proof(data)
        return generate_proof(data, clock=self._clock)

    def verify_proof(self, data: Any, proof: ProofOfExistence | Mapping[str, Any] | None) -> bool:
        return verify_proof(data, proof)

    def create_merkle_proof(self, data_set: Sequence[Any] | None, index: int) -> MerkleProof | None:
        return create_merkle_proof(data_set, index)

    def verify_merkle_proof(self, item: Any, proof: MerkleProof | None) -> bool:
        return verify_merkle_proof(item, proof)

    def get_chain_statistics(
        self,
        blocks: Sequence[Block | Mapping[str, Any]] | None,
    ) -> ChainStatistics:
        return get_chain_statistics(blocks)
