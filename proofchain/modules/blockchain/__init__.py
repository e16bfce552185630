"""
Hash-chained block records.

- **engine**: block construction and best-effort ledger publication
- **verification**: single-block, fail-fast chain and full audit checks
- **proofs**: proof of existence, Merkle membership proofs, chain statistics
- **service**: settings-driven facade over all of the above
"""

from proofchain.modules.blockchain.engine import GENESIS_PREVIOUS_HASH, BlockEngine
from proofchain.modules.blockchain.ledger import (
    HttpLedgerPublisher,
    LedgerError,
    LedgerPublisher,
    NullLedgerPublisher,
)
from proofchain.modules.blockchain.proofs import (
    create_merkle_proof,
    generate_proof,
    get_chain_statistics,
    verify_merkle_proof,
    verify_proof,
)
from proofchain.modules.blockchain.records import LedgerRecord, RecordType, classify_record
from proofchain.modules.blockchain.schemas import (
    Block,
    ChainAuditReport,
    ChainStatistics,
    ChainVerificationResult,
    MerkleProof,
    ProofOfExistence,
)
from proofchain.modules.blockchain.service import BlockchainService
from proofchain.modules.blockchain.verification import audit_chain, verify_block, verify_chain

__all__ = [
    "GENESIS_PREVIOUS_HASH",
    "Block",
    "BlockEngine",
    "BlockchainService",
    "ChainAuditReport",
    "ChainStatistics",
    "ChainVerificationResult",
    "HttpLedgerPublisher",
    "LedgerError",
    "LedgerPublisher",
    "LedgerRecord",
    "MerkleProof",
    "NullLedgerPublisher",
    "ProofOfExistence",
    "RecordType",
    "audit_chain",
    "classify_record",
    "create_merkle_proof",
    "generate_proof",
    "get_chain_statistics",
    "verify_block",
    "verify_chain",
    "verify_merkle_proof",
    "verify_proof",
]
