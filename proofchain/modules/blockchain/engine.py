"""
Block construction.

A block hashes ``{blockNumber, timestamp, data, previousHash, nonce}`` in that
key order, with the timestamp as integer epoch milliseconds. The exact text
that was hashed is kept on the block as ``raw_hash_input``.

Creation is split in two phases: :meth:`BlockEngine.create_block_local` is
pure and always succeeds for valid input, while
:meth:`BlockEngine.publish_to_ledger` is the optional network step that
callers may retry or ignore. :meth:`BlockEngine.create_block` runs both and
never lets a ledger failure escape.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

from proofchain.core.crypto.canonicalization import (
    CANONICALIZATION_COMPACT_JSON,
    canonical_json,
    ensure_canonicalization,
)
from proofchain.core.crypto.hashing import sha256_hex
from proofchain.core.crypto.tokens import generate_nonce
from proofchain.core.logging import get_logger
from proofchain.core.timestamps import from_epoch_millis, utc_now_millis
from proofchain.modules.blockchain.ledger import LedgerError, LedgerPublisher, NullLedgerPublisher
from proofchain.modules.blockchain.records import classify_record
from proofchain.modules.blockchain.schemas import Block, build_hash_payload

logger = get_logger(__name__)

# Previous-hash sentinel for genesis blocks; persisted chains compare it by
# plain string equality, so the literal must never change.
GENESIS_PREVIOUS_HASH: str = "0" * 64

GENESIS_BLOCK_NUMBER = 0


class BlockEngine:
    """Build hashed, linked blocks.

    Parameters
    ----------
    ledger:
        External ledger client used by :meth:`publish_to_ledger`. Defaults to
        a client that publishes nothing.
    canonicalization:
        Serialization of the hash input for new blocks.
    ledger_timeout:
        Seconds :meth:`create_block` waits for the ledger before giving up.
    nonce_factory, clock:
        Sources of nonces and epoch milliseconds; injectable for tests.
    """

    def __init__(
        self,
        *,
        ledger: LedgerPublisher | None = None,
        canonicalization: str = CANONICALIZATION_COMPACT_JSON,
        ledger_timeout: float = 10.0,
        nonce_factory: Callable[[], int] = generate_nonce,
        clock: Callable[[], int] = utc_now_millis,
    ) -> None:
        self._ledger = ledger or NullLedgerPublisher()
        self._canonicalization = ensure_canonicalization(canonicalization)
        self._ledger_timeout = ledger_timeout
        self._nonce_factory = nonce_factory
        self._clock = clock

    @property
    def canonicalization(self) -> str:
        return self._canonicalization

    @property
    def ledger(self) -> LedgerPublisher:
        return self._ledger

    def create_block_local(
        self,
        data: Any,
        previous_hash: str = GENESIS_PREVIOUS_HASH,
        block_number: int = 1,
    ) -> Block:
        """Create a block without touching the network."""
        timestamp_millis = self._clock()
        nonce = self._nonce_factory()
        payload = build_hash_payload(
            block_number=block_number,
            timestamp_millis=timestamp_millis,
            data=data,
            previous_hash=previous_hash,
            nonce=nonce,
        )
        raw_hash_input = canonical_json(payload, canonicalization=self._canonicalization)
        return Block(
            block_number=block_number,
            timestamp=from_epoch_millis(timestamp_millis),
            data=data,
            previous_hash=previous_hash,
            hash=sha256_hex(raw_hash_input),
            nonce=nonce,
            raw_hash_input=raw_hash_input,
            transaction_hash=None,
        )

    def create_genesis_block_local(self, data: Any) -> Block:
        """Create the first block of a chain."""
        return self.create_block_local(data, GENESIS_PREVIOUS_HASH, GENESIS_BLOCK_NUMBER)

    async def publish_to_ledger(self, block: Block) -> str | None:
        """Publish ``block.hash`` to the external ledger.

        Returns
        -------
        str | None
            The ledger's transaction reference, or ``None`` when the ledger
            skipped the record (publication disabled).

        Raises
        ------
        LedgerError
            If the ledger client fails.
        """
        record = classify_record(block.data, block.block_number)
        try:
            tx_hash = await self._ledger.publish(record.record_id, record.record_type, block.hash)
        except LedgerError:
            raise
        except Exception as exc:
            raise LedgerError(f"ledger publish failed for {record.record_id}: {exc}") from exc
        return str(tx_hash) if tx_hash else None

    async def check_ledger_integrity(self, block: Block) -> bool:
        """Ask the ledger whether it anchors this block's hash."""
        record = classify_record(block.data, block.block_number)
        try:
            return await self._ledger.check_integrity(
                record.record_id, record.record_type, block.hash
            )
        except Exception:
            logger.warning(
                "ledger_integrity_check_failed", record_id=record.record_id, exc_info=True
            )
            return False

    async def create_block(
        self,
        data: Any,
        previous_hash: str = GENESIS_PREVIOUS_HASH,
        block_number: int = 1,
    ) -> Block:
        """Create a block, then publish it to the ledger on a best-effort basis.

        A ledger failure or timeout is logged and leaves
        ``transaction_hash`` as ``None``.
        """
        block = self.create_block_local(data, previous_hash, block_number)
        record = classify_record(block.data, block.block_number)
        try:
            tx_hash = await asyncio.wait_for(
                self.publish_to_ledger(block),
                timeout=self._ledger_timeout,
            )
        except (LedgerError, TimeoutError):
            logger.warning(
                "ledger_publish_failed",
                record_id=record.record_id,
                record_type=record.record_type.value,
                block_number=block.block_number,
                exc_info=True,
            )
            return block
        if tx_hash is None:
            return block
        logger.info(
            "ledger_publish_succeeded",
            record_id=record.record_id,
            record_type=record.record_type.value,
            transaction_hash=tx_hash,
        )
        return block.model_copy(update={"transaction_hash": tx_hash})

    async def create_genesis_block(self, data: Any) -> Block:
        return await self.create_block(data, GENESIS_PREVIOUS_HASH, GENESIS_BLOCK_NUMBER)
