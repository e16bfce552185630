"""Tests for block construction and best-effort ledger publication."""

from __future__ import annotations

import hashlib
import json
from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from proofchain.core.crypto.canonicalization import CANONICALIZATION_RFC8785
from proofchain.modules.blockchain.engine import GENESIS_PREVIOUS_HASH, BlockEngine
from proofchain.modules.blockchain.ledger import LedgerError
from proofchain.modules.blockchain.records import RecordType
from proofchain.modules.blockchain.verification import verify_block

FIXED_MILLIS = 1_700_000_000_000


def _fixed_engine(**kwargs: object) -> BlockEngine:
    return BlockEngine(clock=lambda: FIXED_MILLIS, nonce_factory=lambda: 42, **kwargs)


class TestCreateBlockLocal:
    """Tests for the pure, synchronous creation phase."""

    def test_required_fields(self, engine: BlockEngine) -> None:
        block = engine.create_block_local({"shipmentId": "123"}, "0", 1)
        assert block.block_number == 1
        assert block.previous_hash == "0"
        assert block.data == {"shipmentId": "123"}
        assert isinstance(block.nonce, int)
        assert isinstance(block.timestamp, datetime)
        assert block.timestamp.tzinfo is not None
        assert block.transaction_hash is None

    def test_hash_is_64_lowercase_hex(self, engine: BlockEngine) -> None:
        block = engine.create_block_local({"test": "data"}, "0", 1)
        assert len(block.hash) == 64
        assert all(ch in "0123456789abcdef" for ch in block.hash)

    def test_exact_hash_input(self) -> None:
        block = _fixed_engine().create_block_local({"shipmentId": "123"}, "0", 1)
        expected_raw = (
            '{"blockNumber":1,"timestamp":1700000000000,'
            '"data":{"shipmentId":"123"},"previousHash":"0","nonce":42}'
        )
        assert block.raw_hash_input == expected_raw
        assert block.hash == hashlib.sha256(expected_raw.encode()).hexdigest()

    def test_timestamp_exposed_as_instant_hashed_as_millis(self) -> None:
        block = _fixed_engine().create_block_local({"a": 1})
        assert block.timestamp == datetime(2023, 11, 14, 22, 13, 20, tzinfo=UTC)
        assert json.loads(block.raw_hash_input)["timestamp"] == FIXED_MILLIS
        assert block.timestamp_millis == FIXED_MILLIS

    def test_defaults_to_genesis_sentinel_and_block_one(self, engine: BlockEngine) -> None:
        block = engine.create_block_local({"a": 1})
        assert block.previous_hash == GENESIS_PREVIOUS_HASH
        assert block.block_number == 1

    def test_links_to_previous_hash(self, engine: BlockEngine) -> None:
        first = engine.create_block_local({"data": "first"}, "0", 1)
        second = engine.create_block_local({"data": "second"}, first.hash, 2)
        assert second.previous_hash == first.hash
        assert second.block_number == 2

    def test_identical_payloads_diversified_by_nonce(self) -> None:
        nonces = iter([1, 2])
        engine = BlockEngine(clock=lambda: FIXED_MILLIS, nonce_factory=lambda: next(nonces))
        a = engine.create_block_local({"same": True}, "0", 1)
        b = engine.create_block_local({"same": True}, "0", 1)
        assert a.hash != b.hash

    def test_created_block_verifies(self, engine: BlockEngine) -> None:
        block = engine.create_block_local({"transaction": "payment", "amount": 100}, "0", 1)
        assert verify_block(block)

    def test_block_is_frozen(self, engine: BlockEngine) -> None:
        block = engine.create_block_local({"a": 1})
        with pytest.raises(ValidationError):
            block.hash = "f" * 64  # type: ignore[misc]

    def test_rfc8785_engine_sorts_hash_input(self) -> None:
        engine = _fixed_engine(canonicalization=CANONICALIZATION_RFC8785)
        block = engine.create_block_local({"z": 1, "a": 2}, "0", 1)
        assert block.raw_hash_input.startswith('{"blockNumber":1,"data":{"a":2,"z":1}')
        assert verify_block(block)


class TestGenesisBlock:
    def test_block_number_zero_and_sentinel(self, engine: BlockEngine) -> None:
        genesis = engine.create_genesis_block_local({"system": "init"})
        assert genesis.block_number == 0
        assert genesis.previous_hash == GENESIS_PREVIOUS_HASH
        assert verify_block(genesis)

    def test_sentinel_literal(self) -> None:
        assert GENESIS_PREVIOUS_HASH == "0" * 64

    @pytest.mark.asyncio
    async def test_async_genesis(self, engine: BlockEngine) -> None:
        genesis = await engine.create_genesis_block({"system": "init"})
        assert genesis.block_number == 0
        assert genesis.transaction_hash is None


class TestLedgerPublication:
    """Tests for the network phase and its failure tolerance."""

    @pytest.mark.asyncio
    async def test_success_records_reference(self, fake_ledger, make_clock) -> None:
        engine = BlockEngine(ledger=fake_ledger, clock=make_clock())
        block = await engine.create_block({"podToken": "POD-2026-ABC", "status": "delivered"})

        assert block.transaction_hash == "0xtx1"
        assert fake_ledger.published == [("POD-2026-ABC", RecordType.DELIVERY_PROOF, block.hash)]
        assert verify_block(block)

    @pytest.mark.asyncio
    async def test_generic_record_identity(self, fake_ledger, make_clock) -> None:
        engine = BlockEngine(ledger=fake_ledger, clock=make_clock())
        block = await engine.create_block({"event": "harsh_braking"}, "0", 7)
        assert fake_ledger.published == [("BLK-7", RecordType.GENERIC, block.hash)]

    @pytest.mark.asyncio
    async def test_failure_is_absorbed(self, failing_ledger, make_clock) -> None:
        engine = BlockEngine(ledger=failing_ledger, clock=make_clock())
        block = await engine.create_block({"todToken": "TOD-2026-XYZ"}, "0", 1)
        assert block.transaction_hash is None
        assert verify_block(block)

    @pytest.mark.asyncio
    async def test_timeout_is_absorbed(self, slow_ledger, make_clock) -> None:
        engine = BlockEngine(ledger=slow_ledger, ledger_timeout=0.05, clock=make_clock())
        block = await engine.create_block({"a": 1})
        assert block.transaction_hash is None
        assert verify_block(block)

    @pytest.mark.asyncio
    async def test_disabled_ledger_leaves_reference_empty(self, engine: BlockEngine) -> None:
        block = await engine.create_block({"a": 1})
        assert block.transaction_hash is None

    @pytest.mark.asyncio
    async def test_publish_to_ledger_surfaces_failure(self, failing_ledger) -> None:
        engine = BlockEngine(ledger=failing_ledger)
        block = engine.create_block_local({"a": 1})
        with pytest.raises(LedgerError, match="BLK-1"):
            await engine.publish_to_ledger(block)

    @pytest.mark.asyncio
    async def test_publish_to_ledger_returns_reference(self, fake_ledger) -> None:
        engine = BlockEngine(ledger=fake_ledger)
        block = engine.create_block_local({"a": 1})
        assert await engine.publish_to_ledger(block) == "0xtx1"

    @pytest.mark.asyncio
    async def test_non_string_reference_is_stringified(self, make_clock) -> None:
        class NumericLedger:
            async def publish(self, record_id, record_type, hash):
                return 4242

            async def check_integrity(self, record_id, record_type, hash):
                return True

        engine = BlockEngine(ledger=NumericLedger(), clock=make_clock())
        block = await engine.create_block({"a": 1})
        assert block.transaction_hash == "4242"
        assert await engine.publish_to_ledger(block) == "4242"

    @pytest.mark.asyncio
    async def test_reference_does_not_affect_hash(self, fake_ledger) -> None:
        engine = _fixed_engine(ledger=fake_ledger)
        local = engine.create_block_local({"a": 1}, "0", 1)
        published = await engine.create_block({"a": 1}, "0", 1)
        assert published.hash == local.hash
        assert published.raw_hash_input == local.raw_hash_input

    @pytest.mark.asyncio
    async def test_check_ledger_integrity(self, fake_ledger, failing_ledger) -> None:
        engine = BlockEngine(ledger=fake_ledger)
        block = await engine.create_block({"a": 1})
        assert await engine.check_ledger_integrity(block)

        unreachable = BlockEngine(ledger=failing_ledger)
        assert not await unreachable.check_ledger_integrity(block)
