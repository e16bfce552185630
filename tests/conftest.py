"""
Pytest fixtures shared by the unit tests.
Provides isolated settings, deterministic clocks and in-memory ledger fakes.
"""

import asyncio
from collections.abc import Callable, Iterator

import pytest

from proofchain.core.config import get_settings
from proofchain.modules.blockchain.engine import BlockEngine
from proofchain.modules.blockchain.records import RecordType

FIXED_MILLIS = 1_700_000_000_000  # 2023-11-14T22:13:20Z


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Run every test against a known environment and a fresh settings cache."""
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.setenv("ENCRYPTION_KEY", "test-encryption-key")
    monkeypatch.delenv("LEDGER_ENABLED", raising=False)
    monkeypatch.delenv("LEDGER_URL", raising=False)
    monkeypatch.delenv("HASH_CANONICALIZATION", raising=False)
    monkeypatch.delenv("TOKEN_PREFIX", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class FakeLedger:
    """Ledger that remembers what was published to it."""

    def __init__(self) -> None:
        self.published: list[tuple[str, RecordType, str]] = []

    async def publish(self, record_id: str, record_type: RecordType, hash: str) -> str | None:
        self.published.append((record_id, record_type, hash))
        return f"0xtx{len(self.published)}"

    async def check_integrity(self, record_id: str, record_type: RecordType, hash: str) -> bool:
        return (record_id, record_type, hash) in self.published


class FailingLedger:
    """Ledger whose network calls always fail."""

    async def publish(self, record_id: str, record_type: RecordType, hash: str) -> str | None:
        raise ConnectionError("ledger node unreachable")

    async def check_integrity(self, record_id: str, record_type: RecordType, hash: str) -> bool:
        raise ConnectionError("ledger node unreachable")


class SlowLedger:
    """Ledger that never answers within a test-sized timeout."""

    async def publish(self, record_id: str, record_type: RecordType, hash: str) -> str | None:
        await asyncio.sleep(5)
        return "0xtoo-late"

    async def check_integrity(self, record_id: str, record_type: RecordType, hash: str) -> bool:
        await asyncio.sleep(5)
        return True


def ticking_clock(start: int = FIXED_MILLIS, step: int = 1000) -> Callable[[], int]:
    """Clock returning ``start``, ``start + step``, ... on successive calls."""
    state = {"now": start - step}

    def _clock() -> int:
        state["now"] += step
        return state["now"]

    return _clock


@pytest.fixture
def fake_ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def engine() -> BlockEngine:
    return BlockEngine(clock=ticking_clock())


@pytest.fixture
def failing_ledger() -> FailingLedger:
    return FailingLedger()


@pytest.fixture
def slow_ledger() -> SlowLedger:
    return SlowLedger()


@pytest.fixture
def make_clock() -> Callable[..., Callable[[], int]]:
    return ticking_clock
