"""
External ledger clients.

Publishing a block hash to an external ledger gives third parties an
independent anchor for the record. The ledger is optional and best-effort:
a block is valid the moment its hash is computed, whatever the ledger says.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

import httpx

from proofchain.core.config import Settings
from proofchain.core.logging import get_logger
from proofchain.modules.blockchain.records import RecordType

logger = get_logger(__name__)


class LedgerError(Exception):
    """Raised when a record could not be published to the ledger."""


@runtime_checkable
class LedgerPublisher(Protocol):
    """Client side of the external ledger contract."""

    async def publish(self, record_id: str, record_type: RecordType, hash: str) -> str | None:
        """Publish a record hash and return the ledger's transaction reference."""
        ...

    async def check_integrity(self, record_id: str, record_type: RecordType, hash: str) -> bool:
        """Ask the ledger whether it holds ``hash`` for the record."""
        ...


class NullLedgerPublisher:
    """Ledger stand-in used when publication is disabled."""

    async def publish(self, record_id: str, record_type: RecordType, hash: str) -> str | None:
        logger.debug("ledger_publish_skipped", record_id=record_id, reason="ledger disabled")
        return None

    async def check_integrity(self, record_id: str, record_type: RecordType, hash: str) -> bool:
        return False


class HttpLedgerPublisher:
    """Publish record hashes to an HTTP anchoring gateway.

    ``POST {base_url}/records`` with ``{recordId, recordType, dataHash}``
    answers ``{"transactionHash": ...}``; ``POST {base_url}/records/verify``
    with the same body answers ``{"valid": bool}``.
    """

    def __init__(self, base_url: str, *, api_key: str = "", timeout: float = 10.0) -> None:
        if not base_url.strip():
            raise ValueError("ledger base_url must not be empty")
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout

    @property
    def base_url(self) -> str:
        return self._base_url

    def _headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "User-Agent": "proofchain-ledger/1.0",
        }
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    @staticmethod
    def _body(record_id: str, record_type: RecordType, hash: str) -> dict[str, Any]:
        return {
            "recordId": record_id,
            "recordType": RecordType(record_type).value,
            "dataHash": hash,
        }

    async def publish(self, record_id: str, record_type: RecordType, hash: str) -> str | None:
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(
                    f"{self._base_url}/records",
                    json=self._body(record_id, record_type, hash),
                    headers=self._headers(),
                )
                response.raise_for_status()
                payload = response.json()
        except httpx.TimeoutException as exc:
            raise LedgerError(f"ledger publish timed out for {record_id}") from exc
        except httpx.HTTPError as exc:
            raise LedgerError(f"ledger publish failed for {record_id}: {exc}") from exc
        except ValueError as exc:
            raise LedgerError(f"ledger returned a non-JSON response for {record_id}") from exc

        tx_hash = payload.get("transactionHash") if isinstance(payload, dict) else None
        if not tx_hash:
            raise LedgerError(f"ledger response for {record_id} carried no transactionHash")
        logger.info("ledger_record_published", record_id=record_id, transaction_hash=tx_hash)
        return str(tx_hash)

    async def check_integrity(self, record_id: str, record_type: RecordType, hash: str) -> bool:
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(
                    f"{self._base_url}/records/verify",
                    json=self._body(record_id, record_type, hash),
                    headers=self._headers(),
                )
                response.raise_for_status()
                payload = response.json()
        except Exception:
            logger.warning("ledger_integrity_check_failed", record_id=record_id, exc_info=True)
            return False
        return bool(isinstance(payload, dict) and payload.get("valid") is True)


def build_ledger_publisher(settings: Settings) -> LedgerPublisher:
    """Choose the ledger client for the configured environment."""
    if settings.ledger_enabled:
        return HttpLedgerPublisher(
            settings.ledger_url,
            api_key=settings.ledger_api_key,
            timeout=settings.ledger_timeout_seconds,
        )
    return NullLedgerPublisher()
