"""Classification of block payloads into external ledger record types."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any


class RecordType(str, Enum):
    """Record kinds understood by the external ledger."""

    GENERIC = "GENERIC"
    DOCUMENT_TRANSFER = "TOD"
    DELIVERY_PROOF = "POD"
    VEHICLE_OWNERSHIP = "VAHAK"


@dataclass(frozen=True, slots=True)
class LedgerRecord:
    """Identity under which a block hash is published."""

    record_id: str
    record_type: RecordType


# Checked in order; the first marker present wins.
_MARKER_PRECEDENCE: tuple[tuple[str, RecordType], ...] = (
    ("todToken", RecordType.DOCUMENT_TRANSFER),
    ("podToken", RecordType.DELIVERY_PROOF),
    ("vahakDetails", RecordType.VEHICLE_OWNERSHIP),
)


def classify_record(data: Any, block_number: int) -> LedgerRecord:
    """Map a block payload to its ledger record identity.

    Transfer tokens take precedence over delivery tokens, which take
    precedence over vehicle details. Anything else, including non-mapping
    payloads and empty marker values, is a generic record.
    """
    if isinstance(data, Mapping):
        for marker, record_type in _MARKER_PRECEDENCE:
            value = data.get(marker)
            if not value:
                continue
            if record_type is RecordType.VEHICLE_OWNERSHIP:
                vehicle_number = data.get("vehicleNumber")
                record_id = str(vehicle_number) if vehicle_number else f"VAHAK-{block_number}"
                return LedgerRecord(record_id, record_type)
            return LedgerRecord(str(value), record_type)
    return LedgerRecord(f"BLK-{block_number}", RecordType.GENERIC)
