"""
Millisecond timestamp helpers.

Hashed structures carry timestamps as integer epoch milliseconds while
callers see timezone-aware ``datetime`` values. Conversions use integer
arithmetic so a value never drifts by a millisecond on the way back.
"""

from __future__ import annotations

import time
from datetime import UTC, datetime, timedelta

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_ONE_MS = timedelta(milliseconds=1)


def utc_now_millis() -> int:
    """Current time as integer milliseconds since the Unix epoch."""
    return time.time_ns() // 1_000_000


def from_epoch_millis(millis: int) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime.

    Raises ``ValueError`` for values outside the ``datetime`` range.
    """
    try:
        return EPOCH + timedelta(milliseconds=int(millis))
    except OverflowError as exc:
        raise ValueError(f"timestamp out of range: {millis!r}") from exc


def to_epoch_millis(value: datetime | int | float | str) -> int:
    """Convert a datetime, epoch-millis number, or ISO-8601 string to epoch millis.

    Naive datetimes are interpreted as UTC, which is how document stores hand
    back timestamps they received as UTC.
    """
    if isinstance(value, bool):
        raise TypeError("boolean is not a timestamp")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        try:
            return int(value)
        except OverflowError as exc:
            raise ValueError(f"timestamp out of range: {value!r}") from exc
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if not isinstance(value, datetime):
        raise TypeError(f"unsupported timestamp type: {type(value).__name__}")
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return (value - EPOCH) // _ONE_MS


def truncate_to_millis(value: datetime) -> datetime:
    """Drop sub-millisecond precision from a datetime."""
    return from_epoch_millis(to_epoch_millis(value))
