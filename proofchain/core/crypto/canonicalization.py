"""Canonicalization helpers for stable cross-platform hashing."""

from __future__ import annotations

import json
from datetime import UTC, date, datetime
from typing import Any

import rfc8785

CANONICALIZATION_COMPACT_JSON = "compact-json"
CANONICALIZATION_RFC8785 = "rfc8785"

SUPPORTED_CANONICALIZATIONS = frozenset(
    {CANONICALIZATION_COMPACT_JSON, CANONICALIZATION_RFC8785}
)


class UnsupportedCanonicalizationError(ValueError):
    """Raised when an unknown canonicalization mode is requested."""


def ensure_canonicalization(canonicalization: str) -> str:
    if canonicalization not in SUPPORTED_CANONICALIZATIONS:
        raise UnsupportedCanonicalizationError(
            f"Unsupported hash canonicalization: {canonicalization}"
        )
    return canonicalization


def _json_default(value: Any) -> Any:
    """Serialize the non-JSON types callers commonly put into payloads."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        value = value.astimezone(UTC)
        return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    return str(value)


def canonicalize_compact_json(data: Any) -> str:
    """Return compact JSON in insertion order.

    Mirrors ``JSON.stringify`` output for plain JSON values, which is the form
    every block persisted so far was hashed over.
    """
    return json.dumps(
        data,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
        default=_json_default,
    )


def canonicalize_jcs(data: Any) -> str:
    """Return RFC 8785 (JCS) canonical text."""
    plain = json.loads(canonicalize_compact_json(data))
    canonical = rfc8785.dumps(plain)
    if isinstance(canonical, bytes):
        return canonical.decode("utf-8")
    return str(canonical)


def canonical_json(data: Any, *, canonicalization: str = CANONICALIZATION_COMPACT_JSON) -> str:
    """Serialize ``data`` with the selected canonicalization mode.

    Parameters
    ----------
    data:
        Any JSON-serializable value.
    canonicalization:
        ``compact-json`` (default, key order preserved) or ``rfc8785``
        (sorted keys, JCS number formatting).

    Returns
    -------
    str
        The canonical text that gets hashed.
    """
    ensure_canonicalization(canonicalization)
    if canonicalization == CANONICALIZATION_RFC8785:
        return canonicalize_jcs(data)
    return canonicalize_compact_json(data)
