"""Human-readable record tokens and block nonces."""

from __future__ import annotations

import secrets
from datetime import datetime

from proofchain.core.config import get_settings
from proofchain.core.timestamps import utc_now_millis

_BASE36_DIGITS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
_TOKEN_RANDOM_BYTES = 4
NONCE_MAX = 2**32 - 1


def to_base36(value: int) -> str:
    """Uppercase base-36 representation of a non-negative integer."""
    if value < 0:
        raise ValueError("base36 encoding requires a non-negative integer")
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def generate_token(prefix: str | None = None) -> str:
    """Generate a unique token such as ``POD-2026-MGW3K1ZQ9F3A1C2B``.

    Layout is ``<PREFIX>-<YEAR>-<BASE36_MILLIS><RANDOM_HEX>``; the random
    suffix keeps tokens distinct within the same millisecond. Without an
    explicit prefix the configured ``token_prefix`` is used.
    """
    if prefix is None:
        prefix = get_settings().token_prefix
    millis = utc_now_millis()
    year = datetime.now().year
    random_part = secrets.token_hex(_TOKEN_RANDOM_BYTES).upper()
    return f"{prefix}-{year}-{to_base36(millis)}{random_part}"


def generate_nonce() -> int:
    """Uniform unsigned 32-bit nonce used to diversify block hash input."""
    return secrets.randbits(32)
