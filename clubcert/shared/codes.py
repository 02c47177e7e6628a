from __future__ import annotations

import secrets
import string
import time

from .constants import VALIDATION_CODE_PREFIX, VALIDATION_SUFFIX_LENGTH, VERIFY_PATH

_BASE36 = string.digits + string.ascii_uppercase


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("base36 encoding requires a non-negative integer")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_validation_code(timestamp_ms: int | None = None) -> str:
    """Return CERT-<base36 ms timestamp>-<4 random base36 chars>."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    suffix = "".join(
        secrets.choice(_BASE36) for _ in range(VALIDATION_SUFFIX_LENGTH)
    )
    return f"{VALIDATION_CODE_PREFIX}-{to_base36(timestamp_ms)}-{suffix}"


def build_validation_url(base_url: str, code: str) -> str:
    return f"{base_url.rstrip('/')}{VERIFY_PATH}/{code}"
