"""Identifier generation for rows and stored objects.

Primary keys are RFC 9562 version 7 UUIDs: the high 48 bits hold a Unix
millisecond timestamp, so ids sort by creation time and can be generated
without a database round-trip. Object-store keys are ULIDs in their canonical
26-character Crockford base32 form.
"""

from __future__ import annotations

import secrets
import threading
import time
from uuid import UUID

_ULID_ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"

_RAND_BITS = 74  # rand_a (12 bits) + rand_b (62 bits)
_RAND_MASK = (1 << _RAND_BITS) - 1

_lock = threading.Lock()
_last_timestamp_ms = -1
_last_random = 0


def _next_uuid7_fields() -> tuple[int, int]:
    """Return (timestamp_ms, random) guaranteed to increase on every call."""
    global _last_timestamp_ms, _last_random

    with _lock:
        timestamp_ms = time.time_ns() // 1_000_000
        if timestamp_ms > _last_timestamp_ms:
            # Leave headroom in the counter so same-millisecond ids can increment.
            random = secrets.randbits(_RAND_BITS - 1)
        else:
            timestamp_ms = _last_timestamp_ms
            random = _last_random + 1
            if random > _RAND_MASK:
                timestamp_ms += 1
                random = secrets.randbits(_RAND_BITS - 1)

        _last_timestamp_ms = timestamp_ms
        _last_random = random
        return timestamp_ms, random


def uuid7() -> UUID:
    """Generate a time-ordered, process-monotonic version 7 UUID."""
    timestamp_ms, random = _next_uuid7_fields()

    rand_a = random >> 62
    rand_b = random & ((1 << 62) - 1)

    value = (timestamp_ms & ((1 << 48) - 1)) << 80
    value |= 0x7 << 76
    value |= rand_a << 64
    value |= 0b10 << 62
    value |= rand_b
    return UUID(int=value)


def generate_ulid(*, timestamp_ms: int | None = None) -> str:
    """Generate a ULID string: 48-bit millisecond timestamp plus 80 random bits."""
    ts_ms = int(time.time() * 1000) if timestamp_ms is None else int(timestamp_ms)
    if ts_ms < 0 or ts_ms >= (1 << 48):
        raise ValueError("timestamp_ms out of ULID 48-bit range")

    number = (ts_ms << 80) | int.from_bytes(secrets.token_bytes(10), byteorder="big")

    chars: list[str] = []
    for _ in range(26):
        number, remainder = divmod(number, 32)
        chars.append(_ULID_ALPHABET[remainder])
    return "".join(reversed(chars))
