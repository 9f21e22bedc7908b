"""TAI64N timestamps with whitened sub-second precision."""

from __future__ import annotations

import struct
import time
from datetime import datetime, timedelta, timezone

TIMESTAMP_SIZE = 12
BASE = 0x400000000000000A
WHITENER_MASK = 0x1000000 - 1

_MASK64 = (1 << 64) - 1
_NS_PER_SECOND = 1_000_000_000
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class Timestamp(bytes):
    """A 12-byte TAI64N label: 8 bytes of seconds, 4 of nanoseconds."""

    def __new__(cls, value: bytes = bytes(TIMESTAMP_SIZE)) -> "Timestamp":
        if len(value) != TIMESTAMP_SIZE:
            raise ValueError(f"timestamp must be {TIMESTAMP_SIZE} bytes, got {len(value)}")
        return super().__new__(cls, value)

    def after(self, other: bytes) -> bool:
        """Report whether this timestamp is strictly later than ``other``."""
        return bytes(self) > bytes(other)

    def __str__(self) -> str:
        secs, nanos = struct.unpack(">QI", self)
        extra, nanos = divmod(nanos, _NS_PER_SECOND)
        moment = _EPOCH + timedelta(seconds=secs - BASE + extra)
        text = moment.strftime("%Y-%m-%d %H:%M:%S")
        if nanos:
            text += "." + f"{nanos:09d}".rstrip("0")
        return text + " +0000 UTC"


def stamp(unix_ns: int) -> Timestamp:
    """Build a timestamp from nanoseconds since the Unix epoch."""
    secs, nanos = divmod(unix_ns, _NS_PER_SECOND)
    return Timestamp(struct.pack(">QI", (BASE + secs) & _MASK64, nanos & ~WHITENER_MASK))


def now() -> Timestamp:
    """The current time as a timestamp."""
    return stamp(time.time_ns())