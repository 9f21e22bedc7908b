"""Per-address token-bucket rate limiter for handshake packets."""

from __future__ import annotations

import ipaddress
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

PACKETS_PER_SECOND = 20
PACKETS_BURSTABLE = 5
GARBAGE_COLLECT_TIME_NS = 1_000_000_000
PACKET_COST = 1_000_000_000 // PACKETS_PER_SECOND
MAX_TOKENS = PACKET_COST * PACKETS_BURSTABLE

_COLLECT_INTERVAL = 1.0


@dataclass
class _Entry:
    last_time: int
    tokens: int


class Ratelimiter:
    """Allows a small burst per address and then a steady packet rate.

    ``clock`` returns the current time in nanoseconds. Idle entries are
    dropped by a background collector once per second while the table
    has entries.
    """

    def __init__(self, clock: Optional[Callable[[], int]] = None) -> None:
        self._clock = clock or time.monotonic_ns
        self._lock = threading.Lock()
        self._table: dict = {}
        self._kick = threading.Event()
        self._stopped = threading.Event()
        self._collector = threading.Thread(target=self._collect, daemon=True)
        self._collector.start()

    def __enter__(self) -> "Ratelimiter":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _collect(self) -> None:
        while True:
            self._kick.wait()
            self._kick.clear()
            if self._stopped.is_set():
                return
            while not self._stopped.wait(_COLLECT_INTERVAL):
                if self.cleanup():
                    break
            else:
                return

    def close(self) -> None:
        """Stop the background collector."""
        self._stopped.set()
        self._kick.set()
        if self._collector.is_alive() and threading.current_thread() is not self._collector:
            self._collector.join(timeout=_COLLECT_INTERVAL * 2)

    def cleanup(self) -> bool:
        """Drop entries idle for over a second; report whether the table is empty."""
        with self._lock:
            now = self._clock()
            stale = [
                key
                for key, entry in self._table.items()
                if now - entry.last_time > GARBAGE_COLLECT_TIME_NS
            ]
            for key in stale:
                del self._table[key]
            return not self._table

    def allow(self, ip) -> bool:
        """Report whether a packet from ``ip`` may be processed now."""
        key = ipaddress.ip_address(ip)
        with self._lock:
            entry = self._table.get(key)
            now = self._clock()
            if entry is None:
                self._table[key] = _Entry(last_time=now, tokens=MAX_TOKENS - PACKET_COST)
                if len(self._table) == 1 and not self._stopped.is_set():
                    self._kick.set()
                return True

            entry.tokens = min(entry.tokens + (now - entry.last_time), MAX_TOKENS)
            entry.last_time = now
            if entry.tokens > PACKET_COST:
                entry.tokens -= PACKET_COST
                return True
            return False