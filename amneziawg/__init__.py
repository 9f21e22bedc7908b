"""Building blocks for a userspace AmneziaWG daemon: replay filter, rate limiter,
TAI64N timestamps, checksums, cancelable I/O, UAPI sockets and DNS and dial helpers."""

__version__ = "0.1.0"

__all__ = [
    "checksum",
    "dnsutil",
    "ipc",
    "netaddr",
    "ratelimiter",
    "replay",
    "rwcancel",
    "tai64n",
]