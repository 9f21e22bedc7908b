"""Internet (ones' complement) checksums over packet data."""

from __future__ import annotations

import struct

_MASK64 = (1 << 64) - 1


class TooManySegmentsError(Exception):
    """Segmentation overflowed the supplied buffers; reading may continue."""

    def __init__(self, message: str = "too many segments") -> None:
        super().__init__(message)


def checksum_no_fold(data: bytes, initial: int = 0) -> int:
    """Ones' complement sum of ``data`` as big-endian 64-bit words, unfolded."""
    buf = bytes(data)
    pad = -len(buf) % 8
    if pad:
        buf += bytes(pad)
    total = initial + sum(struct.unpack(f">{len(buf) // 8}Q", buf))
    while total > _MASK64:
        total = (total & _MASK64) + (total >> 64)
    return total


def checksum(data: bytes, initial: int = 0) -> int:
    """Fold the ones' complement sum of ``data`` down to 16 bits."""
    acc = checksum_no_fold(data, initial)
    for _ in range(4):
        acc = (acc >> 16) + (acc & 0xFFFF)
    return acc & 0xFFFF


def pseudo_header_checksum_no_fold(
    protocol: int, src_addr: bytes, dst_addr: bytes, total_len: int
) -> int:
    """Unfolded sum of the TCP/UDP pseudo-header."""
    total = checksum_no_fold(src_addr, 0)
    total = checksum_no_fold(dst_addr, total)
    total = checksum_no_fold(bytes((0, protocol)), total)
    return checksum_no_fold((total_len & 0xFFFF).to_bytes(2, "big"), total)