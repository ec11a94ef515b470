"""Seeded 64-bit item hashing and double-hash composition for sketch rows."""

from __future__ import annotations

import hashlib
import struct
from collections.abc import Hashable

_MASK64 = (1 << 64) - 1
_H2_MULTIPLIER = 0x517CC1B727220A95


def _rotate_left(value: int, shift: int) -> int:
    return ((value << shift) | (value >> (64 - shift))) & _MASK64


def _encode(item: Hashable) -> bytes:
    """Encode an item as tagged bytes so that equal items give equal bytes."""
    if isinstance(item, (bytes, bytearray, memoryview)):
        return b"b" + bytes(item)
    if isinstance(item, str):
        return b"s" + item.encode("utf-8")
    if isinstance(item, bool):
        return b"o" + (b"\x01" if item else b"\x00")
    if isinstance(item, int):
        return b"i" + str(item).encode("ascii")
    if isinstance(item, float):
        return b"f" + struct.pack(">d", item)
    if isinstance(item, tuple):
        parts = [_encode(part) for part in item]
        return b"t" + b"".join(struct.pack(">Q", len(p)) + p for p in parts)
    if isinstance(item, frozenset):
        parts = sorted(_encode(part) for part in item)
        return b"z" + b"".join(struct.pack(">Q", len(p)) + p for p in parts)
    return b"r" + repr(item).encode("utf-8")


def hash_item(item: Hashable, seed: int) -> int:
    """Return a deterministic unsigned 64-bit hash of ``item`` under ``seed``."""
    key = (seed & _MASK64).to_bytes(8, "little")
    digest = hashlib.blake2b(_encode(item), digest_size=8, key=key).digest()
    return int.from_bytes(digest, "little")


class HashComposer:
    """Derives a fingerprint and a sequence of bucket indices from one hash."""

    __slots__ = ("h1", "h2", "fingerprint")

    def __init__(self, h1: int) -> None:
        h1 &= _MASK64
        self.h1 = h1
        self.h2 = ((h1 >> 32) * _H2_MULTIPLIER) & _MASK64
        self.fingerprint = h1

    @classmethod
    def for_item(cls, item: Hashable, seed: int) -> "HashComposer":
        """Build a composer from the seeded hash of ``item``."""
        return cls(hash_item(item, seed))

    def next_bucket(self, width: int, depth: int) -> int:
        """Advance the hash for rows after the first and return a bucket index."""
        if depth > 0:
            self.h1 = _rotate_left((self.h1 + self.h2) & _MASK64, 5)
        return self.h1 % width