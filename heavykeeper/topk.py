"""HeavyKeeper sketch for finding the top-k most frequent items in a stream."""

from __future__ import annotations

import math
import random
from collections.abc import Hashable
from dataclasses import dataclass
from typing import Generic, Protocol, TypeVar

from heavykeeper.errors import (
    IncompatibleDecayError,
    IncompatibleDepthError,
    IncompatibleTopItemsError,
    IncompatibleWidthError,
)
from heavykeeper.hashing import HashComposer
from heavykeeper.queue import TopKQueue

T = TypeVar("T", bound=Hashable)

DECAY_LOOKUP_SIZE = 1024
DEFAULT_SEED = 12345

_U64_MAX = (1 << 64) - 1
_SCALE = float(1 << 63)


class RandomSource(Protocol):
    """Anything that can produce uniformly random unsigned integers."""

    def getrandbits(self, k: int) -> int: ...


def _to_u64(value: float) -> int:
    """Convert a float to an unsigned 64-bit integer, saturating at the bounds."""
    if math.isnan(value) or value <= 0.0:
        return 0
    if math.isinf(value) or value >= float(1 << 64):
        return _U64_MAX
    return min(int(value), _U64_MAX)


def precompute_decay_thresholds(decay: float, num_entries: int) -> list[int]:
    """Return ``decay ** count`` scaled to 2**63 for every count below ``num_entries``."""
    return [_to_u64((decay ** count) * _SCALE) for count in range(num_entries)]


@dataclass(frozen=True)
class Node(Generic[T]):
    """An item tracked in the top-k list with its estimated count."""

    item: T
    count: int


@dataclass(slots=True)
class _Bucket:
    fingerprint: int = 0
    count: int = 0


class TopK(Generic[T]):
    """Tracks the ``k`` heaviest items using a decaying count sketch.

    ``width`` is the number of buckets per row, ``depth`` the number of rows
    and ``decay`` the base of the probability with which a colliding bucket
    loses one count. ``seed`` fixes the item hash; ``rng`` supplies the random
    bits for decay and defaults to a generator seeded with 0.
    """

    def __init__(
        self,
        k: int,
        width: int,
        depth: int,
        decay: float,
        seed: int = DEFAULT_SEED,
        rng: RandomSource | None = None,
    ) -> None:
        self.k = k
        self.width = width
        self.depth = depth
        self.decay = decay
        self.seed = seed
        self.decay_thresholds = precompute_decay_thresholds(decay, DECAY_LOOKUP_SIZE)
        self._rows = [[_Bucket() for _ in range(width)] for _ in range(depth)]
        self._queue: TopKQueue[T] = TopKQueue(k)
        self._rng: RandomSource = rng if rng is not None else random.Random(0)

    def _composer(self, item: T) -> HashComposer:
        return HashComposer.for_item(item, self.seed)

    def _sketch_min(self, item: T) -> int | None:
        composer = self._composer(item)
        fingerprint = composer.fingerprint
        matches = [
            bucket.count
            for depth_index, row in enumerate(self._rows)
            if (bucket := row[composer.next_bucket(self.width, depth_index)]).fingerprint
            == fingerprint
        ]
        return min(matches) if matches else None

    def query(self, item: T) -> bool:
        """Return True if ``item`` is in the top-k list or has a matching bucket."""
        if item in self._queue:
            return True
        return self._sketch_min(item) is not None

    def count(self, item: T) -> int:
        """Return the estimated count of ``item``, or 0 if it is unknown."""
        tracked = self._queue.get(item)
        if tracked is not None:
            return tracked
        return self.bucket_count(item)

    def bucket_count(self, item: T) -> int:
        """Return the smallest matching bucket count for ``item``, ignoring the top-k list."""
        found = self._sketch_min(item)
        return 0 if found is None else found

    def _decay_threshold(self, count: int) -> int:
        thresholds = self.decay_thresholds
        if count < len(thresholds):
            return thresholds[count]
        lookup_size = len(thresholds)
        base = thresholds[lookup_size - 1] / _SCALE
        divisor = lookup_size - 1
        quotient, remainder = divmod(count, divisor)
        remainder_threshold = thresholds[remainder] / _SCALE
        try:
            factor = base ** quotient
        except OverflowError:
            factor = math.inf
        return _to_u64(factor * remainder_threshold * _SCALE)

    def add(self, item: T, increment: int) -> None:
        """Record ``increment`` occurrences of ``item``."""
        composer = self._composer(item)
        fingerprint = composer.fingerprint
        max_count = 0

        for depth_index, row in enumerate(self._rows):
            bucket = row[composer.next_bucket(self.width, depth_index)]
            if bucket.fingerprint == fingerprint or bucket.count == 0:
                bucket.fingerprint = fingerprint
                bucket.count += increment
                max_count = max(max_count, bucket.count)
                continue

            remaining = increment
            while remaining > 0:
                threshold = self._decay_threshold(bucket.count)
                if self._rng.getrandbits(64) < threshold:
                    bucket.count = max(bucket.count - 1, 0)
                    if bucket.count == 0:
                        bucket.fingerprint = fingerprint
                        bucket.count = remaining
                        max_count = max(max_count, bucket.count)
                        break
                remaining -= 1

        if self._queue.is_full() and max_count < self._queue.min_count():
            return
        self._queue.upsert(item, max_count)

    def list(self) -> list[Node[T]]:
        """Return the tracked items, highest count first, ties in admission order."""
        return [Node(item, count) for item, count in self._queue]

    def debug(self) -> None:
        """Print the parameters, the non-empty buckets and the top-k list."""
        print(f"width: {self.width}")
        print(f"depth: {self.depth}")
        print(f"decay: {self.decay}")
        print(f"decay thresholds: {self.decay_thresholds}")
        occupied = [
            (bucket, row_index, column)
            for row_index, row in enumerate(self._rows)
            for column, bucket in enumerate(row)
            if bucket.count != 0
        ]
        occupied.sort(key=lambda entry: entry[0].count, reverse=True)
        for bucket, row_index, column in occupied:
            print(
                f"Bucket at row {row_index}, column {column}: "
                f"Bucket {{ fingerprint: {bucket.fingerprint}, count: {bucket.count} }}"
            )
        print("priority_queue: ")
        for node in self.list():
            print(f"Node - Item: {node.item!r}, Count: {node.count}")

    def merge(self, other: TopK[T]) -> None:
        """Fold the buckets and top-k list of ``other`` into this sketch."""
        if self.width != other.width:
            raise IncompatibleWidthError(self.width, other.width)
        if self.depth != other.depth:
            raise IncompatibleDepthError(self.depth, other.depth)
        if self.decay != other.decay:
            raise IncompatibleDecayError(self.decay, other.decay)
        if self.k != other.k:
            raise IncompatibleTopItemsError(self.k, other.k)

        for own_row, other_row in zip(self._rows, other._rows):
            for own, theirs in zip(own_row, other_row):
                if own.fingerprint == theirs.fingerprint:
                    own.count += theirs.count
                elif own.count == 0:
                    own.fingerprint = theirs.fingerprint
                    own.count = theirs.count

        for item, count in list(other._queue):
            current = self._queue.get(item) or 0
            self._queue.upsert(item, current + count)