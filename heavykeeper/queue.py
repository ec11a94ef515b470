"""Bounded min-heap that keeps the items with the highest counts."""

from __future__ import annotations

from collections.abc import Hashable, Iterator
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T", bound=Hashable)


@dataclass(slots=True)
class _Entry(Generic[T]):
    count: int
    sequence: int
    item: T
    position: int


class TopKQueue(Generic[T]):
    """Keeps at most ``capacity`` items, evicting the lowest count first.

    Items with equal counts are listed in the order they were first admitted.
    """

    def __init__(self, capacity: int) -> None:
        self.capacity = capacity
        self._entries: dict[T, _Entry[T]] = {}
        self._heap: list[_Entry[T]] = []
        self._sequence = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, item: object) -> bool:
        return item in self._entries

    def get(self, item: T) -> int | None:
        """Return the stored count of ``item``, or None if it is not tracked."""
        entry = self._entries.get(item)
        return None if entry is None else entry.count

    def min_count(self) -> int:
        """Return the smallest tracked count, or 0 when the queue is empty."""
        return self._heap[0].count if self._heap else 0

    def is_full(self) -> bool:
        return len(self._entries) >= self.capacity

    def upsert(self, item: T, count: int) -> None:
        """Set the count of ``item``, admitting it if there is room or it beats the minimum."""
        entry = self._entries.get(item)
        if entry is not None:
            if entry.count == count:
                return
            entry.count = count
            position = entry.position
            self._sift_down(position)
            self._sift_up(position)
            return

        if len(self._entries) < self.capacity:
            self._sequence += 1
            entry = _Entry(count, self._sequence, item, len(self._heap))
            self._heap.append(entry)
            self._entries[item] = entry
            self._sift_up(entry.position)
            return

        if self._heap and count > self._heap[0].count:
            del self._entries[self._heap[0].item]
            self._sequence += 1
            entry = _Entry(count, self._sequence, item, 0)
            self._heap[0] = entry
            self._entries[item] = entry
            self._sift_down(0)

    def __iter__(self) -> Iterator[tuple[T, int]]:
        """Yield ``(item, count)`` by count descending, then admission order."""
        ordered = sorted(self._heap, key=lambda e: (-e.count, e.sequence))
        return iter([(entry.item, entry.count) for entry in ordered])

    def _sift_up(self, position: int) -> None:
        heap = self._heap
        while position > 0:
            parent = (position - 1) >> 1
            if heap[parent].count > heap[position].count:
                self._swap(parent, position)
                position = parent
            else:
                break

    def _sift_down(self, position: int) -> None:
        heap = self._heap
        size = len(heap)
        while True:
            smallest = position
            left = 2 * position + 1
            right = left + 1
            if left < size and heap[left].count < heap[smallest].count:
                smallest = left
            if right < size and heap[right].count < heap[smallest].count:
                smallest = right
            if smallest == position:
                break
            self._swap(position, smallest)
            position = smallest

    def _swap(self, i: int, j: int) -> None:
        heap = self._heap
        heap[i], heap[j] = heap[j], heap[i]
        heap[i].position = i
        heap[j].position = j