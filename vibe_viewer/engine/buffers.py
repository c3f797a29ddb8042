"""
Fixed-capacity ordered buffers for display state.

Two eviction disciplines:
1. SeriesBuffer - append at tail, evict from head (time series, oldest first)
2. LogBuffer - prepend at head, evict from tail (feeds, newest first)

Both are backed by collections.deque with maxlen, so every insert is O(1)
and eviction removes exactly one element once the buffer is full.
"""

from __future__ import annotations

from collections import deque
from typing import Generic, Iterable, TypeVar

T = TypeVar("T")


def _check_capacity(capacity: int) -> int:
    if capacity < 1:
        raise ValueError(f"buffer capacity must be >= 1, got {capacity}")
    return capacity


class SeriesBuffer(Generic[T]):
    """
    Bounded series, oldest first.

    Thread-safety: NOT thread-safe. Guarded by the owning synchronizer.
    """

    __slots__ = ('capacity', '_items')

    def __init__(self, capacity: int, items: Iterable[T] = ()) -> None:
        self.capacity = _check_capacity(capacity)
        self._items: deque[T] = deque(items, maxlen=capacity)

    def append(self, item: T) -> None:
        """Add to the tail. When full, the head item is dropped."""
        self._items.append(item)

    def replace(self, items: Iterable[T]) -> None:
        """
        Replace all contents.

        Oversized input keeps only the newest `capacity` items, same as
        appending them one by one.
        """
        self._items = deque(items, maxlen=self.capacity)

    def clear(self) -> None:
        self._items.clear()

    def to_tuple(self) -> tuple[T, ...]:
        """Current contents, oldest first."""
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"SeriesBuffer(capacity={self.capacity}, len={len(self._items)})"


class LogBuffer(Generic[T]):
    """
    Bounded log, newest first.

    Thread-safety: NOT thread-safe. Guarded by the owning synchronizer.
    """

    __slots__ = ('capacity', '_items')

    def __init__(self, capacity: int) -> None:
        self.capacity = _check_capacity(capacity)
        self._items: deque[T] = deque(maxlen=capacity)

    def prepend(self, item: T) -> None:
        """Add to the head. When full, the tail (oldest) item is dropped."""
        self._items.appendleft(item)

    def clear(self) -> None:
        self._items.clear()

    def to_tuple(self) -> tuple[T, ...]:
        """Current contents, newest first."""
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"LogBuffer(capacity={self.capacity}, len={len(self._items)})"
