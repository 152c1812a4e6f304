"""
Size-bounded FIFO used for the request log and the latency chart.

Appending past the cap drops entries from the front; nothing is evicted by
age or priority.
"""

from __future__ import annotations

from collections import deque
from typing import Callable, Deque, Generic, Iterator, List, TypeVar

T = TypeVar("T")


class RollingWindow(Generic[T]):
    def __init__(self, cap: int) -> None:
        if cap <= 0:
            raise ValueError("cap must be positive")
        self.cap = cap
        self._items: Deque[T] = deque()

    def append(self, item: T) -> None:
        self._items.append(item)
        while len(self._items) > self.cap:
            self._items.popleft()

    def replace(self, match: Callable[[T], bool], item: T) -> bool:
        """Swap the newest element satisfying *match* for *item*; ``False`` if none."""
        for idx in range(len(self._items) - 1, -1, -1):
            if match(self._items[idx]):
                self._items[idx] = item
                return True
        return False

    def clear(self) -> None:
        self._items.clear()

    def to_list(self) -> List[T]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)
