"""
Bounded hand-off between the frame producer and the processing worker
"""

import threading
from collections import deque
from typing import Callable, Deque, Generic, List, Optional, TypeVar

from ..core import InvalidStateError

T = TypeVar('T')


class FrameChannel(Generic[T]):
    """Bounded FIFO that drops the oldest item when full"""

    def __init__(self, capacity: int = 4, on_drop: Optional[Callable[[T], None]] = None):
        """
        Initialize channel

        Args:
            capacity: Maximum queued items
            on_drop: Called with each item evicted to make room
        """
        if capacity < 1:
            raise ValueError("Channel capacity must be at least 1")

        self.capacity = capacity
        self.on_drop = on_drop
        self._items: Deque[T] = deque()
        self._condition = threading.Condition()
        self._closed = False
        self.dropped = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        with self._condition:
            return len(self._items)

    def put(self, item: T) -> bool:
        """
        Enqueue an item, evicting the oldest one when full

        Returns:
            True if an older item was dropped
        """
        evicted = None
        dropped = False
        with self._condition:
            if self._closed:
                raise InvalidStateError("Channel is closed")
            if len(self._items) >= self.capacity:
                evicted = self._items.popleft()
                dropped = True
                self.dropped += 1
            self._items.append(item)
            self._condition.notify()

        if dropped and self.on_drop is not None:
            self.on_drop(evicted)
        return dropped

    def get(self, timeout: Optional[float] = None) -> Optional[T]:
        """Dequeue the oldest item; None on timeout or once closed and drained"""
        with self._condition:
            if not self._items and not self._closed:
                self._condition.wait(timeout)
            if self._items:
                return self._items.popleft()
            return None

    def close(self) -> List[T]:
        """Close the channel and return undelivered items"""
        with self._condition:
            self._closed = True
            remaining = list(self._items)
            self._items.clear()
            self._condition.notify_all()
        return remaining
