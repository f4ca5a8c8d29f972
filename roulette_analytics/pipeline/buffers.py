"""
Reusable frame buffers
"""

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, List, Optional, Tuple

import numpy as np

from ..core import InvalidStateError


class FrameBuffer:
    """A pooled numpy array; valid until released"""

    def __init__(self, array: np.ndarray, pooled: bool):
        self._array: Optional[np.ndarray] = array
        self.pooled = pooled

    @property
    def array(self) -> np.ndarray:
        if self._array is None:
            raise InvalidStateError("Frame buffer used after release")
        return self._array

    @property
    def released(self) -> bool:
        return self._array is None

    def _detach(self) -> np.ndarray:
        array = self.array
        self._array = None
        return array


class FrameBufferPool:
    """Fixed-capacity free list of frame-sized arrays.

    When the pool is exhausted, buffers are allocated ad hoc and dropped on
    release instead of being returned.
    """

    def __init__(self, capacity: int = 8, shape: Optional[Tuple[int, ...]] = None, dtype=np.uint8):
        """
        Initialize pool

        Args:
            capacity: Number of reusable buffers
            shape: Frame shape; taken from the first frame when omitted
            dtype: Array dtype
        """
        self.capacity = capacity
        self.shape = tuple(shape) if shape is not None else None
        self.dtype = np.dtype(dtype)
        self.logger = logging.getLogger(__name__)

        self._free: List[np.ndarray] = []
        self._allocated = 0
        self._in_use = 0
        self._overflow_allocations = 0
        self._lock = threading.Lock()

    @property
    def in_use(self) -> int:
        return self._in_use

    @property
    def available(self) -> int:
        return len(self._free)

    @property
    def overflow_allocations(self) -> int:
        return self._overflow_allocations

    def acquire(self, shape: Optional[Tuple[int, ...]] = None) -> FrameBuffer:
        """Take a buffer from the pool, allocating one if none is free"""
        shape = tuple(shape) if shape is not None else self.shape
        if shape is None:
            raise ValueError("Buffer shape unknown; pass a shape or configure the pool with one")

        with self._lock:
            if self.shape is None:
                self.shape = shape

            if shape == self.shape:
                if self._free:
                    self._in_use += 1
                    return FrameBuffer(self._free.pop(), pooled=True)
                if self._allocated < self.capacity:
                    self._allocated += 1
                    self._in_use += 1
                    return FrameBuffer(np.empty(shape, dtype=self.dtype), pooled=True)

            self._overflow_allocations += 1
            self._in_use += 1

        self.logger.debug(f"Frame buffer pool exhausted, allocating ad hoc buffer {shape}")
        return FrameBuffer(np.empty(shape, dtype=self.dtype), pooled=False)

    def release(self, buffer: FrameBuffer):
        """Return a buffer to the pool; releasing twice is an error"""
        array = buffer._detach()
        with self._lock:
            self._in_use -= 1
            if buffer.pooled:
                self._free.append(array)

    def copy_in(self, frame: np.ndarray) -> FrameBuffer:
        """Acquire a buffer holding a copy of frame"""
        buffer = self.acquire(frame.shape)
        np.copyto(buffer.array, frame, casting='unsafe')
        return buffer

    @contextmanager
    def borrow(self, shape: Optional[Tuple[int, ...]] = None) -> Iterator[FrameBuffer]:
        """Acquire a buffer released on every exit path"""
        buffer = self.acquire(shape)
        try:
            yield buffer
        finally:
            self.release(buffer)

    @contextmanager
    def holding(self, buffer: FrameBuffer) -> Iterator[np.ndarray]:
        """Scope an already acquired buffer, releasing it on exit"""
        try:
            yield buffer.array
        finally:
            self.release(buffer)
