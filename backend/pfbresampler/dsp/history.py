"""Sample history ring buffer.

Storage is mirrored: every sample is written at position p and p + capacity
of a 2 * capacity array, so the logical contents are always available as one
contiguous numpy view without copying. push/pop are O(1) amortized; the
buffer doubles its capacity when a push would overflow it.
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

from pfbresampler.typing import SampleArray

DEFAULT_CAPACITY = 1024


class HistoryBuffer:
    """FIFO of stream samples with random access relative to the oldest sample."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY, dtype: npt.DTypeLike = np.complex64):
        self.dtype = np.dtype(dtype)
        self._capacity = max(1, int(capacity))
        self._data = np.zeros(2 * self._capacity, dtype=self.dtype)
        self._head = 0
        self._size = 0

    def __len__(self) -> int:
        return self._size

    @property
    def capacity(self) -> int:
        return self._capacity

    def __getitem__(self, index: int) -> complex | float:
        if index < 0:
            index += self._size
        if not 0 <= index < self._size:
            raise IndexError(f"history index {index} out of range (size {self._size})")
        return self._data[self._head + index].item()

    def view(self) -> SampleArray:
        """Contiguous read-only view of the buffered samples, oldest first."""
        out = self._data[self._head : self._head + self._size]
        out.flags.writeable = False
        return out

    def push_back(self, value: complex | float) -> None:
        self.extend(np.asarray([value], dtype=self.dtype))

    def extend(self, values: npt.ArrayLike) -> None:
        """Append samples at the tail, growing the buffer if needed."""
        arr = np.asarray(values, dtype=self.dtype).ravel()
        n = arr.size
        if n == 0:
            return
        if self._size + n > self._capacity:
            self._grow(max(2 * self._capacity, self._size + n))

        idx = (self._head + self._size + np.arange(n)) % self._capacity
        self._data[idx] = arr
        self._data[idx + self._capacity] = arr
        self._size += n

    def pop_front(self, count: int = 1) -> int:
        """Drop up to count samples from the head; returns how many were dropped."""
        count = min(max(0, int(count)), self._size)
        self._head = (self._head + count) % self._capacity
        self._size -= count
        return count

    def resize(self, capacity: int) -> None:
        """Change capacity, never dropping buffered samples."""
        self._grow(max(1, int(capacity), self._size))

    def clear(self) -> None:
        self._head = 0
        self._size = 0

    def _grow(self, capacity: int) -> None:
        contents = self._data[self._head : self._head + self._size].copy()
        self._capacity = capacity
        self._data = np.zeros(2 * capacity, dtype=self.dtype)
        self._data[: self._size] = contents
        self._data[capacity : capacity + self._size] = contents
        self._head = 0
