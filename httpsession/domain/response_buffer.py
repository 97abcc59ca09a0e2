"""Append-only byte accumulator fed by the transport's write callback.

One buffer belongs to exactly one perform call: it is created at the start of
the call, bound to the transport handle, and released before the call returns.
"""
from __future__ import annotations

INITIAL_CAPACITY = 1024


class ResponseBuffer:
    def __init__(self, capacity: int = INITIAL_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._data = bytearray(capacity)
        self._size = 0
        self._released = False

    @property
    def size(self) -> int:
        return self._size

    @property
    def capacity(self) -> int:
        return len(self._data)

    @property
    def released(self) -> bool:
        return self._released

    def write(self, chunk: bytes) -> int:
        """Append chunk; returns the number of bytes consumed (0 once released)."""
        if self._released:
            return 0
        needed = self._size + len(chunk)
        if needed > len(self._data):
            new_capacity = len(self._data)
            while new_capacity < needed:
                new_capacity *= 2
            self._data.extend(bytes(new_capacity - len(self._data)))
        self._data[self._size:needed] = chunk
        self._size = needed
        return len(chunk)

    def getvalue(self) -> bytes:
        if self._released:
            raise RuntimeError("response buffer already released")
        return bytes(self._data[: self._size])

    def release(self) -> None:
        self._data = bytearray()
        self._size = 0
        self._released = True
