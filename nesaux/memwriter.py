"""In-memory sink for written data: growing, fixed-size or truncating."""

from __future__ import annotations

import enum


class WriteMode(enum.Enum):
    """How a MemWriter treats data beyond its current capacity."""

    EXPANDING = "expanding"
    FIXED = "fixed"
    IGNORE_EXCESS = "ignore_excess"


class WriteOverflowError(Exception):
    """Raised when a fixed-size writer receives more data than it holds."""


class MemWriter:
    """Collects written bytes in memory.

    With no capacity the block grows as needed. With a capacity the block is
    fixed: excess data raises WriteOverflowError unless ignore_excess is set,
    in which case it is silently dropped.
    """

    def __init__(self, capacity: int | None = None, ignore_excess: bool = False) -> None:
        self._data = bytearray()
        if capacity is None:
            self._capacity = 0
            self._mode = WriteMode.EXPANDING
        else:
            if capacity < 0:
                raise ValueError("capacity must not be negative")
            self._capacity = capacity
            self._mode = WriteMode.IGNORE_EXCESS if ignore_excess else WriteMode.FIXED

    @property
    def mode(self) -> WriteMode:
        return self._mode

    @property
    def capacity(self) -> int:
        """Bytes that fit before the block has to grow or overflow."""
        return self._capacity

    def write(self, data: bytes) -> int:
        """Append data and return the number of bytes actually stored."""
        chunk = bytes(data)
        remain = self._capacity - len(self._data)
        if len(chunk) > remain:
            if self._mode is WriteMode.FIXED:
                raise WriteOverflowError("Tried to write more data than expected")
            if self._mode is WriteMode.IGNORE_EXCESS:
                chunk = chunk[:remain]
            else:
                needed = len(self._data) + len(chunk)
                self._capacity = needed + (needed >> 1) + 2048
        self._data += chunk
        return len(chunk)

    def getvalue(self) -> bytes:
        """Everything written so far."""
        return bytes(self._data)

    def __len__(self) -> int:
        return len(self._data)