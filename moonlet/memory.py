"""Accounting of allocated memory and growth rules for vectors."""

from __future__ import annotations

import sys

__all__ = [
    "LuaMemoryError",
    "Allocator",
    "grow_size",
    "MEMERRMSG",
    "MIN_SIZE_ARRAY",
    "MAX_SIZET",
]

MEMERRMSG = "not enough memory"
MIN_SIZE_ARRAY = 4
MAX_SIZET = sys.maxsize * 2 + 1
_TOOBIG = "memory allocation error: block too big"


class LuaMemoryError(MemoryError):
    """Raised when an allocation cannot be satisfied."""

    def __init__(self, message: str = MEMERRMSG) -> None:
        super().__init__(message)


def grow_size(size: int, limit: int, errormsg: str) -> int:
    """Return the new size for a growing vector.

    Doubles the size (at least MIN_SIZE_ARRAY); if doubling would pass
    ``limit`` the limit is used, and if already at the limit
    OverflowError is raised with ``errormsg``.
    """
    if size >= limit // 2:
        if size >= limit:
            raise OverflowError(errormsg)
        return limit
    return max(size * 2, MIN_SIZE_ARRAY)


class Allocator:
    """Tracks the total number of bytes in use, optionally capped."""

    def __init__(self, limit: int | None = None) -> None:
        self.limit = limit
        self.total_bytes = 0

    def realloc(self, osize: int, nsize: int) -> int:
        """Resize a block from ``osize`` to ``nsize`` bytes.

        Growing past the limit raises LuaMemoryError; shrinking never
        fails. Returns the new total.
        """
        if osize < 0 or nsize < 0:
            raise ValueError("sizes must be non-negative")
        if osize > self.total_bytes:
            raise ValueError("block is larger than the memory in use")
        new_total = self.total_bytes - osize + nsize
        if nsize > osize and self.limit is not None and new_total > self.limit:
            raise LuaMemoryError()
        self.total_bytes = new_total
        return new_total

    def grow(self, size: int, limit: int, errormsg: str) -> int:
        """Grow a vector of one-unit elements and return its new size."""
        newsize = grow_size(size, limit, errormsg)
        self.realloc(size, newsize)
        return newsize

    def check_vector(self, n: int, elemsize: int) -> int:
        """Return the byte size of ``n`` elements, or raise if it is too big."""
        if elemsize <= 0:
            raise ValueError("element size must be positive")
        if n + 1 > MAX_SIZET // elemsize:
            raise OverflowError(_TOOBIG)
        return n * elemsize