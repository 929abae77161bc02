"""Pooled byte buffers in power-of-two size classes from 64 B to 512 KiB."""

from __future__ import annotations

import threading
from collections import deque
from collections.abc import Callable

_SIZE_CLASSES = tuple(64 << shift for shift in range(14))
_MAX_FREE_PER_CLASS = 32


class _Pool:
    """Free list of bytearrays of one fixed capacity."""

    def __init__(self, capacity: int) -> None:
        self.capacity = capacity
        self._free: deque[bytearray] = deque()
        self._lock = threading.Lock()

    def acquire(self) -> bytearray:
        with self._lock:
            if self._free:
                return self._free.pop()
        return bytearray(self.capacity)

    def release(self, buffer: bytearray) -> None:
        with self._lock:
            if len(self._free) < _MAX_FREE_PER_CLASS:
                self._free.append(buffer)


_POOLS = tuple(_Pool(capacity) for capacity in _SIZE_CLASSES)


def get_buffer(size: int) -> tuple[memoryview, Callable[[], None]]:
    """Return a writable view of ``size`` bytes and a function that releases it.

    The view's ``obj`` is the backing bytearray, taken from the smallest
    size class that fits. Requests above 512 KiB get a fresh buffer that is
    not returned to any pool on release. Pooled buffers are not cleared
    between uses.
    """
    if size < 0:
        raise ValueError(f"buffer size must not be negative: {size}")
    for pool in _POOLS:
        if size <= pool.capacity:
            backing = pool.acquire()
            released = False

            def release() -> None:
                nonlocal released
                if not released:
                    released = True
                    pool.release(backing)

            return memoryview(backing)[:size], release

    holder = [bytearray(size)]

    def release_unpooled() -> None:
        holder.clear()

    return memoryview(holder[0]), release_unpooled