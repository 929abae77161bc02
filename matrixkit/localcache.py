"""In-process cache with per-entry expiry and a memory budget."""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

# Bookkeeping cost charged for every entry against the memory budget.
_ITEM_COST = 56


@dataclass
class _Entry:
    value: Any
    expires_at: float | None

    def expired(self, now: float) -> bool:
        return self.expires_at is not None and self.expires_at <= now


def _seconds(ttl: float | timedelta) -> float:
    if isinstance(ttl, timedelta):
        return ttl.total_seconds()
    return float(ttl)


class LocalCache:
    """Thread-safe key/value cache bounded by ``max_mem`` bytes.

    Each entry is charged a fixed bookkeeping cost; when the budget is full
    the least recently used entry is evicted. ``default_timeout`` is the
    lifetime in seconds used by :meth:`put`; 0 means entries never expire.
    """

    def __init__(self, max_mem: int, default_timeout: float | timedelta) -> None:
        if max_mem < 10:
            raise ValueError(f"max_mem must be at least 10 bytes: {max_mem}")
        self.max_mem = max_mem
        self.default_ttl = _seconds(default_timeout)
        self._capacity = max_mem // _ITEM_COST
        self._entries: OrderedDict[Hashable, _Entry] = OrderedDict()
        self._lock = threading.Lock()

    def _lookup(self, key: Hashable) -> _Entry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expired(time.monotonic()):
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return entry

    def _purge_expired(self, now: float) -> None:
        stale = [key for key, entry in self._entries.items() if entry.expired(now)]
        for key in stale:
            del self._entries[key]

    def _store(self, key: Hashable, value: Any, ttl: float) -> bool:
        if ttl < 0 or self._capacity == 0:
            return False
        now = time.monotonic()
        expires_at = now + ttl if ttl > 0 else None
        with self._lock:
            self._entries.pop(key, None)
            if len(self._entries) >= self._capacity:
                self._purge_expired(now)
            while len(self._entries) >= self._capacity:
                self._entries.popitem(last=False)
            self._entries[key] = _Entry(value, expires_at)
        return True

    def get(self, key: Hashable) -> Any:
        """Return the cached value, or None if it is missing or expired."""
        with self._lock:
            entry = self._lookup(key)
        return None if entry is None else entry.value

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return self._lookup(key) is not None

    def __len__(self) -> int:
        now = time.monotonic()
        with self._lock:
            return sum(1 for entry in self._entries.values() if not entry.expired(now))

    def get_or_hook(self, key: Hashable, hook: Callable[[], Any]) -> Any:
        """Return the cached value, or compute it with ``hook`` and cache it.

        A cached None counts as missing; a hook result of None is returned
        and not cached.
        """
        value = self.get(key)
        if value is not None:
            return value
        value = hook()
        if value is None:
            return None
        self.put(key, value)
        return value

    def put(self, key: Hashable, value: Any) -> bool:
        """Cache a value for the default lifetime; return whether it was stored."""
        return self._store(key, value, self.default_ttl)

    def put_with_ttl(self, key: Hashable, value: Any, ttl: float | timedelta) -> bool:
        """Cache a value for ``ttl`` seconds (0 means forever, negative is refused)."""
        return self._store(key, value, _seconds(ttl))

    def put_permanent(self, key: Hashable, value: Any) -> bool:
        """Cache a value that never expires."""
        return self._store(key, value, 0.0)

    def delete(self, key: Hashable) -> None:
        """Remove a key if present."""
        with self._lock:
            self._entries.pop(key, None)

    def flush(self) -> None:
        """Remove every entry."""
        with self._lock:
            self._entries.clear()