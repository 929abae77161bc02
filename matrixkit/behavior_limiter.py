"""Limit how many times a user may fail at an action within a cache lifetime."""

from __future__ import annotations

import math
import re
from typing import Any

from matrixkit.localcache import LocalCache

_ZERO_DECIMAL = re.compile(r"([+-]?[0-9]+)\.0*", re.ASCII)


def _to_int(value: Any) -> int:
    """Lenient integer reading of a cached count; unreadable values give 0."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    if isinstance(value, str):
        if value != value.strip():
            return 0
        match = _ZERO_DECIMAL.fullmatch(value)
        text = match.group(1) if match else value
        try:
            return int(text, 0)
        except ValueError:
            return 0
    return 0


class UserBehaviorLimiter:
    """Counts failed attempts per key in a cache; the cache lifetime is the window.

    A key may act while its recorded count is at most ``max_times``. A key
    with no record counts as 1, and the first failure records 2.
    """

    def __init__(self, cache: LocalCache, max_times: int) -> None:
        self.cache = cache
        self.max_times = max_times

    def _count(self, behave_key: str) -> int:
        value = self.cache.get(behave_key)
        return 1 if value is None else _to_int(value)

    def can_execute(self, behave_key: str) -> bool:
        """Return True if the key is still under its limit."""
        return self._count(behave_key) <= self.max_times

    def exec_success(self, behave_key: str) -> None:
        """Clear the key's count after a successful attempt."""
        self.cache.delete(behave_key)

    def exec_failed(self, behave_key: str) -> None:
        """Record one more failed attempt for the key."""
        self.cache.put(behave_key, self._count(behave_key) + 1)