"""Sliding-window rate limiting that refuses excess requests instead of waiting."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from datetime import timedelta

from matrixkit.localcache import LocalCache


def _seconds(value: float | timedelta) -> float:
    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(value)


def _equal_keys(behave_key: str, listed: str) -> bool:
    return behave_key == listed


class UnBlockRateLimiter:
    """Allows at most ``max_requests`` per window of ``window_size`` seconds.

    A request that finds the window full is refused and starts a cooldown of
    ``cooldown_time`` seconds during which every request is refused.
    """

    def __init__(
        self,
        window_size: float | timedelta,
        max_requests: int,
        cooldown_time: float | timedelta,
    ) -> None:
        self.window_size = _seconds(window_size)
        self.max_requests = max_requests
        self.cooldown_time = _seconds(cooldown_time)
        self._cooldown_until: float | None = None
        self._window_start: float | None = None
        self._count = 0
        self._lock = threading.Lock()

    def allow(self) -> bool:
        """Return True and count the request if it may go ahead."""
        with self._lock:
            now = time.monotonic()
            if self._cooldown_until is not None and now < self._cooldown_until:
                return False
            if self._window_start is None or now - self._window_start >= self.window_size:
                self._window_start = now
                self._count = 0
            if self._count < self.max_requests:
                self._count += 1
                return True
            self._cooldown_until = now + self.cooldown_time
            return False


class UnBlockRateLimiterMgr:
    """Keeps one non-blocking limiter per behaviour key in a cache.

    Whitelisted keys are always allowed. A key is whitelisted when
    ``is_in_whitelist(key, entry)`` holds for some entry; by default that is
    plain equality.
    """

    def __init__(
        self,
        cache: LocalCache,
        window_size: float | timedelta,
        max_requests: int,
        cooldown_time: float | timedelta,
        is_in_whitelist: Callable[[str, str], bool] | None = None,
    ) -> None:
        if cache is None:
            raise ValueError("UnBlockRateLimiterMgr must have cache")
        self.cache = cache
        self.window_size = _seconds(window_size)
        self.max_requests = max_requests
        self.cooldown_time = _seconds(cooldown_time)
        self.whitelist: list[str] = []
        self._is_in_whitelist = is_in_whitelist or _equal_keys
        self._lock = threading.Lock()

    def update_whitelist(self, behave_keys: str) -> None:
        """Replace the whitelist with comma-separated entries; '' empties it."""
        self.whitelist = behave_keys.split(",") if behave_keys else []

    def _whitelisted(self, behave_key: str) -> bool:
        return any(self._is_in_whitelist(behave_key, listed) for listed in self.whitelist)

    def allow(self, behave_key: str) -> bool:
        """Return True if the key may act now; a new key gets a fresh limiter."""
        if self._whitelisted(behave_key):
            return True
        with self._lock:
            limiter = self.cache.get(behave_key)
            if limiter is None:
                limiter = UnBlockRateLimiter(
                    self.window_size, self.max_requests, self.cooldown_time
                )
                self.cache.put(behave_key, limiter)
        return limiter.allow()