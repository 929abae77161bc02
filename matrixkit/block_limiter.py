"""Per-key rate limiting that delays callers instead of refusing them."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

from matrixkit.localcache import LocalCache

_NANOS_PER_SECOND = 1_000_000_000
_DEFAULT_SLACK = 10


class _LeakyBucket:
    """Spaces requests 1/rate seconds apart, allowing a burst of ``slack`` after idling."""

    def __init__(self, rate: int, slack: int = _DEFAULT_SLACK) -> None:
        if rate <= 0:
            raise ValueError(f"rate must be positive: {rate}")
        self._per_request = _NANOS_PER_SECOND // rate
        self._max_slack = slack * self._per_request
        self._next_issue = 0
        self._lock = threading.Lock()

    def take(self) -> float:
        with self._lock:
            now = time.time_ns()
            previous = self._next_issue
            if previous == 0 or (self._max_slack == 0 and now - previous > self._per_request):
                issue = now
            elif self._max_slack > 0 and now - previous > self._max_slack + self._per_request:
                issue = now - self._max_slack
            else:
                issue = previous + self._per_request
            self._next_issue = issue
        wait = issue - now
        if wait > 0:
            time.sleep(wait / _NANOS_PER_SECOND)
            return issue / _NANOS_PER_SECOND
        return now / _NANOS_PER_SECOND


def _equal_keys(behave_key: str, listed: str) -> bool:
    return behave_key == listed


class BlockRateLimiterMgr:
    """Keeps one rate limiter per behaviour key in a cache.

    ``take`` blocks until the key may proceed; whitelisted keys never wait.
    Blocking callers can pile up under heavy load.
    """

    def __init__(
        self,
        cache: LocalCache,
        rate: int,
        is_in_whitelist: Callable[[str, str], bool] | None = None,
    ) -> None:
        if cache is None:
            raise ValueError("BlockRateLimiterMgr must have cache")
        self.cache = cache
        self.rate = rate
        self.whitelist: list[str] = []
        self._is_in_whitelist = is_in_whitelist or _equal_keys

    def update_rate(self, rate: int) -> None:
        """Set the requests per second for limiters created from now on."""
        self.rate = rate

    def update_whitelist(self, behave_keys: str) -> None:
        """Replace the whitelist with comma-separated entries; '' empties it."""
        self.whitelist = behave_keys.split(",") if behave_keys else []

    def _whitelisted(self, behave_key: str) -> bool:
        return any(self._is_in_whitelist(behave_key, listed) for listed in self.whitelist)

    def take(self, behave_key: str) -> float:
        """Wait until the key may proceed; return the Unix time it was let through."""
        if self._whitelisted(behave_key):
            return time.time()
        limiter = self.cache.get(behave_key)
        if limiter is None:
            limiter = _LeakyBucket(self.rate)
            self.cache.put(behave_key, limiter)
        return limiter.take()


def is_in_ip_whitelist(ip: str, ip_pattern: str) -> bool:
    """Match a dotted IPv4 address against a pattern where '*' matches any segment."""
    ip_segments = ip.split(".")
    pattern_segments = ip_pattern.split(".")
    if len(ip_segments) != 4 or len(pattern_segments) != 4:
        return False
    return all(
        pattern == "*" or pattern == segment
        for segment, pattern in zip(ip_segments, pattern_segments)
    )