import time
from datetime import timedelta

import pytest

from matrixkit.block_limiter import is_in_ip_whitelist
from matrixkit.localcache import LocalCache
from matrixkit.unblock_limiter import UnBlockRateLimiter, UnBlockRateLimiterMgr


def _cache():
    return LocalCache(1 << 20, 60)


def test_first_requests_up_to_max_are_allowed():
    limiter = UnBlockRateLimiter(10, 3, 0)
    results = [limiter.allow() for _ in range(4)]
    assert results == [True, True, True, False]


def test_single_request_window_refuses_second():
    limiter = UnBlockRateLimiter(timedelta(milliseconds=300), 1, timedelta(microseconds=200))
    assert limiter.allow() is True
    assert limiter.allow() is False


def test_window_resets_after_it_passes():
    limiter = UnBlockRateLimiter(0.05, 1, 0)
    assert limiter.allow() is True
    assert limiter.allow() is False
    time.sleep(0.1)
    assert limiter.allow() is True


def test_cooldown_refuses_even_after_window():
    limiter = UnBlockRateLimiter(0.05, 1, 0.4)
    assert limiter.allow() is True
    assert limiter.allow() is False
    time.sleep(0.1)
    assert limiter.allow() is False
    time.sleep(0.45)
    assert limiter.allow() is True


def test_zero_max_never_allows():
    limiter = UnBlockRateLimiter(10, 0, 0)
    assert [limiter.allow() for _ in range(3)] == [False, False, False]


def test_manager_requires_cache():
    with pytest.raises(ValueError):
        UnBlockRateLimiterMgr(None, 1, 1, 1, None)


def test_manager_keeps_keys_independent():
    mgr = UnBlockRateLimiterMgr(_cache(), 10, 1, 10, None)
    assert mgr.allow("x") is True
    assert mgr.allow("x") is False
    assert mgr.allow("y") is True


def test_manager_whitelist_always_allows():
    mgr = UnBlockRateLimiterMgr(_cache(), 10, 1, 10, None)
    mgr.update_whitelist("a,b")
    assert mgr.whitelist == ["a", "b"]
    assert all(mgr.allow("a") for _ in range(5))
    assert mgr.allow("c") is True
    assert mgr.allow("c") is False


def test_manager_empty_whitelist_clears():
    mgr = UnBlockRateLimiterMgr(_cache(), 10, 1, 10, None)
    mgr.update_whitelist("a")
    mgr.update_whitelist("")
    assert mgr.whitelist == []
    assert mgr.allow("a") is True
    assert mgr.allow("a") is False


def test_manager_custom_whitelist_matcher():
    mgr = UnBlockRateLimiterMgr(_cache(), 10, 1, 10, is_in_ip_whitelist)
    mgr.update_whitelist("192.168.*.*")
    assert all(mgr.allow("192.168.1.1") for _ in range(3))
    assert mgr.allow("10.0.0.1") is True
    assert mgr.allow("10.0.0.1") is False


def test_manager_stores_limiter_in_cache():
    cache = _cache()
    mgr = UnBlockRateLimiterMgr(cache, 10, 2, 10, None)
    mgr.allow("k")
    stored = cache.get("k")
    assert isinstance(stored, UnBlockRateLimiter)
    assert stored.max_requests == 2