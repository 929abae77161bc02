import pytest

from matrixkit.behavior_limiter import UserBehaviorLimiter
from matrixkit.localcache import LocalCache


@pytest.fixture
def cache():
    return LocalCache(1 << 20, 60)


def test_fresh_key_is_allowed(cache):
    limiter = UserBehaviorLimiter(cache, 3)
    assert limiter.can_execute("login:alice") is True


def test_zero_limit_denies_fresh_key(cache):
    limiter = UserBehaviorLimiter(cache, 0)
    assert limiter.can_execute("login:alice") is False


def test_failures_eventually_block(cache):
    limiter = UserBehaviorLimiter(cache, 3)
    results = []
    for _ in range(3):
        limiter.exec_failed("k")
        results.append(limiter.can_execute("k"))
    assert results == [True, True, False]


def test_first_failure_records_two(cache):
    limiter = UserBehaviorLimiter(cache, 3)
    limiter.exec_failed("k")
    assert cache.get("k") == 2


def test_success_resets(cache):
    limiter = UserBehaviorLimiter(cache, 1)
    limiter.exec_failed("k")
    assert limiter.can_execute("k") is False
    limiter.exec_success("k")
    assert limiter.can_execute("k") is True
    assert cache.get("k") is None


def test_keys_are_independent(cache):
    limiter = UserBehaviorLimiter(cache, 1)
    limiter.exec_failed("a")
    assert limiter.can_execute("a") is False
    assert limiter.can_execute("b") is True


def test_string_counts_are_read(cache):
    limiter = UserBehaviorLimiter(cache, 3)
    cache.put("k", "5")
    assert limiter.can_execute("k") is False
    cache.put("k", "2.0")
    assert limiter.can_execute("k") is True


def test_unreadable_count_counts_as_zero(cache):
    limiter = UserBehaviorLimiter(cache, 0)
    cache.put("k", "garbage")
    assert limiter.can_execute("k") is True
    limiter.exec_failed("k")
    assert cache.get("k") == 1