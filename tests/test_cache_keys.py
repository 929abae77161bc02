import pytest

from matrixkit import cache_keys
from matrixkit.localcache import LocalCache


def test_constant_cache_key():
    assert cache_keys.constant_cache_key("proj", "colors") == "constant:proj:colors"


def test_entity_cache_key():
    key = cache_keys.entity_cache_key("proj", "ctx", "order", "1.0.0")
    assert key == "entity:proj:ctx:order:1.0.0"


def test_entity_attr_cache_key():
    key = cache_keys.entity_attr_cache_key("proj", "ctx", "order", "1.0.0")
    assert key == "entity_attr:proj:ctx:order:1.0.0"


def test_context_cache_key():
    assert cache_keys.context_cache_key("proj", "1.0.0") == "context:proj:1.0.0"


def test_entity_event_cache_key():
    key = cache_keys.entity_event_cache_key("proj", "ctx", "order", "1.0.0")
    assert key == "entity_event:proj:ctx:order:1.0.0"


def test_user_keys():
    assert cache_keys.cached_user_ucode_key("u42") == "user:u42"
    assert cache_keys.cached_user_id_key("id7") == "user_id:id7"


def test_worker_cache_key():
    key = cache_keys.worker_cache_key("proj", "ctx", "order", "1.0.0")
    assert key == "worker:proj:ctx:order:1.0.0"


def test_entity_keys_differ_by_kind():
    args = ("proj", "ctx", "order", "1.0.0")
    keys = {
        cache_keys.entity_cache_key(*args),
        cache_keys.entity_attr_cache_key(*args),
        cache_keys.entity_event_cache_key(*args),
        cache_keys.worker_cache_key(*args),
    }
    assert len(keys) == 4


def test_empty_parts_keep_separators():
    assert cache_keys.context_cache_key("", "") == "context::"


def test_default_cache_holds_server_and_working_cache():
    server = object()
    default = cache_keys.DefaultCache(1 << 20, 60, server)
    assert default.server is server
    assert isinstance(default.cache, LocalCache)
    key = cache_keys.cached_user_id_key("id7")
    default.cache.put(key, {"name": "someone"})
    assert default.cache.get(key) == {"name": "someone"}


def test_default_cache_rejects_tiny_budget():
    with pytest.raises(ValueError):
        cache_keys.DefaultCache(5, 60, None)