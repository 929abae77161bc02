"""Cache key builders for domain data, and the worker's default cache."""

from __future__ import annotations

from datetime import timedelta
from typing import Any

from matrixkit.localcache import LocalCache

_SEPARATOR = ":"


def _join(*parts: str) -> str:
    return _SEPARATOR.join(parts)


def constant_cache_key(project: str, dict_name: str) -> str:
    """Key for a project's constant dictionary."""
    return _join("constant", project, dict_name)


def entity_cache_key(project: str, context: str, entity: str, version: str) -> str:
    """Key for an entity definition."""
    return _join("entity", project, context, entity, version)


def entity_attr_cache_key(project: str, context: str, entity: str, version: str) -> str:
    """Key for an entity's attributes."""
    return _join("entity_attr", project, context, entity, version)


def context_cache_key(project: str, version: str) -> str:
    """Key for a project's contexts."""
    return _join("context", project, version)


def entity_event_cache_key(project: str, context: str, entity: str, version: str) -> str:
    """Key for an entity's events."""
    return _join("entity_event", project, context, entity, version)


def cached_user_ucode_key(ucode: str) -> str:
    """Key for a user looked up by user code."""
    return _join("user", ucode)


def cached_user_id_key(user_id: str) -> str:
    """Key for a user looked up by id."""
    return _join("user_id", user_id)


def worker_cache_key(project: str, context: str, entity: str, version: str) -> str:
    """Key for the worker serving an entity."""
    return _join("worker", project, context, entity, version)


class DefaultCache:
    """A local cache bound to the worker server that owns it."""

    def __init__(self, max_mem: int, default_timeout: float | timedelta, server: Any) -> None:
        self.cache = LocalCache(max_mem, default_timeout)
        self.server = server