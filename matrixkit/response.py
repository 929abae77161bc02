"""The standard JSON response envelope returned by the API."""

from __future__ import annotations

import time
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from matrixkit.jsonx import marshal_to_str, unmarshal_from_bytes, unmarshal_from_str

# (JSON key, attribute, accepted type)
_FIELDS: tuple[tuple[str, str, type], ...] = (
    ("code", "code", str),
    ("createdAt", "created_at", int),
    ("message", "message", str),
    ("list", "items", list),
    ("total", "total", int),
    ("size", "size", int),
    ("page", "page", int),
)
_BY_FOLDED_KEY = {key.lower(): (attr, kind) for key, attr, kind in _FIELDS}


@dataclass
class JsonResponse:
    """Response envelope: status code, message, a page of items and paging info."""

    code: str = ""
    created_at: int = 0
    message: str = ""
    items: list[Any] = field(default_factory=list)
    total: int = 0
    size: int = 0
    page: int = 0

    def set_size_info(self, total: int, page: int, size: int) -> None:
        """Set the paging fields."""
        self.page = page
        self.size = size
        self.total = total

    def set_list(self, items: Iterable[Any], total: int, page: int) -> None:
        """Append items and set paging info; the size is the number appended."""
        added = list(items)
        self.items.extend(added)
        self.set_size_info(total, page, len(added))

    def to_json(self) -> str:
        """Serialise with the wire key names."""
        return marshal_to_str({key: getattr(self, attr) for key, attr, _ in _FIELDS})


def _accepts(kind: type, value: Any) -> bool:
    if kind is int:
        return isinstance(value, int) and not isinstance(value, bool)
    return isinstance(value, kind)


def _from_object(obj: Any) -> JsonResponse:
    response = JsonResponse()
    if obj is None:
        return response
    if not isinstance(obj, dict):
        raise ValueError(f"cannot read a response from JSON {type(obj).__name__}")
    for key, value in obj.items():
        spec = _BY_FOLDED_KEY.get(key.lower())
        if spec is None or value is None:
            continue
        attr, kind = spec
        if not _accepts(kind, value):
            raise ValueError(f"field {key!r} expects {kind.__name__}, got {type(value).__name__}")
        setattr(response, attr, list(value) if kind is list else value)
    return response


def new_json_response_from_str(data: str) -> JsonResponse:
    """Parse a response from JSON text; raises ValueError on bad JSON or field types."""
    return _from_object(unmarshal_from_str(data))


def new_json_response_from_bytes(data: bytes | bytearray | memoryview) -> JsonResponse:
    """Parse a response from JSON bytes; raises ValueError on bad JSON or field types."""
    return _from_object(unmarshal_from_bytes(data))


def default_json_with_msg(code: Any, message: str) -> JsonResponse:
    """A fresh response stamped with the current time in milliseconds."""
    code_text = str(getattr(code, "value", code))
    return JsonResponse(
        code=code_text,
        created_at=time.time_ns() // 1_000_000,
        message=message,
    )