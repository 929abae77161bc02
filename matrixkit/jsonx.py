"""JSON encoding and decoding, path lookups, and JWT claim extraction."""

from __future__ import annotations

import base64
import binascii
import dataclasses
import json
import math
import re
from typing import Any

_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1
_TRUE_WORDS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_GO_INT_RE = re.compile(r"-?[0-9]+", re.ASCII)
_BASE64URL_RE = re.compile(r"[A-Za-z0-9_-]*", re.ASCII)
_COMPACT = (",", ":")
_MISSING = object()


class _Number(float):
    """A parsed JSON fraction that remembers the text it came from."""

    __slots__ = ("raw",)

    def __new__(cls, text: str) -> _Number:
        number = super().__new__(cls, text)
        number.raw = text
        return number


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON constant: {name}")


def _default(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(value)).decode("ascii")
    raise TypeError(f"object of type {type(value).__name__} is not JSON serializable")


def marshal_to_bytes(value: Any) -> bytes:
    """Encode a value as compact UTF-8 JSON.

    Dataclass instances become objects and byte strings become base64 text.
    Raises TypeError for values with no JSON form and ValueError for NaN or
    infinities.
    """
    return marshal_to_str(value).encode("utf-8")


def marshal_to_str(value: Any) -> str:
    """Encode a value as compact JSON text."""
    return json.dumps(
        value,
        ensure_ascii=False,
        separators=_COMPACT,
        allow_nan=False,
        default=_default,
    )


def unmarshal_from_str(data: str) -> Any:
    """Decode JSON text; raises ValueError if it is not valid JSON."""
    return json.loads(data, parse_constant=_reject_constant)


def unmarshal_from_bytes(data: bytes | bytearray | memoryview) -> Any:
    """Decode JSON from UTF-8 bytes; raises ValueError if it is not valid JSON."""
    return json.loads(bytes(data), parse_constant=_reject_constant)


def _load(text: str) -> Any:
    try:
        return json.loads(text, parse_float=_Number, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        return _MISSING


def _plain(value: Any) -> Any:
    if isinstance(value, _Number):
        return float(value)
    if isinstance(value, list):
        return [_plain(item) for item in value]
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    return value


def _split_path(path: str) -> list[str]:
    """Split on dots that are not escaped; components keep their escapes."""
    parts: list[str] = []
    current: list[str] = []
    escaped = False
    for char in path:
        if escaped:
            current.append(char)
            escaped = False
        elif char == "\\":
            current.append(char)
            escaped = True
        elif char == ".":
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    parts.append("".join(current))
    return parts


def _unescape(component: str) -> str:
    return re.sub(r"\\(.)", r"\1", component, flags=re.DOTALL)


def _wildcard_regex(component: str) -> re.Pattern[str] | None:
    pieces: list[str] = []
    has_wildcard = False
    chars = iter(component)
    for char in chars:
        if char == "\\":
            literal = next(chars, "")
            pieces.append(re.escape(literal))
        elif char == "*":
            pieces.append(".*")
            has_wildcard = True
        elif char == "?":
            pieces.append(".")
            has_wildcard = True
        else:
            pieces.append(re.escape(char))
    if not has_wildcard:
        return None
    return re.compile("".join(pieces), re.DOTALL)


def _resolve(value: Any, parts: list[str]) -> Any:
    if not parts:
        return value
    head, rest = parts[0], parts[1:]
    if isinstance(value, list):
        if head == "#":
            if not rest:
                return len(value)
            found = (_resolve(item, rest) for item in value)
            return [item for item in found if item is not _MISSING]
        key = _unescape(head)
        if key.isascii() and key.isdigit():
            index = int(key)
            if index < len(value):
                return _resolve(value[index], rest)
        return _MISSING
    if isinstance(value, dict):
        pattern = _wildcard_regex(head)
        if pattern is not None:
            for key, item in value.items():
                if pattern.fullmatch(key):
                    return _resolve(item, rest)
            return _MISSING
        key = _unescape(head)
        if key in value:
            return _resolve(value[key], rest)
    return _MISSING


def _get(json_text: str, path: str) -> Any:
    if not path:
        return _MISSING
    root = _load(json_text)
    if root is _MISSING:
        return _MISSING
    return _resolve(root, _split_path(path))


def _clamp_int64(number: int) -> int:
    return max(_INT64_MIN, min(_INT64_MAX, number))


def get_int64_from_json(json_text: str, path: str) -> int:
    """Integer at ``path``; 0 if it is missing or has no integer reading.

    Fractions are truncated, booleans count as 1 and 0, and strings must
    hold a plain decimal integer.
    """
    value = _get(json_text, path)
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return _clamp_int64(value)
    if isinstance(value, float):
        return _clamp_int64(int(value)) if math.isfinite(value) else 0
    if isinstance(value, str) and _GO_INT_RE.fullmatch(value):
        return _clamp_int64(int(value))
    return 0


def get_string_from_json(json_text: str, path: str) -> str:
    """Text at ``path``; numbers keep their written form, objects and arrays give JSON."""
    value = _get(json_text, path)
    if value is _MISSING or value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, _Number):
        return value.raw
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value
    return json.dumps(_plain(value), ensure_ascii=False, separators=_COMPACT)


def get_bool_from_json(json_text: str, path: str) -> bool:
    """Boolean at ``path``; numbers are true when non-zero, strings like 'true' or '1' are true."""
    value = _get(json_text, path)
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value in _TRUE_WORDS
    return False


def get_float64_from_json(json_text: str, path: str) -> float:
    """Number at ``path`` as a float; 0.0 if it is missing or not numeric."""
    value = _get(json_text, path)
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        if value != value.strip() or "_" in value:
            return 0.0
        try:
            return float(value)
        except ValueError:
            return 0.0
    return 0.0


def get_array_from_json(json_text: str, path: str) -> list[Any]:
    """Array at ``path``; a single non-array value is wrapped, missing or null gives []."""
    value = _get(json_text, path)
    if value is _MISSING or value is None:
        return []
    if isinstance(value, list):
        return _plain(value)
    return [_plain(value)]


def get_map_from_json(json_text: str, path: str) -> dict[str, Any]:
    """Object at ``path``; anything else gives an empty dict."""
    value = _get(json_text, path)
    if isinstance(value, dict):
        return _plain(value)
    return {}


def is_json(text: str) -> bool:
    """Return True if the text is valid JSON."""
    return _load(text) is not _MISSING


def unmarshal_to_map(json_text: str) -> dict[str, Any]:
    """Decode a JSON object; anything else, or invalid JSON, gives an empty dict."""
    value = _load(json_text)
    if isinstance(value, dict):
        return _plain(value)
    return {}


def get_jwt_token_claims(token: str) -> dict[str, Any]:
    """Return the claims in a JWT's payload without checking its signature.

    Raises ValueError if the token does not have three parts, or if the
    payload is not unpadded base64url holding a JSON object.
    """
    parts = token.split(".")
    if len(parts) != 3:
        raise ValueError("malformed JWT: expected three dot-separated parts")
    segment = parts[1]
    if not _BASE64URL_RE.fullmatch(segment) or len(segment) % 4 == 1:
        raise ValueError("error decoding payload: illegal base64url data")
    try:
        payload = base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"error decoding payload: {exc}") from exc
    try:
        claims = unmarshal_from_bytes(payload)
    except ValueError as exc:
        raise ValueError(f"error decoding JSON: {exc}") from exc
    if claims is None:
        return {}
    if not isinstance(claims, dict):
        raise ValueError("error decoding JSON: payload is not an object")
    return claims