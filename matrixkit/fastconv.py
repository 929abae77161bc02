"""Conversions between text and bytes, and splitting helpers."""

from __future__ import annotations

_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


def string_to_bytes(s: str) -> bytes:
    """Encode text as UTF-8 bytes, keeping undecodable bytes intact."""
    return s.encode(_ENCODING, _ERRORS)


def bytes_to_string(b: bytes | bytearray | memoryview) -> str:
    """Decode UTF-8 bytes to text; invalid bytes survive a round trip."""
    return bytes(b).decode(_ENCODING, _ERRORS)


def safe_split(s: str, sep: str) -> list[str]:
    """Split ``s`` on ``sep``; an empty string gives an empty list.

    An empty separator splits the text into its single characters.
    """
    if not s:
        return []
    if not sep:
        return list(s)
    return s.split(sep)


def safe_split_from_bytes(b: bytes | bytearray | memoryview, sep: str) -> list[str]:
    """Decode ``b`` and split it on ``sep``; empty input gives an empty list."""
    if not b:
        return []
    return safe_split(bytes_to_string(b), sep)