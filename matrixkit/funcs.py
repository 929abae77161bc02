"""General helpers: validation, identifiers, hashing and environment lookup."""

from __future__ import annotations

import dataclasses
import hashlib
import ipaddress
import os
import random
import re
import secrets
import socket
import time
import uuid
from collections import Counter
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import psutil
from dotenv import load_dotenv

_CHARSET_MIXED = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
_CHARSET_LOWER = "abcdefghijklmnopqrstuvwxyz0123456789"
_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"
_CROCKFORD = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"

_EMAIL_RE = re.compile(r"\w+([-+.]\w+)*@\w+([-.]\w+)*\.\w+([-.]\w+)*", re.ASCII)
_PHONE_RE = re.compile(r"(\+)[1-9]\d{0,3}\d{3,15}", re.ASCII)
_IPV4_RE = re.compile(
    r"((25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\.){3}"
    r"(25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)",
    re.ASCII,
)
_INTEGER_RE = re.compile(r"[+-]?[0-9]+", re.ASCII)
_USERNAME_CHARS = frozenset("abcdefghijklmnopqrstuvwxyz0123456789_")

_DEFAULT_SALTED_SIZE = 24
_MD5_HEX_LENGTH = 32


def make_dir(dir_name: str | os.PathLike[str]) -> None:
    """Create a directory and its parents if it does not exist yet."""
    os.makedirs(dir_name, exist_ok=True)


def is_email(email: str) -> bool:
    """Return True if the text contains an e-mail address."""
    return _EMAIL_RE.search(email) is not None


def is_phone_number(phone_number: str) -> bool:
    """Validate an E.164 phone number; without a leading '+' assume +86."""
    if not phone_number.startswith("+"):
        phone_number = "+86" + phone_number
    return _PHONE_RE.fullmatch(phone_number) is not None


def _to_base36(number: int) -> str:
    digits = []
    while number > 0:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def gen_id() -> str:
    """Return a new ULID: 26 Crockford base32 characters, sortable by time."""
    millis = time.time_ns() // 1_000_000
    value = (millis << 80) | secrets.randbits(80)
    chars = []
    for _ in range(26):
        chars.append(_CROCKFORD[value & 0x1F])
        value >>= 5
    return "".join(reversed(chars))


def gen_tuuid(prefix: str = "") -> str:
    """Return '<base36 millisecond timestamp>-<random UUID>'.

    The prefix argument is accepted but not used.
    """
    millis = time.time_ns() // 1_000_000
    return f"{_to_base36(millis)}-{uuid.uuid4()}"


def _random_string(length: int, case_sensitive: bool) -> str:
    if length < 0:
        raise ValueError(f"length must not be negative: {length}")
    charset = _CHARSET_MIXED if case_sensitive else _CHARSET_LOWER
    return "".join(random.choices(charset, k=length))


def _random_string_with_time_salt(size: int, case_sensitive: bool) -> str:
    if size < 0:
        raise ValueError(f"size must not be negative: {size}")
    if size == 0:
        size = _DEFAULT_SALTED_SIZE
    salt = _to_base36(time.time_ns())
    remaining = size - len(salt)
    if remaining <= 0:
        return salt[:size]
    return salt + _random_string(remaining, case_sensitive)


def rand36_base_str_by_time_salt(size: int) -> str:
    """Lowercase alphanumeric string led by a base36 nanosecond timestamp.

    A size of 0 means 24 characters.
    """
    return _random_string_with_time_salt(size, False)


def rand62_base_str_by_time_salt(size: int) -> str:
    """Mixed-case alphanumeric string led by a base36 nanosecond timestamp.

    A size of 0 means 24 characters.
    """
    return _random_string_with_time_salt(size, True)


def rand36_base_str(size: int) -> str:
    """Random string of lowercase letters and digits."""
    return _random_string(size, False)


def rand62_base_str(size: int) -> str:
    """Random string of letters of both cases and digits."""
    return _random_string(size, True)


def gen_mark_from_str(text: str, length: int) -> str:
    """Return the first ``length`` characters of the uppercase MD5 hex digest."""
    if not 0 <= length <= _MD5_HEX_LENGTH:
        raise ValueError(f"length must be between 0 and {_MD5_HEX_LENGTH}: {length}")
    digest = hashlib.md5(text.encode("utf-8")).hexdigest()
    return digest.upper()[:length]


def get_sha1_from_str(text: str) -> str:
    """Return the lowercase SHA-1 hex digest of the text."""
    return hashlib.sha1(text.encode("utf-8")).hexdigest()


def str_contains(strs: Iterable[str], substr: str) -> bool:
    """Return True if any element equals ``substr``."""
    return substr in strs


_CODE_SIZE_LIMITS = (
    (200_000, 4),
    (5_000_000, 5),
    (100_000_000, 6),
    (5_000_000_000, 7),
    (100_000_000_000, 8),
    (10_000_000_000_000, 9),
    (100_000_000_000_000, 10),
    (1_000_000_000_000_000, 11),
    (40_000_000_000_000_000, 12),
)


def count_code_size(total: int) -> int:
    """Suggest a base36 share-code length for ``total`` records."""
    for limit, size in _CODE_SIZE_LIMITS:
        if total < limit:
            return size
    return 16


def _parse_int(text: str) -> int | None:
    if _INTEGER_RE.fullmatch(text) is None:
        return None
    return int(text)


def is_port_number(s: str) -> bool:
    """Return True if the text is an integer between 1 and 65535."""
    number = _parse_int(s)
    return number is not None and 1 <= number <= 65535


def is_equals_str_array(first: Iterable[str], second: Iterable[str]) -> bool:
    """Return True if both hold the same strings, ignoring order."""
    first_list, second_list = list(first), list(second)
    if len(first_list) != len(second_list):
        return False
    return Counter(first_list) == Counter(second_list)


def struct_to_log_str(obj: Any) -> str:
    """Render a record as 'field: value' pairs joined by ' --|-- '.

    Mappings are rendered as they are; objects that are neither a
    dataclass instance nor a named tuple give an empty string.
    """
    if isinstance(obj, Mapping):
        return str(obj)
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        pairs = [(field.name, getattr(obj, field.name)) for field in dataclasses.fields(obj)]
    elif isinstance(obj, tuple) and hasattr(obj, "_fields"):
        pairs = list(zip(obj._fields, obj))
    else:
        return ""
    return " --|-- ".join(f"{name}: {value}" for name, value in pairs)


def in_str_array(value: str, arr: Iterable[str]) -> bool:
    """Return True if ``value`` is in ``arr``."""
    return value in arr


def in_int_array(num: int, arr: Iterable[int]) -> bool:
    """Return True if ``num`` is in ``arr``."""
    return num in arr


def in_float64_array(num: float, arr: Iterable[float]) -> bool:
    """Return True if some element compares equal to ``num`` (NaN never does)."""
    return any(item == num for item in arr)


def extract_ip(endpoint: str) -> str:
    """Extract an IPv4 address from an endpoint, or return ''.

    Accepts a bare address, an address with a port, and either of those
    behind a scheme such as 'http://'.
    """
    if "://" in endpoint:
        parts = endpoint.split("://")
        if len(parts) > 1:
            endpoint = parts[1]
    if ":" in endpoint:
        endpoint = endpoint.split(":")[0]
    if _IPV4_RE.fullmatch(endpoint):
        return endpoint
    return ""


def is_user_name(username: str) -> bool:
    """Check the length is 2-20 bytes and that an allowed character occurs."""
    size = len(username.encode("utf-8"))
    return 2 <= size <= 20 and any(char in _USERNAME_CHARS for char in username)


def _split_host_port(hostport: str) -> tuple[str, str]:
    """Split 'host:port' or '[host]:port'; raise ValueError when malformed."""
    colon = hostport.rfind(":")
    if colon < 0:
        raise ValueError("missing port in address")
    start, end_offset = 0, 0
    if hostport.startswith("["):
        end = hostport.find("]")
        if end < 0:
            raise ValueError("missing ']' in address")
        if end + 1 == len(hostport):
            raise ValueError("missing port in address")
        if end + 1 != colon:
            if hostport[end + 1] == ":":
                raise ValueError("too many colons in address")
            raise ValueError("missing port in address")
        host = hostport[1:end]
        start, end_offset = 1, end + 1
    else:
        host = hostport[:colon]
        if ":" in host:
            raise ValueError("too many colons in address")
    if "[" in hostport[start:]:
        raise ValueError("unexpected '[' in address")
    if "]" in hostport[end_offset:]:
        raise ValueError("unexpected ']' in address")
    return host, hostport[colon + 1:]


def _is_ip(host: str) -> bool:
    if "%" in host:
        return False
    try:
        ipaddress.ip_address(host)
    except ValueError:
        return False
    return True


def _is_valid_domain(domain: str) -> bool:
    if not 1 <= len(domain.encode("utf-8")) <= 253:
        return False
    for label in domain.split("."):
        if not 1 <= len(label.encode("utf-8")) <= 63:
            return False
        if not all(char.isalpha() or char.isdecimal() or char == "-" for char in label):
            return False
        if label.startswith("-") or label.endswith("-"):
            return False
    return True


def _resolves(host: str) -> bool:
    try:
        socket.getaddrinfo(host, None)
    except (OSError, UnicodeError):
        return False
    return True


def is_endpoint(endpoint: str) -> bool:
    """Return True for 'host' or 'host:port' where host is an IP or a resolvable domain."""
    if "://" in endpoint:
        return False
    try:
        host, port = _split_host_port(endpoint)
    except ValueError:
        host = endpoint
    else:
        if _parse_int(port) is None:
            return False
    if _is_ip(host):
        return True
    if not _is_valid_domain(host):
        return False
    return _resolves(host)


def memory_runout(max_memory_usage: int) -> bool:
    """Return True if system memory use has reached the given percentage."""
    return psutil.virtual_memory().percent >= float(max_memory_usage)


def _overload(path: str) -> bool:
    if not Path(path).is_file():
        return False
    load_dotenv(path, override=True)
    return True


def get_env(key: str) -> str:
    """Look up an environment variable after loading '.env' and then 'init.env'.

    Values from '.env' override the process environment; if the key is still
    empty, 'init.env' is loaded (also overriding) before the final lookup.
    """
    if _overload(".env"):
        result = os.environ.get(key, "")
        if result:
            return result
    _overload("init.env")
    return os.environ.get(key, "")