"""Clock readings, quarter arithmetic and time-string parsing."""

from __future__ import annotations

import calendar
import datetime as _dt
import re
import time

_WITH_SECONDS = re.compile(
    r"(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2}) "
    r"(?P<hour>\d{1,2}):(?P<minute>\d{2}):(?P<second>\d{2})"
    r"(?:[.,](?P<fraction>\d+))?",
    re.ASCII,
)
_WITHOUT_SECONDS = re.compile(
    r"(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2}) "
    r"(?P<hour>\d{1,2}):(?P<minute>\d{2})",
    re.ASCII,
)

_NANOS_PER_MILLI = 1_000_000
_NANOS_PER_MICRO = 1_000
_NANOS_PER_SECOND = 1_000_000_000


def get_now_second() -> int:
    """Current Unix time in whole seconds."""
    return time.time_ns() // _NANOS_PER_SECOND


def get_now_milli() -> int:
    """Current Unix time in milliseconds."""
    return time.time_ns() // _NANOS_PER_MILLI


def get_now_micro() -> int:
    """Current Unix time in microseconds."""
    return time.time_ns() // _NANOS_PER_MICRO


def get_now_nano() -> int:
    """Current Unix time in nanoseconds."""
    return time.time_ns()


def add_seconds_to_current_time(n: int) -> int:
    """Unix time in milliseconds, ``n`` seconds from now."""
    return (time.time_ns() + n * _NANOS_PER_SECOND) // _NANOS_PER_MILLI


def get_quarter_from_time(t: _dt.date) -> int:
    """Quarter of the year (1-4) that a date or datetime falls in."""
    return (t.month - 1) // 3 + 1


def get_now_quarter() -> int:
    """Quarter of the year (1-4) of the current local date."""
    return get_quarter_from_time(_dt.datetime.now())


def time_str_to_utc_milli(timestr: str) -> int:
    """Parse 'YYYY-MM-DD HH:MM[:SS[.fff]]' as UTC and return Unix milliseconds.

    A string with one colon is read without seconds; any other string is read
    with seconds, which may carry a fractional part. Returns 0 when the text
    does not parse or names an impossible date or time.
    """
    pattern = _WITHOUT_SECONDS if timestr.count(":") == 1 else _WITH_SECONDS
    match = pattern.fullmatch(timestr)
    if match is None:
        return 0
    fields = match.groupdict()
    year = int(fields["year"])
    month = int(fields["month"])
    day = int(fields["day"])
    hour = int(fields["hour"])
    minute = int(fields["minute"])
    second = int(fields.get("second") or 0)
    fraction = fields.get("fraction") or ""
    millis = int(fraction[:3].ljust(3, "0"))
    try:
        _dt.datetime(year, month, day, hour, minute, second)
    except ValueError:
        return 0
    seconds = calendar.timegm((year, month, day, hour, minute, second, 0, 0, 0))
    return seconds * 1000 + millis


def get_current_timezone_offset() -> int:
    """Whole hours the local time zone is ahead of UTC (negative to the west)."""
    offset = _dt.datetime.now().astimezone().utcoffset()
    seconds = int(offset.total_seconds()) if offset is not None else 0
    return int(seconds / 3600)