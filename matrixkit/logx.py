"""Structured JSON-lines loggers with rotating files, and coloured console output."""

from __future__ import annotations

import json
import os
import sys
import time
from dataclasses import dataclass
from datetime import timedelta
from enum import IntEnum
from pathlib import Path
from typing import Any, Mapping

from matrixkit.funcs import gen_id, make_dir
from matrixkit.rotating import RotatingWriter

LOG_TYPE_EVENT = "event"
LOG_TYPE_RUNTIME = "runtime"
LOG_SUFFIX = "slice_log"
DEFAULT_BASE_DIR = "log"


class _Level(IntEnum):
    DEBUG = -1
    INFO = 0
    WARN = 1
    ERROR = 2
    FATAL = 5

    @property
    def label(self) -> str:
        return self.name.lower()


_LEVELS_BY_NAME = {
    "debug": _Level.DEBUG,
    "info": _Level.INFO,
    "warn": _Level.WARN,
    "warning": _Level.WARN,
    "error": _Level.ERROR,
    "fatal": _Level.FATAL,
}


def _level_from_str(level: str) -> _Level:
    return _LEVELS_BY_NAME.get(level.lower(), _Level.WARN)


@dataclass
class LogEntry:
    """One written log record."""

    id: str
    level: str
    caller: str
    msg: str
    created_at: int
    creator: str

    def to_record(self) -> dict[str, Any]:
        """The record with its wire key names, in written order."""
        return {
            "level": self.level,
            "createdAt": self.created_at,
            "caller": self.caller,
            "msg": self.msg,
            "id": self.id,
            "creator": self.creator,
        }

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> LogEntry:
        """Read an entry from a decoded log line; extra keys are ignored."""
        return cls(
            id=str(record.get("id", "")),
            level=str(record.get("level", "")),
            caller=str(record.get("caller", "")),
            msg=str(record.get("msg", "")),
            created_at=int(record.get("createdAt", 0)),
            creator=str(record.get("creator", "")),
        )


def _caller(depth: int) -> str:
    frame = sys._getframe(depth + 1)
    path = Path(frame.f_code.co_filename)
    return f"{path.parent.name}/{path.name}:{frame.f_lineno}"


class _BoundLogger:
    """Writes entries that share one id and the owner's creator field."""

    def __init__(self, owner: Logger, entry_id: str) -> None:
        self._owner = owner
        self.id = entry_id

    def _emit(self, level: _Level, msg: Any, fields: dict[str, Any]) -> None:
        self._owner._write(level, msg, _caller(2), self.id, fields)

    def debug(self, msg: Any, **fields: Any) -> None:
        self._emit(_Level.DEBUG, msg, fields)

    def info(self, msg: Any, **fields: Any) -> None:
        self._emit(_Level.INFO, msg, fields)

    def warn(self, msg: Any, **fields: Any) -> None:
        self._emit(_Level.WARN, msg, fields)

    def error(self, msg: Any, **fields: Any) -> None:
        self._emit(_Level.ERROR, msg, fields)

    def fatal(self, msg: Any, **fields: Any) -> None:
        """Write the entry, then exit with status 1."""
        self._emit(_Level.FATAL, msg, fields)
        raise SystemExit(1)


class Logger:
    """Writes JSON-lines entries at or above its level to a rotating file.

    A logger at debug level also copies every entry to stderr. Unknown level
    names mean warn; an empty base directory means 'log'.
    """

    def __init__(
        self,
        base_dir: str | os.PathLike[str],
        log_type: str,
        log_level: str,
        server_id: str,
        slice_period: float | timedelta,
    ) -> None:
        if not str(base_dir):
            base_dir = DEFAULT_BASE_DIR
        make_dir(base_dir)
        self.base_dir = str(base_dir)
        self.log_type = log_type
        self.server_id = server_id
        self._level = _level_from_str(log_level)
        self.writer = RotatingWriter(base_dir, log_type, LOG_SUFFIX, slice_period)

    @property
    def level_name(self) -> str:
        """The effective level: debug, info, warn, error or fatal."""
        return self._level.label

    def _write(
        self, level: _Level, msg: Any, caller: str, entry_id: str, fields: Mapping[str, Any]
    ) -> None:
        if level < self._level:
            return
        entry = LogEntry(
            id=entry_id,
            level=level.label,
            caller=caller,
            msg=str(msg),
            created_at=time.time_ns() // 1_000_000,
            creator=self.server_id,
        )
        record = entry.to_record()
        for key, value in fields.items():
            record.setdefault(key, value)
        line = json.dumps(record, ensure_ascii=False, default=str) + "\n"
        try:
            self.writer.write(line.encode("utf-8"))
        except (ValueError, OSError) as exc:
            print(f"log write error: {exc}", file=sys.stderr)
        if self._level == _Level.DEBUG:
            sys.stderr.write(line)

    def log(self) -> _BoundLogger:
        """A logger for entries carrying a fresh id and this server's id."""
        return _BoundLogger(self, gen_id())

    def shutdown(self) -> None:
        """Stop rotation and close the current file."""
        self.writer.stop()


_runtime_logger: Logger | None = None
_event_logger: Logger | None = None


def init_event_logger(
    base_dir: str | os.PathLike[str], server_id: str, slice_period: float | timedelta
) -> Logger:
    """Replace the global event logger with a new one at info level."""
    global _event_logger
    if _event_logger is not None:
        _event_logger.shutdown()
    _event_logger = Logger(base_dir, LOG_TYPE_EVENT, "info", server_id, slice_period)
    return _event_logger


def init_runtime_logger(
    base_dir: str | os.PathLike[str],
    log_level: str,
    server_id: str,
    slice_period: float | timedelta,
) -> Logger:
    """Replace the global runtime logger with a new one."""
    global _runtime_logger
    if _runtime_logger is not None:
        _runtime_logger.shutdown()
    _runtime_logger = Logger(base_dir, LOG_TYPE_RUNTIME, log_level, server_id, slice_period)
    return _runtime_logger


def event_logger() -> Logger | None:
    """The global event logger, or None before it is initialised."""
    return _event_logger


def log() -> _BoundLogger:
    """Entry logger of the global runtime logger; RuntimeError if it is not set up."""
    if _runtime_logger is None:
        raise RuntimeError("Runtime Logger is not initialized")
    return _runtime_logger.log()


def is_debugging() -> bool:
    """True when the global runtime logger runs at debug level."""
    return _runtime_logger is not None and _runtime_logger._level <= _Level.DEBUG


def _threshold(level: _Level) -> _Level:
    return _runtime_logger._level if _runtime_logger is not None else level


def _console(level: _Level, prefix: str, args: tuple[Any, ...]) -> None:
    if _threshold(level) <= level:
        print(prefix, *args)


def _consolef(level: _Level, prefix: str, fmt: str, args: tuple[Any, ...]) -> None:
    if _threshold(level) <= level:
        text = fmt % args if args else fmt
        print(f"{prefix} {text}")


_DEBUG_PREFIX = "\x1b[32m[DEBUG]\x1b[0m"
_INFO_PREFIX = "\x1b[34m[INFO]\x1b[0m"
_WARN_PREFIX = "\x1b[33m[WARN]\x1b[0m"
_ERROR_PREFIX = "\x1b[31m[ERROR]\x1b[0m"
_FATAL_PREFIX = "\x1b[31m[FATAL]\x1b[0m"


def debug(*args: Any) -> None:
    """Print to the console if the runtime level allows debug."""
    _console(_Level.DEBUG, _DEBUG_PREFIX, args)


def debugf(fmt: str, *args: Any) -> None:
    """Printf-style debug console output."""
    _consolef(_Level.DEBUG, _DEBUG_PREFIX, fmt, args)


def info(*args: Any) -> None:
    """Print to the console if the runtime level allows info."""
    _console(_Level.INFO, _INFO_PREFIX, args)


def infof(fmt: str, *args: Any) -> None:
    """Printf-style info console output."""
    _consolef(_Level.INFO, _INFO_PREFIX, fmt, args)


def warn(*args: Any) -> None:
    """Print to the console if the runtime level allows warn."""
    _console(_Level.WARN, _WARN_PREFIX, args)


def warnf(fmt: str, *args: Any) -> None:
    """Printf-style warn console output."""
    _consolef(_Level.WARN, _WARN_PREFIX, fmt, args)


def error(*args: Any) -> None:
    """Print to the console if the runtime level allows error."""
    _console(_Level.ERROR, _ERROR_PREFIX, args)


def errorf(fmt: str, *args: Any) -> None:
    """Printf-style error console output."""
    _consolef(_Level.ERROR, _ERROR_PREFIX, fmt, args)


def fatal(*args: Any) -> None:
    """Print to the console at fatal level; does not exit."""
    _console(_Level.FATAL, _FATAL_PREFIX, args)


def fatalf(fmt: str, *args: Any) -> None:
    """Printf-style fatal console output; does not exit."""
    _consolef(_Level.FATAL, _FATAL_PREFIX, fmt, args)