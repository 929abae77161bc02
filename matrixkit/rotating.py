"""A log file writer that switches to a fresh file at a fixed interval."""

from __future__ import annotations

import os
import sys
import threading
import time
from datetime import timedelta
from pathlib import Path
from typing import BinaryIO

MIN_INTERVAL = 5.0
_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"


def _to_seconds(interval: float | timedelta) -> float:
    if isinstance(interval, timedelta):
        return interval.total_seconds()
    return float(interval)


class RotatingWriter:
    """Appends to ``{base_dir}/{prefix}.{YYYYmmdd_HHMMSS}.{suffix}``.

    A background thread opens a new file every ``interval`` seconds; intervals
    of 5 seconds or less are raised to 5 seconds. If a file cannot be opened
    the failure is reported on stderr and writes raise ValueError until a
    later rotation succeeds.
    """

    def __init__(
        self,
        base_dir: str | os.PathLike[str],
        file_prefix: str,
        log_suffix: str,
        interval: float | timedelta,
    ) -> None:
        self.base_dir = Path(base_dir)
        self.file_prefix = file_prefix
        self.log_suffix = log_suffix
        self.interval = max(_to_seconds(interval), MIN_INTERVAL)
        self._lock = threading.Lock()
        self._file: BinaryIO | None = None
        self._path: Path | None = None
        self._stopped = threading.Event()
        self.rotate()
        self._thread = threading.Thread(
            target=self._run, name=f"rotate-{file_prefix}", daemon=True
        )
        self._thread.start()

    @property
    def path(self) -> Path | None:
        """The file currently written to, or None if none is open."""
        return self._path

    def _run(self) -> None:
        while not self._stopped.wait(self.interval):
            self.rotate()

    def _close_current(self) -> None:
        if self._file is None:
            return
        try:
            self._file.flush()
            os.fsync(self._file.fileno())
        except OSError:
            pass
        finally:
            self._file.close()
            self._file = None
            self._path = None

    def rotate(self) -> None:
        """Close the current file and open a new one named after the current time."""
        with self._lock:
            self._close_current()
            timestamp = time.strftime(_TIMESTAMP_FORMAT)
            path = self.base_dir / f"{self.file_prefix}.{timestamp}.{self.log_suffix}"
            try:
                self._file = open(path, "ab")
            except OSError as exc:
                print(f"Failed to rotate log file: {exc}", file=sys.stderr)
                return
            self._path = path

    def write(self, data: bytes | bytearray | memoryview) -> int:
        """Append bytes to the current file and return how many were written."""
        with self._lock:
            if self._file is None:
                raise ValueError("log file not initialized")
            payload = bytes(data)
            self._file.write(payload)
            self._file.flush()
            return len(payload)

    def stop(self) -> None:
        """Stop rotating and close the current file."""
        self._stopped.set()
        if self._thread is not threading.current_thread():
            self._thread.join(timeout=1.0)
        with self._lock:
            self._close_current()

    def __enter__(self) -> RotatingWriter:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()