import json
import re
from datetime import timedelta

import pytest

from matrixkit.rotating import RotatingWriter

NAME_RE = re.compile(r"app_log\.\d{8}_\d{6}\.log")


def _all_content(directory):
    return b"".join(p.read_bytes() for p in sorted(directory.iterdir()))


def test_file_name_and_write(tmp_path):
    writer = RotatingWriter(tmp_path, "app_log", "log", 5)
    try:
        assert writer.write(b"hello\n") == 6
        path = writer.path
        assert path.parent == tmp_path
        assert NAME_RE.fullmatch(path.name)
    finally:
        writer.stop()
    assert path.read_bytes() == b"hello\n"


def test_interval_is_clamped_to_minimum(tmp_path):
    with RotatingWriter(tmp_path, "a", "log", 1) as short:
        assert short.interval == 5.0
    with RotatingWriter(tmp_path, "b", "log", timedelta(seconds=30)) as long:
        assert long.interval == 30.0


def test_write_after_stop_raises(tmp_path):
    writer = RotatingWriter(tmp_path, "app_log", "log", 5)
    writer.stop()
    assert writer.path is None
    with pytest.raises(ValueError):
        writer.write(b"late")


def test_missing_directory_leaves_writer_without_file(tmp_path, capsys):
    writer = RotatingWriter(tmp_path / "missing", "app_log", "log", 5)
    try:
        assert writer.path is None
        with pytest.raises(ValueError, match="not initialized"):
            writer.write(b"data")
        assert "Failed to rotate log file" in capsys.readouterr().err
    finally:
        writer.stop()


def test_rotate_keeps_all_data(tmp_path):
    with RotatingWriter(tmp_path, "app_log", "log", 5) as writer:
        writer.write(b"first\n")
        writer.rotate()
        writer.write(b"second\n")
        assert NAME_RE.fullmatch(writer.path.name)
    assert _all_content(tmp_path) == b"first\nsecond\n"


def test_json_lines_as_in_rotating_logger(tmp_path):
    with RotatingWriter(tmp_path, "app_log", "log", 5) as writer:
        for counter in range(10):
            line = json.dumps({"msg": "This is a test log message", "context": "demo", "n": counter})
            writer.write((line + "\n").encode())
    lines = _all_content(tmp_path).decode().splitlines()
    assert len(lines) == 10
    assert [json.loads(line)["n"] for line in lines] == list(range(10))
    assert all(json.loads(line)["context"] == "demo" for line in lines)