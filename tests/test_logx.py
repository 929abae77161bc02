import json

import pytest

from matrixkit import logx
from matrixkit.logx import LogEntry, Logger


@pytest.fixture
def clean_globals(monkeypatch):
    monkeypatch.setattr(logx, "_runtime_logger", None)
    monkeypatch.setattr(logx, "_event_logger", None)
    yield
    for created in (logx._runtime_logger, logx._event_logger):
        if created is not None:
            created.shutdown()


def _records(logger):
    text = logger.writer.path.read_text(encoding="utf-8")
    return [json.loads(line) for line in text.splitlines()]


def test_entry_is_written_as_json(tmp_path):
    logger = Logger(tmp_path, "runtime", "info", "srv-1", 10)
    try:
        logger.log().info("hello")
        records = _records(logger)
    finally:
        logger.shutdown()
    assert len(records) == 1
    record = records[0]
    assert list(record)[:6] == ["level", "createdAt", "caller", "msg", "id", "creator"]
    entry = LogEntry.from_record(record)
    assert entry.level == "info"
    assert entry.msg == "hello"
    assert entry.creator == "srv-1"
    assert len(entry.id) == 26
    assert entry.created_at > 0
    assert entry.caller.startswith("tests/test_logx.py:")


def test_file_named_after_log_type(tmp_path):
    logger = Logger(tmp_path, "runtime", "info", "", 10)
    try:
        name = logger.writer.path.name
    finally:
        logger.shutdown()
    assert name.startswith("runtime.")
    assert name.endswith(".slice_log")


def test_level_filtering(tmp_path):
    logger = Logger(tmp_path, "runtime", "info", "", 10)
    try:
        logger.log().debug("dropped")
        logger.log().warn("kept")
        logger.log().error("also kept")
        records = _records(logger)
    finally:
        logger.shutdown()
    assert [(r["level"], r["msg"]) for r in records] == [("warn", "kept"), ("error", "also kept")]


@pytest.mark.parametrize(
    "name, expected",
    [("DEBUG", "debug"), ("Info", "info"), ("WARNING", "warn"), ("error", "error"),
     ("fatal", "fatal"), ("verbose", "warn")],
)
def test_level_names(tmp_path, name, expected):
    logger = Logger(tmp_path, "runtime", name, "", 10)
    try:
        assert logger.level_name == expected
    finally:
        logger.shutdown()


def test_each_log_call_gets_new_id(tmp_path):
    logger = Logger(tmp_path, "runtime", "info", "", 10)
    try:
        logger.log().info("a")
        logger.log().info("b")
        ids = [r["id"] for r in _records(logger)]
    finally:
        logger.shutdown()
    assert len(set(ids)) == 2


def test_extra_fields_do_not_override_core(tmp_path):
    logger = Logger(tmp_path, "runtime", "info", "srv", 10)
    try:
        logger.log().info("msg", context="demo", creator="intruder")
        record = _records(logger)[0]
    finally:
        logger.shutdown()
    assert record["context"] == "demo"
    assert record["creator"] == "srv"


def test_debug_logger_copies_to_stderr(tmp_path, capsys):
    logger = Logger(tmp_path, "runtime", "debug", "", 10)
    try:
        logger.log().debug("visible")
    finally:
        logger.shutdown()
    err_lines = capsys.readouterr().err.splitlines()
    assert any(json.loads(line)["msg"] == "visible" for line in err_lines)


def test_fatal_writes_and_exits(tmp_path):
    logger = Logger(tmp_path, "runtime", "info", "", 10)
    try:
        with pytest.raises(SystemExit) as excinfo:
            logger.log().fatal("bye")
        records = _records(logger)
    finally:
        logger.shutdown()
    assert excinfo.value.code == 1
    assert records[0]["level"] == "fatal"


def test_empty_base_dir_means_log(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    logger = Logger("", "runtime", "info", "", 10)
    try:
        assert logger.base_dir == "log"
        assert (tmp_path / "log").is_dir()
    finally:
        logger.shutdown()


def test_runtime_logger_as_in_logger_test(tmp_path, clean_globals):
    runtime = logx.init_runtime_logger(tmp_path, "debug", "", 10)
    logx.log().info("test2")
    logx.log().debug("test3")
    assert [r["msg"] for r in _records(runtime)] == ["test2", "test3"]


def test_log_without_runtime_logger_raises(clean_globals):
    assert logx.is_debugging() is False
    with pytest.raises(RuntimeError, match="not initialized"):
        logx.log()


def test_is_debugging_follows_level(tmp_path, clean_globals):
    logx.init_runtime_logger(tmp_path, "debug", "", 10)
    assert logx.is_debugging() is True
    logx.init_runtime_logger(tmp_path, "info", "", 10)
    assert logx.is_debugging() is False


def test_event_logger_reinit_shuts_old(tmp_path, clean_globals):
    assert logx.event_logger() is None
    first = logx.init_event_logger(tmp_path, "srv", 10)
    assert logx.event_logger() is first
    assert first.log_type == "event"
    assert first.level_name == "info"
    second = logx.init_event_logger(tmp_path, "srv", 10)
    assert logx.event_logger() is second
    with pytest.raises(ValueError):
        first.writer.write(b"x")


def test_console_output_without_runtime_logger(clean_globals, capsys):
    logx.info("a", 1)
    logx.debugf("x=%d", 5)
    logx.warnf("100%")
    out = capsys.readouterr().out
    assert out == (
        "\x1b[34m[INFO]\x1b[0m a 1\n"
        "\x1b[32m[DEBUG]\x1b[0m x=5\n"
        "\x1b[33m[WARN]\x1b[0m 100%\n"
    )


def test_console_output_respects_runtime_level(tmp_path, clean_globals, capsys):
    logx.init_runtime_logger(tmp_path, "error", "", 10)
    logx.info("hidden")
    logx.warn("hidden")
    logx.error("shown")
    logx.fatalf("%s!", "boom")
    out = capsys.readouterr().out
    assert out == "\x1b[31m[ERROR]\x1b[0m shown\n\x1b[31m[FATAL]\x1b[0m boom!\n"