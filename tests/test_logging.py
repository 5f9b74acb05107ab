"""Tests for filerecord.engine.logging — JSONL file logger, async queue, builders."""

import json
from datetime import date

import pytest

from filerecord.engine.logging import (
    AsyncLogQueue,
    FileLogger,
    LogEntry,
    get_log_queue,
    init_logging,
    log,
    log_record_operation,
    log_record_performance,
    log_schema_registered,
    log_system_event,
    shutdown_logging,
)


def _today_file(log_dir, object_type, category):
    return log_dir / object_type / category / f"{date.today().isoformat()}.jsonl"


class TestFileLogger:
    def test_creates_directory_tree(self, tmp_path):
        FileLogger(str(tmp_path / "logs"))
        assert (tmp_path / "logs" / "records" / "execution").is_dir()
        assert (tmp_path / "logs" / "records" / "performance").is_dir()
        assert (tmp_path / "logs" / "schemas" / "execution").is_dir()

    def test_write_and_query(self, tmp_path):
        file_logger = FileLogger(str(tmp_path))
        file_logger.write(LogEntry("records", "execution", {"event": "a", "n": 1}))
        file_logger.write_batch([
            LogEntry("records", "execution", {"event": "b", "n": 2}),
            LogEntry("system", "execution", {"event": "c"}),
        ])
        lines = _today_file(tmp_path, "records", "execution").read_text().splitlines()
        assert [json.loads(line)["event"] for line in lines] == ["a", "b"]

        assert len(file_logger.query("records", "execution")) == 2
        assert file_logger.query("records", "execution", filters={"n": 2}) == [{"event": "b", "n": 2}]
        assert len(file_logger.query("records", "execution", limit=1)) == 1
        assert file_logger.query("records", "performance") == []

    def test_invalid_destination(self, tmp_path):
        file_logger = FileLogger(str(tmp_path))
        with pytest.raises(ValueError):
            file_logger.write(LogEntry("records", "security", {}))

    def test_query_skips_bad_lines(self, tmp_path):
        file_logger = FileLogger(str(tmp_path))
        path = _today_file(tmp_path, "system", "execution")
        path.write_text('{"event": "ok"}\nnot json\n\n', encoding="utf-8")
        assert file_logger.query("system", "execution") == [{"event": "ok"}]


class TestAsyncLogQueue:
    def test_stop_drains(self, tmp_path):
        file_logger = FileLogger(str(tmp_path))
        queue = AsyncLogQueue(file_logger)
        assert queue.push(LogEntry("system", "execution", {"event": "x"}))
        assert queue.pending_count == 1
        queue.stop()
        assert queue.pending_count == 0
        assert file_logger.query("system", "execution") == [{"event": "x"}]

    def test_full_queue_drops(self, tmp_path):
        queue = AsyncLogQueue(FileLogger(str(tmp_path)), max_queue_size=1)
        assert queue.push(LogEntry("system", "execution", {"event": "1"}))
        assert not queue.push(LogEntry("system", "execution", {"event": "2"}))
        assert queue.dropped_count == 1


class TestBuilders:
    def test_record_operation(self):
        entry = log_record_operation("create", "notes", "notes/a.md", duration_ms=1.5)
        assert (entry.object_type, entry.category) == ("records", "execution")
        assert entry.data["event"] == "record_create"
        assert entry.data["level"] == "INFO"
        assert entry.data["duration_ms"] == 1.5
        assert "error" not in entry.data

    def test_failed_record_operation(self):
        entry = log_record_operation("save", "notes", None, success=False, error="taken")
        assert entry.data["level"] == "WARNING"
        assert entry.data["error"] == "taken"
        assert "path" not in entry.data

    def test_record_performance(self):
        entry = log_record_performance("update", "notes", 0.25)
        assert (entry.object_type, entry.category) == ("records", "performance")
        assert entry.data["duration_ms"] == 0.25

    def test_schema_registered(self):
        entry = log_schema_registered("notes", "notes/*.md", r"\Anotes/([^/]+)\.md\Z", "/tmp/x", ["name"])
        assert entry.object_type == "schemas"
        assert entry.data["glob"] == "notes/*.md"
        assert entry.data["attributes"] == ["name"]

    def test_system_event(self):
        entry = log_system_event("bootstrap", details={"record_types": []})
        assert entry.object_type == "system"
        assert entry.data["details"] == {"record_types": []}
        assert json.loads(entry.to_json())["event"] == "bootstrap"


class TestGlobalQueue:
    def test_log_before_init_is_noop(self):
        assert get_log_queue() is None
        assert log(log_system_event("ignored")) is False

    def test_store_operations_are_logged(self, tmp_path, make_store):
        log_dir = tmp_path / "logs"
        init_logging(str(log_dir))
        notes = make_store(["notes", "{name}", "md"], name="notes")
        notes.create("", {"name": "a"})
        notes.delete("notes/a.md")
        shutdown_logging()

        entries = FileLogger(str(log_dir)).query("records", "execution")
        events = sorted(e["event"] for e in entries)
        assert events == ["record_create", "record_delete"]
        assert all(e["record_type"] == "notes" for e in entries)

        timings = FileLogger(str(log_dir)).query("records", "performance")
        assert sorted(t["operation"] for t in timings) == ["create", "delete"]
        assert all("duration_ms" in t for t in timings)

    def test_rejections_are_logged(self, tmp_path, make_store, write):
        log_dir = tmp_path / "logs"
        init_logging(str(log_dir))
        notes = make_store(["notes", "{name}", "md"], name="notes")
        write("notes/a.md")
        notes.new(name="a").save()
        shutdown_logging()

        entries = FileLogger(str(log_dir)).query("records", "execution", filters={"success": False})
        assert len(entries) == 1
        assert entries[0]["level"] == "WARNING"

    def test_init_replaces_queue(self, tmp_path):
        first = init_logging(str(tmp_path / "one"))
        second = init_logging(str(tmp_path / "two"))
        assert first is not second
        assert get_log_queue() is second
