"""Tests for the audit log and its writers."""

import io
from datetime import datetime

import pytest

from pySmartDevice.audit_log import (
    TIMESTAMP_FORMAT,
    AuditLog,
    FileLogWriter,
    LogWriter,
    MemoryLogWriter,
    StreamLogWriter,
    format_entry,
)

FIXED_TIME = datetime(2026, 1, 2, 3, 4, 5, 999999)


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

class TestFormatEntry:

    def test_format(self):
        assert format_entry(FIXED_TIME, "Hub", "Device toggled to: ON") == (
            "[2026-01-02 03:04:05] Hub: Device toggled to: ON"
        )

    def test_second_granularity(self):
        assert TIMESTAMP_FORMAT == "%Y-%m-%d %H:%M:%S"
        assert "999999" not in format_entry(FIXED_TIME, "x", "y")


# ---------------------------------------------------------------------------
# Writers
# ---------------------------------------------------------------------------

class TestFileLogWriter:

    def test_appends_lines(self, tmp_path):
        path = tmp_path / "log.txt"
        path.write_text("earlier\n", encoding="utf-8")
        writer = FileLogWriter(path)
        writer.write("one")
        writer.write("two")
        writer.close()
        assert path.read_text(encoding="utf-8") == "earlier\none\ntwo\n"

    def test_write_is_flushed_immediately(self, tmp_path):
        path = tmp_path / "log.txt"
        writer = FileLogWriter(path)
        writer.write("now")
        assert path.read_text(encoding="utf-8") == "now\n"
        writer.close()

    def test_close_is_idempotent(self, tmp_path):
        writer = FileLogWriter(tmp_path / "log.txt")
        writer.close()
        writer.close()
        assert writer.is_closed

    def test_write_after_close_raises(self, tmp_path):
        writer = FileLogWriter(tmp_path / "log.txt")
        writer.close()
        with pytest.raises(ValueError):
            writer.write("late")

    def test_open_failure_raises_oserror(self, tmp_path):
        with pytest.raises(OSError):
            FileLogWriter(tmp_path / "no" / "such" / "dir.txt")

    def test_repr(self, tmp_path):
        writer = FileLogWriter(tmp_path / "log.txt")
        assert "log.txt" in repr(writer)
        writer.close()


class TestStreamLogWriter:

    def test_explicit_stream(self):
        buf = io.StringIO()
        StreamLogWriter(buf).write("hello")
        assert buf.getvalue() == "hello\n"

    def test_default_is_current_stdout(self, capsys):
        writer = StreamLogWriter()
        writer.write("to stdout")
        writer.close()
        assert capsys.readouterr().out == "to stdout\n"


class TestMemoryLogWriter:

    def test_collects_lines(self):
        writer = MemoryLogWriter()
        writer.write("a")
        writer.write("b")
        assert writer.lines == ["a", "b"]


def test_base_writer_is_abstract():
    with pytest.raises(NotImplementedError):
        LogWriter().write("x")


# ---------------------------------------------------------------------------
# AuditLog
# ---------------------------------------------------------------------------

class TestAuditLog:

    def test_writes_to_all_writers_in_order(self):
        order = []

        class Recorder(LogWriter):
            def __init__(self, tag):
                self.tag = tag

            def write(self, line):
                order.append((self.tag, line))

        log = AuditLog([Recorder("sink"), Recorder("console")],
                       clock=lambda: FIXED_TIME)
        line = log.log("Hub", "msg")

        assert line == "[2026-01-02 03:04:05] Hub: msg"
        assert order == [("sink", line), ("console", line)]

    def test_default_clock_is_wall_time(self):
        writer = MemoryLogWriter()
        before = datetime.now().replace(microsecond=0)
        AuditLog([writer]).log("Hub", "msg")
        after = datetime.now()
        stamp = datetime.strptime(writer.lines[0][1:20], TIMESTAMP_FORMAT)
        assert before <= stamp <= after

    def test_detach_closes_and_unregisters(self, tmp_path):
        sink = FileLogWriter(tmp_path / "log.txt")
        console = MemoryLogWriter()
        log = AuditLog([sink, console], clock=lambda: FIXED_TIME)

        log.log("Hub", "first")
        log.detach(sink)
        log.log("Hub", "second")

        assert sink.is_closed
        assert log.writers == [console]
        assert len(console.lines) == 2
        assert (tmp_path / "log.txt").read_text(encoding="utf-8") == (
            "[2026-01-02 03:04:05] Hub: first\n"
        )

    def test_detach_unknown_writer_is_noop(self):
        log = AuditLog([MemoryLogWriter()])
        log.detach(MemoryLogWriter())
        assert len(log.writers) == 1

    def test_repr(self):
        assert "AuditLog" in repr(AuditLog())

    def test_failing_writer_is_detached_and_others_still_written(self):
        failures = []

        class BrokenWriter(LogWriter):
            closed = False

            def write(self, line):
                raise OSError(28, "No space left on device")

            def close(self):
                self.closed = True
                raise OSError(28, "No space left on device")

        broken = BrokenWriter()
        console = MemoryLogWriter()
        log = AuditLog(
            [broken, console],
            clock=lambda: FIXED_TIME,
            on_write_error=lambda w, exc: failures.append((w, exc.errno)),
        )

        log.log("Hub", "first")
        log.log("Hub", "second")

        assert console.lines == [
            "[2026-01-02 03:04:05] Hub: first",
            "[2026-01-02 03:04:05] Hub: second",
        ]
        assert log.writers == [console]
        assert broken.closed
        assert failures == [(broken, 28)]

    def test_write_failure_without_callback(self):
        class BrokenWriter(LogWriter):
            def write(self, line):
                raise OSError("gone")

        console = MemoryLogWriter()
        log = AuditLog([BrokenWriter(), console])
        log.log("Hub", "msg")
        assert len(console.lines) == 1
