"""Tests for the status log.

The engine writes one entry per operation to a ``Logger``.  The log is
append-only and can be filtered by level and source.
"""

import pytest

from blockfs.config import FsConfig
from blockfs.engine import FileSystemEngine
from blockfs.errors import NotFoundError
from blockfs.logging import LogEntry, Logger, LogLevel


class TestLogLevel:
    """Verify log level ordering."""

    def test_levels_are_ordered(self) -> None:
        """DEBUG < INFO < WARNING < ERROR."""
        assert LogLevel.DEBUG < LogLevel.INFO
        assert LogLevel.INFO < LogLevel.WARNING
        assert LogLevel.WARNING < LogLevel.ERROR


class TestLogEntry:
    """Verify log entry structure."""

    def test_entry_has_fields(self) -> None:
        """A log entry should store level, message, and source."""
        entry = LogEntry(level=LogLevel.INFO, message="created", source="fs")
        assert entry.level is LogLevel.INFO
        assert entry.message == "created"
        assert entry.source == "fs"

    def test_entry_str(self) -> None:
        """String form should be ``[LEVEL] source: message``."""
        entry = LogEntry(level=LogLevel.WARNING, message="disk full", source="fs")
        assert str(entry) == "[WARNING] fs: disk full"


class TestLogger:
    """Verify the logger buffer."""

    def test_log_stores_entries_in_order(self) -> None:
        """Entries should be retrievable in chronological order."""
        logger = Logger()
        logger.log(LogLevel.INFO, "first", source="test")
        logger.log(LogLevel.INFO, "second", source="test")
        assert [e.message for e in logger.entries] == ["first", "second"]

    def test_entries_returns_copy(self) -> None:
        """Mutating the returned list should not affect the log."""
        logger = Logger()
        logger.log(LogLevel.INFO, "kept", source="test")
        logger.entries.clear()
        assert len(logger.entries) == 1

    def test_filter_by_level(self) -> None:
        """min_level should drop lower-severity entries."""
        logger = Logger()
        logger.log(LogLevel.DEBUG, "noise", source="fs")
        logger.log(LogLevel.ERROR, "bad", source="fs")
        result = logger.filter(min_level=LogLevel.INFO)
        assert [e.message for e in result] == ["bad"]

    def test_filter_by_source(self) -> None:
        """source should keep only matching entries."""
        logger = Logger()
        logger.log(LogLevel.INFO, "a", source="fs")
        logger.log(LogLevel.INFO, "b", source="shell")
        assert [e.message for e in logger.filter(source="shell")] == ["b"]

    def test_lines_formats_and_hides_debug(self) -> None:
        """lines() should format entries and skip DEBUG by default."""
        logger = Logger()
        logger.log(LogLevel.DEBUG, "blocks", source="fs")
        logger.log(LogLevel.INFO, "done", source="fs")
        assert logger.lines() == ["[INFO] fs: done"]
        expected_count = 2
        assert len(logger.lines(min_level=LogLevel.DEBUG)) == expected_count

    def test_capacity_evicts_oldest(self) -> None:
        """A bounded log keeps only the newest entries."""
        logger = Logger(capacity=2)
        for message in ("a", "b", "c"):
            logger.log(LogLevel.INFO, message, source="fs")
        assert [e.message for e in logger.entries] == ["b", "c"]
        expected_capacity = 2
        assert logger.capacity == expected_capacity

    def test_unbounded_by_default(self) -> None:
        """Without a capacity the log keeps everything."""
        assert Logger().capacity is None

    def test_clear(self) -> None:
        """clear() should empty the log."""
        logger = Logger()
        logger.log(LogLevel.INFO, "x", source="fs")
        logger.clear()
        assert logger.entries == []


class TestEngineLogging:
    """Verify the engine reports to its logger."""

    def test_success_logged_at_info(self) -> None:
        """A successful create should produce an INFO entry from "fs"."""
        logger = Logger()
        engine = FileSystemEngine(logger=logger)
        engine.create("/a.txt")
        messages = [e.message for e in logger.filter(min_level=LogLevel.INFO, source="fs")]
        assert any(m.startswith("create /a.txt") for m in messages)

    def test_failure_logged_at_error(self) -> None:
        """A failing operation should log at ERROR and still raise."""
        logger = Logger()
        engine = FileSystemEngine(logger=logger)
        with pytest.raises(NotFoundError):
            engine.stat("/missing")
        errors = logger.filter(min_level=LogLevel.ERROR)
        assert len(errors) == 1
        assert "stat" in errors[0].message
        assert "/missing" in errors[0].message

    def test_engine_logger_uses_configured_capacity(self) -> None:
        """The default logger is bounded by FsConfig.log_capacity."""
        engine = FileSystemEngine(config=FsConfig(log_capacity=3))
        for name in ("a", "b", "c", "d"):
            engine.create(f"/{name}")
        expected_count = 3
        assert len(engine.logger.entries) == expected_count
        assert engine.logger.entries[-1].message.startswith("create /d")

    def test_block_allocation_logged_at_debug(self) -> None:
        """Writes that allocate blocks should leave a DEBUG trail."""
        engine = FileSystemEngine()
        engine.create("/f")
        handle = engine.open("/f")
        engine.write(handle, b"data")
        debug = [e for e in engine.logger.entries if e.level is LogLevel.DEBUG]
        assert any("allocated blocks" in e.message for e in debug)
