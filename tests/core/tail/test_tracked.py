"""Tests for tracked files, styles and error reporting."""

import io
import os
import tempfile
from pathlib import Path

import pytest

from logfollow.core.io import FileOpener, OutputError
from logfollow.core.tail import DisplayStyle, ErrorReporter, TrackedFile


class TestTrackedFile:
    """Test TrackedFile."""

    @pytest.fixture
    def temp_dir(self):
        """Create a temporary directory for tests."""
        with tempfile.TemporaryDirectory() as tmpdir:
            yield Path(tmpdir)

    def test_starts_closed(self):
        tracked = TrackedFile(name="app.log")

        assert not tracked.is_open
        assert tracked.identity is None

    def test_reopen_snapshots_identity(self, temp_dir):
        """Test that opening captures the handle's identity."""
        path = temp_dir / "app.log"
        path.write_bytes(b"abc")
        tracked = TrackedFile(name=str(path))

        tracked.reopen(FileOpener())
        try:
            assert tracked.is_open
            assert tracked.identity.inode == os.stat(path).st_ino
            assert tracked.identity.size == 3
        finally:
            tracked.close()

        assert not tracked.is_open

    def test_reopen_missing_stays_closed(self, temp_dir):
        tracked = TrackedFile(name=str(temp_dir / "missing.log"))

        with pytest.raises(FileNotFoundError):
            tracked.reopen(FileOpener())

        assert not tracked.is_open

    def test_adopt_closes_previous_handle(self):
        """Test that adopting a new handle releases the old one."""
        old = io.BytesIO(b"old")
        new = io.BytesIO(b"new")
        tracked = TrackedFile(name="app.log", handle=old)

        tracked.adopt(new, identity=None)

        assert old.closed
        assert tracked.handle is new

    def test_position_requires_open_handle(self):
        with pytest.raises(ValueError):
            TrackedFile(name="app.log").position()

    def test_stdin(self, temp_dir):
        """Test tracking the primary input stream."""
        path = temp_dir / "input"
        path.write_bytes(b"piped")

        with open(path, "rb") as stream:
            tracked = TrackedFile.stdin(FileOpener(), stream=stream)

            assert tracked.is_stdin
            assert tracked.name == "stdin"
            assert tracked.identity.size == 5


class TestDisplayStyle:
    """Test DisplayStyle."""

    def test_choose(self):
        assert DisplayStyle.choose(lines=True, from_end=True) is DisplayStyle.LINES_FROM_END
        assert DisplayStyle.choose(lines=True, from_end=False) is DisplayStyle.LINES_FROM_START
        assert DisplayStyle.choose(lines=False, from_end=True) is DisplayStyle.BYTES_FROM_END
        assert DisplayStyle.choose(lines=False, from_end=False) is DisplayStyle.BYTES_FROM_START

    def test_properties(self):
        assert DisplayStyle.BYTES_FROM_END.from_end
        assert not DisplayStyle.BYTES_FROM_END.counts_lines
        assert DisplayStyle.LINES_FROM_START.counts_lines
        assert not DisplayStyle.LINES_FROM_START.from_end


class TestErrorReporter:
    """Test ErrorReporter."""

    def test_report_error(self):
        """Test the diagnostic format and exit status."""
        stream = io.StringIO()
        reporter = ErrorReporter(stream=stream)

        reporter.report_error("app.log", FileNotFoundError(2, "No such file or directory"))

        assert stream.getvalue() == "logfollow: app.log: No such file or directory\n"
        assert reporter.exit_status == 1
        assert reporter.errors == 1

    def test_report_plain_exception(self):
        stream = io.StringIO()
        reporter = ErrorReporter(stream=stream, program="tail")

        reporter.report_error("big.log", ValueError("mmap length is greater than file size"))

        assert stream.getvalue() == "tail: big.log: mmap length is greater than file size\n"

    def test_output_error_is_fatal(self):
        """Test that output failures raise."""
        reporter = ErrorReporter(stream=io.StringIO())

        with pytest.raises(OutputError, match="Broken pipe"):
            reporter.report_output_error(BrokenPipeError(32, "Broken pipe"))

        assert reporter.exit_status == 1
