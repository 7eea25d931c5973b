"""
Tests for the file-open service, identity snapshots and the output sink.
"""

import io
import os
import stat
import tempfile
from pathlib import Path

import pytest

from logfollow.core.io import FileIdentity, FileOpener, OutputError, OutputSink


class TestFileIdentity:
    """Test FileIdentity."""

    def test_from_stat(self):
        """Test building a snapshot from os.stat."""
        with tempfile.NamedTemporaryFile() as f:
            f.write(b"12345")
            f.flush()
            st = os.stat(f.name)

            identity = FileIdentity.from_stat(st)

        assert identity.inode == st.st_ino
        assert identity.device == st.st_dev
        assert identity.link_count == st.st_nlink
        assert identity.size == 5
        assert identity.is_regular
        assert not identity.is_fifo

    def test_same_file_ignores_size_and_links(self):
        """Test that growth does not change identity."""
        before = FileIdentity(device=1, inode=2, link_count=1, size=10)
        after = FileIdentity(device=1, inode=2, link_count=2, size=99)

        assert before.same_file(after)

    def test_different_inode_or_device(self):
        """Test that a new inode or device is a different file."""
        base = FileIdentity(device=1, inode=2, link_count=1, size=10)

        assert not base.same_file(FileIdentity(device=1, inode=3, link_count=1, size=10))
        assert not base.same_file(FileIdentity(device=9, inode=2, link_count=1, size=10))

    def test_fifo_mode(self):
        """Test pipe detection."""
        identity = FileIdentity(device=0, inode=0, link_count=1, size=0, mode=stat.S_IFIFO)

        assert identity.is_fifo
        assert not identity.is_regular


class TestFileOpener:
    """Test FileOpener."""

    @pytest.fixture
    def temp_dir(self):
        """Create a temporary directory for tests."""
        with tempfile.TemporaryDirectory() as tmpdir:
            yield Path(tmpdir)

    def test_open_and_stat(self, temp_dir):
        """Test opening a file and taking its snapshot."""
        path = temp_dir / "app.log"
        path.write_bytes(b"hello\n")
        opener = FileOpener()

        with opener.open(str(path)) as handle:
            identity = opener.stat(handle)
            assert handle.read() == b"hello\n"

        assert identity.inode == path.stat().st_ino
        assert identity.size == 6

    def test_missing_file(self, temp_dir):
        """Test that a missing file raises FileNotFoundError."""
        opener = FileOpener()

        with pytest.raises(FileNotFoundError):
            opener.open(str(temp_dir / "missing.log"))

    def test_restricted_opener(self, temp_dir):
        """Test that only allowed names can be opened."""
        allowed = temp_dir / "allowed.log"
        other = temp_dir / "other.log"
        allowed.write_bytes(b"a")
        other.write_bytes(b"b")
        opener = FileOpener(allowed=[str(allowed)])

        with opener.open(str(allowed)) as handle:
            assert handle.read() == b"a"

        with pytest.raises(PermissionError):
            opener.open(str(other))


class TestOutputSink:
    """Test OutputSink."""

    def test_write_and_count(self):
        """Test that written bytes reach the stream."""
        stream = io.BytesIO()
        sink = OutputSink(stream)

        sink.write(b"abc")
        sink.write(b"de")
        sink.flush()

        assert stream.getvalue() == b"abcde"
        assert sink.bytes_written == 5

    def test_write_failure_is_output_error(self):
        """Test that a failing stream raises OutputError."""

        class BrokenStream:
            def write(self, data):
                raise BrokenPipeError(32, "Broken pipe")

        sink = OutputSink(BrokenStream())

        with pytest.raises(OutputError):
            sink.write(b"abc")

    def test_failure_handler_is_called(self):
        """Test that the error callback sees the original failure."""
        seen = []

        class BrokenStream:
            def write(self, data):
                return len(data)

            def flush(self):
                raise OSError(5, "Input/output error")

        sink = OutputSink(BrokenStream(), on_error=seen.append)

        with pytest.raises(OutputError):
            sink.flush()

        assert len(seen) == 1
        assert seen[0].errno == 5
