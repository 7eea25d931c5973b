"""
Tests for memory-mapped windows.
"""

import mmap
import os
import tempfile

import pytest

from logfollow.core.io import MappedWindow, align_window_size


class TestAlignWindowSize:
    """Test window size alignment."""

    def test_small_sizes_round_up_to_granularity(self):
        """Test that tiny windows become one granule."""
        assert align_window_size(1) == mmap.ALLOCATIONGRANULARITY
        assert align_window_size(0) == mmap.ALLOCATIONGRANULARITY

    def test_large_sizes_are_multiples(self):
        """Test that larger windows are granule multiples."""
        granularity = mmap.ALLOCATIONGRANULARITY
        size = align_window_size(3 * granularity + 17)

        assert size == 3 * granularity


class TestMappedWindow:
    """Test MappedWindow."""

    @pytest.fixture
    def data_file(self):
        """Create a file spanning several granules."""
        granularity = mmap.ALLOCATIONGRANULARITY
        data = (b"x" * (granularity - 1) + b"\n") * 3 + b"tail"
        with tempfile.NamedTemporaryFile(delete=False) as f:
            f.write(data)
            filepath = f.name

        fd = os.open(filepath, os.O_RDONLY)
        try:
            yield fd, data
        finally:
            os.close(fd)
            os.unlink(filepath)

    def test_starts_unmapped(self, data_file):
        """Test that nothing is mapped before the first move."""
        fd, data = data_file
        window = MappedWindow(fd, end=len(data), window_size=1)

        assert window.mmap is None
        assert len(window) == 0
        assert not window.covers(len(data) - 1)

    def test_around_maps_aligned_region(self, data_file):
        """Test that the region containing a position gets mapped."""
        fd, data = data_file
        granularity = mmap.ALLOCATIONGRANULARITY

        with MappedWindow(fd, end=len(data), window_size=1) as window:
            window.around(granularity + 5)

            assert window.start == granularity
            assert len(window) == granularity
            assert window.covers(granularity)
            assert not window.covers(granularity - 1)

    def test_last_region_is_clamped_to_end(self, data_file):
        """Test that the final window stops at the end of the file."""
        fd, data = data_file

        with MappedWindow(fd, end=len(data), window_size=1) as window:
            window.around(len(data) - 1)

            assert window.start + len(window) == len(data)

    def test_rfind_returns_absolute_offsets(self, data_file):
        """Test backward search within the window."""
        fd, data = data_file
        granularity = mmap.ALLOCATIONGRANULARITY

        with MappedWindow(fd, end=len(data), window_size=1) as window:
            window.around(2 * granularity + 10)

            assert window.rfind(b"\n", 3 * granularity - 1) == 3 * granularity - 1
            assert window.rfind(b"\n", 3 * granularity - 2) == -1

    def test_rfind_outside_window_raises(self, data_file):
        """Test that searching unmapped bytes is rejected."""
        fd, data = data_file

        with MappedWindow(fd, end=len(data), window_size=1) as window:
            window.around(len(data) - 1)

            with pytest.raises(ValueError, match="not mapped"):
                window.rfind(b"\n", 0)

    def test_around_out_of_range(self, data_file):
        """Test that positions outside [0, end) are rejected."""
        fd, data = data_file

        with MappedWindow(fd, end=len(data)) as window:
            with pytest.raises(ValueError):
                window.around(len(data))
            with pytest.raises(ValueError):
                window.around(-1)

    def test_moving_releases_previous_mapping(self, data_file):
        """Test that only one region is mapped at a time."""
        fd, data = data_file

        with MappedWindow(fd, end=len(data), window_size=1) as window:
            window.around(len(data) - 1)
            first = window.mmap

            window.around(0)

            assert first.closed
            assert window.start == 0

    def test_context_manager_releases(self, data_file):
        """Test that leaving the context unmaps the window."""
        fd, data = data_file
        window = MappedWindow(fd, end=len(data))

        with window:
            window.around(0)
            mapped = window.mmap

        assert window.mmap is None
        assert mapped.closed
        assert window.start == window.end

    def test_descriptor_is_borrowed(self, data_file):
        """Test that the window never closes the descriptor."""
        fd, data = data_file

        with MappedWindow(fd, end=len(data)) as window:
            window.around(0)

        # Still usable after the window is gone
        assert os.fstat(fd).st_size == len(data)
