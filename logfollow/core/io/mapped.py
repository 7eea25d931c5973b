"""
Bounded memory-mapped windows over a file.

Used for backward scans of large files: only one fixed-size region is
mapped at any time, and moving the window releases the previous mapping
before the next one is established.
"""

import mmap
from typing import Optional

from logfollow.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_WINDOW_SIZE = 4 * 1024 * 1024


def align_window_size(window_size: int) -> int:
    """
    Round a window size to a multiple of the mmap allocation granularity.

    Mapping offsets must be aligned to the granularity, and windows always
    start at a multiple of their size.

    Args:
        window_size: Requested window size in bytes

    Returns:
        Aligned window size (at least one granule)
    """
    granularity = mmap.ALLOCATIONGRANULARITY
    if window_size <= granularity:
        return granularity
    return (window_size // granularity) * granularity


class MappedWindow:
    """
    A read-only view over one region of a file.

    The descriptor is borrowed: the window never closes it. Use as a
    context manager so the mapping is released on every exit path.

    Attributes:
        fd: Borrowed file descriptor
        end: Absolute offset one past the last byte the scan may touch
        start: Absolute offset of the currently mapped region (== end when
            nothing is mapped)
        window_size: Aligned size of each mapped region
    """

    def __init__(self, fd: int, end: int, window_size: int = DEFAULT_WINDOW_SIZE):
        """
        Initialize an unmapped window.

        Args:
            fd: File descriptor to map from
            end: End of the region the window may cover
            window_size: Requested region size (aligned internally)
        """
        self.fd = fd
        self.end = end
        self.window_size = align_window_size(window_size)
        self.start = end
        self.mmap: Optional[mmap.mmap] = None

    def __len__(self) -> int:
        return len(self.mmap) if self.mmap is not None else 0

    def covers(self, position: int) -> bool:
        """Check whether an absolute position lies in the mapped region."""
        return self.mmap is not None and self.start <= position < self.start + len(self.mmap)

    def around(self, position: int) -> None:
        """
        Map the window-aligned region containing a position.

        Args:
            position: Absolute file offset that must become addressable

        Raises:
            ValueError: If position is outside [0, end) or the file shrank
            OSError: If the mapping fails
        """
        if not 0 <= position < self.end:
            raise ValueError(f"Position {position} outside mappable range [0, {self.end})")

        self.release()

        start = position - position % self.window_size
        length = min(self.window_size, self.end - start)

        self.mmap = mmap.mmap(
            self.fd,
            length=length,
            offset=start,
            access=mmap.ACCESS_READ,
        )
        self.start = start

        logger.debug("Mapped window", fd=self.fd, offset=start, length=length)

    def rfind(self, needle: bytes, position: int) -> int:
        """
        Find the last occurrence of needle at or before a position.

        The search is limited to the mapped region.

        Args:
            needle: Bytes to look for
            position: Absolute offset of the last byte to consider

        Returns:
            Absolute offset of the match, or -1 if the mapped bytes before
            position do not contain it
        """
        if not self.covers(position):
            raise ValueError(f"Position {position} is not mapped")

        index = self.mmap.rfind(needle, 0, position - self.start + 1)
        if index < 0:
            return -1
        return self.start + index

    def release(self) -> None:
        """Unmap the current region, if any."""
        if self.mmap is not None:
            self.mmap.close()
            self.mmap = None
            self.start = self.end

    def __enter__(self) -> "MappedWindow":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.release()
