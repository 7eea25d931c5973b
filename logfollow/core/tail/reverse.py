"""
Backward line scanning for regular files.

Finds where the last N lines of a file begin by walking backward from the
end through a bounded memory-mapped window. Only the bytes between the
answer and end-of-file are ever visited, so the cost does not depend on the
size of the file.
"""

import os

from logfollow.core.io.mapped import DEFAULT_WINDOW_SIZE, MappedWindow
from logfollow.core.tail.report import ErrorReporter
from logfollow.core.tail.tracked import TrackedFile
from logfollow.utils.logging import get_logger

logger = get_logger(__name__)

NEWLINE = b"\n"


class ReverseLineScanner:
    """
    Locates the start of the last N lines of a regular file.

    Attributes:
        window_size: Bytes mapped at a time
    """

    def __init__(self, reporter: ErrorReporter, window_size: int = DEFAULT_WINDOW_SIZE):
        """
        Initialize the scanner.

        Args:
            reporter: Receives mapping and seek failures
            window_size: Size of each mapped region; bounds memory use only
        """
        self.reporter = reporter
        self.window_size = window_size

    def locate(self, fd: int, size: int, count: int) -> int:
        """
        Compute the offset of the first of the last `count` lines.

        The final byte is not examined: a trailing newline terminates the
        last line rather than starting a new one.

        Args:
            fd: Descriptor of a regular file (borrowed)
            size: File size to scan back from
            count: Number of trailing lines (>= 1)

        Returns:
            Byte offset; 0 when the file has no more than `count` lines

        Raises:
            ValueError: If count < 1, or the file shrank below size
            OSError: If a region cannot be mapped
        """
        if count < 1:
            raise ValueError(f"Line count must be positive, got {count}")

        position = size - 2
        with MappedWindow(fd, end=size, window_size=self.window_size) as window:
            while position >= 0:
                if not window.covers(position):
                    window.around(position)

                found = window.rfind(NEWLINE, position)
                if found < 0:
                    position = window.start - 1
                    continue

                count -= 1
                if count == 0:
                    return found + 1
                position = found - 1

        return 0

    def position(self, tracked: TrackedFile, count: int) -> bool:
        """
        Move a regular file's cursor to the start of its last `count` lines.

        Args:
            tracked: Open regular file with a current identity snapshot
            count: Number of trailing lines (>= 1)

        Returns:
            True if positioned, False on failure (already reported)
        """
        size = tracked.identity.size
        if size == 0:
            return True

        try:
            offset = self.locate(tracked.handle.fileno(), size, count)
            tracked.handle.seek(offset, os.SEEK_SET)
        except (OSError, ValueError) as e:
            self.reporter.report_error(tracked.name, e)
            return False

        logger.debug(
            "Located trailing lines",
            name=tracked.name,
            lines=count,
            offset=offset,
            size=size,
        )
        return True
