"""
Initial positioning of a file before display.

There are eight cases: regular and non-regular files, by bytes or lines,
from the beginning or the end.

    BYTES_FROM_START  regular: seek          other: read, counting bytes
    LINES_FROM_START  regular: read, counting lines (same for other)
    BYTES_FROM_END    regular: seek          other: keep a trailing buffer
    LINES_FROM_END    regular: mapped scan   other: keep trailing lines

After positioning, the rest of the file is copied to the sink.
"""

import functools
import os
from typing import Callable, Optional

from logfollow.core.io.sink import OutputSink
from logfollow.core.tail.counting import DEFAULT_CHUNK_SIZE, tail_bytes, tail_lines
from logfollow.core.tail.report import ErrorReporter
from logfollow.core.tail.reverse import ReverseLineScanner
from logfollow.core.tail.style import DisplayStyle
from logfollow.core.tail.tracked import TrackedFile
from logfollow.utils.logging import get_logger

logger = get_logger(__name__)

StreamTail = Callable[[TrackedFile, int, OutputSink, ErrorReporter], bool]


class PositionSeeker:
    """
    Positions a file's cursor for a display style, then displays the rest.

    Attributes:
        sink: Output destination
        scanner: Backward line scanner for regular files
        count_bytes: Trailing-bytes collaborator for non-seekable input
        count_lines: Trailing-lines collaborator for non-seekable input
    """

    def __init__(
        self,
        sink: OutputSink,
        reporter: ErrorReporter,
        scanner: Optional[ReverseLineScanner] = None,
        count_bytes: Optional[StreamTail] = None,
        count_lines: StreamTail = tail_lines,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        self.sink = sink
        self.reporter = reporter
        self.scanner = scanner or ReverseLineScanner(reporter)
        self.count_bytes = count_bytes or functools.partial(tail_bytes, chunk_size=chunk_size)
        self.count_lines = count_lines
        self.chunk_size = chunk_size

    def forward(self, tracked: TrackedFile, style: DisplayStyle, offset: int) -> bool:
        """
        Display a file from the position selected by style and offset.

        Args:
            tracked: Open file with a current identity snapshot
            style: Unit and anchor of the offset
            offset: Non-negative count of bytes or lines

        Returns:
            True on success, False if the file failed (already reported)
        """
        if offset < 0:
            raise ValueError(f"Offset must not be negative, got {offset}")

        try:
            if not self._position(tracked, style, offset):
                return False
            self._copy(tracked)
        except OSError as e:
            self.reporter.report_error(tracked.name, e)
            return False
        return True

    def _position(self, tracked: TrackedFile, style: DisplayStyle, offset: int) -> bool:
        handle = tracked.handle
        identity = tracked.identity
        seekable = identity.is_regular and identity.size > 0

        if style is DisplayStyle.BYTES_FROM_START:
            if offset == 0:
                return True
            if seekable:
                handle.seek(min(offset, identity.size), os.SEEK_SET)
            else:
                self._skip_bytes(tracked, offset)

        elif style is DisplayStyle.LINES_FROM_START:
            if offset == 0:
                return True
            for _ in range(offset):
                if not handle.readline():
                    break

        elif style is DisplayStyle.BYTES_FROM_END:
            if seekable:
                # Larger offsets leave the cursor at the start: whole file.
                if offset <= identity.size:
                    handle.seek(-offset, os.SEEK_END)
            elif offset == 0:
                self._drain(tracked)
            else:
                return self.count_bytes(tracked, offset, self.sink, self.reporter)

        elif style is DisplayStyle.LINES_FROM_END:
            if seekable:
                if offset == 0:
                    handle.seek(0, os.SEEK_END)
                else:
                    return self.scanner.position(tracked, offset)
            elif offset == 0:
                self._drain(tracked)
            else:
                return self.count_lines(tracked, offset, self.sink, self.reporter)

        logger.debug(
            "Positioned file",
            name=tracked.name,
            style=style.value,
            offset=offset,
            regular=identity.is_regular,
        )
        return True

    def _skip_bytes(self, tracked: TrackedFile, count: int) -> None:
        while count > 0:
            chunk = tracked.handle.read(min(count, self.chunk_size))
            if not chunk:
                break
            count -= len(chunk)

    def _drain(self, tracked: TrackedFile) -> None:
        while tracked.handle.read(self.chunk_size):
            pass

    def _copy(self, tracked: TrackedFile) -> None:
        while True:
            chunk = tracked.handle.read(self.chunk_size)
            if not chunk:
                break
            self.sink.write(chunk)
        self.sink.flush()
