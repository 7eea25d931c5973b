"""
Multiplexed display of several files onto one output sink.

When more than one file contributes output, each contiguous run of output
from one file is introduced by a header line naming it.
"""

import os
from dataclasses import dataclass
from typing import Optional

from logfollow.core.io.sink import OutputSink
from logfollow.core.tail.report import ErrorReporter
from logfollow.core.tail.tracked import TrackedFile
from logfollow.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


@dataclass
class DisplayState:
    """
    Which file produced the most recent output.

    Attributes:
        last: File that last produced output (None before any output)
        headers_emitted: Number of header lines written so far
    """
    last: Optional[TrackedFile] = None
    headers_emitted: int = 0


def format_header(name: str, first: bool) -> bytes:
    """Render the banner line that introduces a file's output."""
    banner = b"==> " + os.fsencode(name) + b" <==\n"
    return banner if first else b"\n" + banner


class DisplayMultiplexer:
    """
    Streams file content to the sink, labelling changes of source.

    Attributes:
        sink: Output destination
        headers: Whether header lines are enabled at all
        state: Last-displayed-file state
    """

    def __init__(
        self,
        sink: OutputSink,
        reporter: ErrorReporter,
        headers: bool = False,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        """
        Initialize the multiplexer.

        Args:
            sink: Output destination
            reporter: Receives read failures
            headers: Emit `==> name <==` banners when the source changes
            chunk_size: Maximum bytes per read
        """
        self.sink = sink
        self.reporter = reporter
        self.headers = headers
        self.chunk_size = chunk_size
        self.state = DisplayState()

    def print_header(self, tracked: TrackedFile) -> None:
        """Write the banner for a file and make it the current source."""
        self.sink.write(format_header(tracked.name, first=self.state.headers_emitted == 0))
        self.state.headers_emitted += 1
        self.state.last = tracked

    def mark(self, tracked: TrackedFile) -> None:
        """Record a file as the current source without writing a banner."""
        self.state.last = tracked

    def forget(self, tracked: TrackedFile) -> None:
        """
        Drop a file as the current source.

        Its next output is introduced by a banner again, which is how a
        switch to a replaced or truncated file is made visible.
        """
        if self.state.last is tracked:
            self.state.last = None

    def _read(self, tracked: TrackedFile) -> bytes:
        read1 = getattr(tracked.handle, "read1", None)
        if read1 is not None:
            return read1(self.chunk_size)
        return tracked.handle.read(self.chunk_size)

    def show(self, tracked: TrackedFile) -> bool:
        """
        Display everything currently readable from a file.

        Args:
            tracked: File with an open handle

        Returns:
            True on success. False if a read failed; the failure has been
            reported and the file closed.
        """
        while True:
            try:
                chunk = self._read(tracked)
            except OSError as e:
                self.sink.flush()
                tracked.close()
                self.reporter.report_error(tracked.name, e)
                return False

            if not chunk:
                break

            if self.state.last is not tracked:
                if self.headers:
                    self.print_header(tracked)
                self.state.last = tracked

            self.sink.write(chunk)

        self.sink.flush()
        return True
