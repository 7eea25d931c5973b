"""
Output sink for displayed file content.

The sink is the single append-only destination of the engine. Any failure
to write to it is fatal for the whole process.
"""

import sys
from typing import BinaryIO, Callable, Optional

from logfollow.utils.logging import get_logger

logger = get_logger(__name__)


class OutputError(Exception):
    """Raised when the output sink cannot be written to."""
    pass


class OutputSink:
    """
    Binary output sink.

    Attributes:
        stream: Underlying binary stream
        bytes_written: Total bytes accepted by the sink
    """

    def __init__(
        self,
        stream: Optional[BinaryIO] = None,
        on_error: Optional[Callable[[OSError], None]] = None,
    ):
        """
        Initialize the sink.

        Args:
            stream: Binary stream to write to (default: stdout)
            on_error: Called with the OSError of a failed write; must not
                return normally. Defaults to raising OutputError.
        """
        self.stream = stream if stream is not None else sys.stdout.buffer
        self.on_error = on_error or self._raise
        self.bytes_written = 0

    @staticmethod
    def _raise(exc: OSError) -> None:
        raise OutputError(str(exc)) from exc

    def write(self, data: bytes) -> None:
        """
        Write bytes to the sink.

        Raises:
            OutputError: If the underlying stream rejects the write
        """
        if not data:
            return
        try:
            self.stream.write(data)
        except OSError as e:
            self.on_error(e)
            raise OutputError(str(e)) from e
        self.bytes_written += len(data)

    def flush(self) -> None:
        """Flush the underlying stream."""
        try:
            self.stream.flush()
        except OSError as e:
            self.on_error(e)
            raise OutputError(str(e)) from e
