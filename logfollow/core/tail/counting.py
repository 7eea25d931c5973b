"""
Tail of non-seekable streams.

Pipes and FIFOs cannot be seeked or mapped, so the only way to find their
last N bytes or lines is to read them to the end while keeping a bounded
window of what was seen.
"""

from collections import deque

from logfollow.core.io.sink import OutputSink
from logfollow.core.tail.report import ErrorReporter
from logfollow.core.tail.tracked import TrackedFile

DEFAULT_CHUNK_SIZE = 64 * 1024


def tail_bytes(
    tracked: TrackedFile,
    limit: int,
    sink: OutputSink,
    reporter: ErrorReporter,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> bool:
    """
    Display the last `limit` bytes of a stream.

    Args:
        tracked: File whose handle is read to end-of-input
        limit: Number of trailing bytes to keep (> 0)
        sink: Destination of the retained bytes
        reporter: Receives read failures
        chunk_size: Bytes requested per read

    Returns:
        True on success, False if a read failed (already reported)
    """
    buffer = bytearray()
    try:
        while True:
            chunk = tracked.handle.read(chunk_size)
            if not chunk:
                break
            buffer += chunk
            if len(buffer) > limit:
                del buffer[:-limit]
    except OSError as e:
        reporter.report_error(tracked.name, e)
        return False

    sink.write(bytes(buffer))
    return True


def tail_lines(
    tracked: TrackedFile,
    limit: int,
    sink: OutputSink,
    reporter: ErrorReporter,
) -> bool:
    """
    Display the last `limit` lines of a stream.

    A final line without a terminating newline still counts as a line.

    Args:
        tracked: File whose handle is read to end-of-input
        limit: Number of trailing lines to keep (> 0)
        sink: Destination of the retained lines
        reporter: Receives read failures

    Returns:
        True on success, False if a read failed (already reported)
    """
    try:
        lines = deque(tracked.handle, maxlen=limit)
    except OSError as e:
        reporter.report_error(tracked.name, e)
        return False

    sink.write(b"".join(lines))
    return True
