"""
Error and warning reporting.

Per-file failures are reported and processing continues; a failure to write
to the output sink is fatal.
"""

import sys
from typing import Optional, TextIO

from logfollow.core.io.sink import OutputError
from logfollow.utils.logging import get_logger

logger = get_logger(__name__)

PROGRAM_NAME = "logfollow"


def describe(exc: BaseException) -> str:
    """Short human-readable reason for an exception."""
    if isinstance(exc, OSError) and exc.strerror:
        return exc.strerror
    return str(exc) or exc.__class__.__name__


class ErrorReporter:
    """
    Reports failures to the user and remembers the resulting exit status.

    Attributes:
        stream: Text stream diagnostics are written to
        exit_status: 0 until the first reported error, then 1
        errors: Number of errors reported
    """

    def __init__(self, stream: Optional[TextIO] = None, program: str = PROGRAM_NAME):
        self.stream = stream if stream is not None else sys.stderr
        self.program = program
        self.exit_status = 0
        self.errors = 0

    def report_error(self, name: str, exc: BaseException) -> None:
        """
        Report a per-file failure.

        Args:
            name: Display name of the file involved
            exc: The failure
        """
        self.exit_status = 1
        self.errors += 1
        self.stream.write(f"{self.program}: {name}: {describe(exc)}\n")
        self.stream.flush()
        logger.debug("File error reported", name=name, error=str(exc))

    def report_output_error(self, exc: OSError) -> None:
        """
        Report a failure to write to the output sink.

        Raises:
            OutputError: Always; the process cannot do further useful work
        """
        self.exit_status = 1
        logger.error("Output write failed", error=str(exc))
        raise OutputError(f"stdout: {describe(exc)}") from exc
