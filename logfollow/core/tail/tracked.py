"""
Files under observation by the tail engine.
"""

import sys
from dataclasses import dataclass
from typing import BinaryIO, Optional

from logfollow.core.io.opener import FileIdentity, FileOpener
from logfollow.utils.logging import get_logger

logger = get_logger(__name__)

STDIN_NAME = "stdin"


@dataclass(eq=False)
class TrackedFile:
    """
    One input source.

    While a handle is present, identity is the snapshot taken by the last
    successful stat on that handle. It is deliberately not refreshed from
    disk; rotation detection compares it against a fresh probe.

    Attributes:
        name: Display name (also the path reopened in follow-by-name mode)
        handle: Open binary handle, or None while the file is unavailable
        identity: Identity snapshot for the current handle
        is_stdin: True for the primary input stream, which is never reopened
    """
    name: str
    handle: Optional[BinaryIO] = None
    identity: Optional[FileIdentity] = None
    is_stdin: bool = False

    @classmethod
    def stdin(cls, opener: FileOpener, stream: Optional[BinaryIO] = None) -> "TrackedFile":
        """
        Track standard input.

        Args:
            opener: Used to snapshot the stream's identity
            stream: Binary stream to use (default: sys.stdin.buffer)
        """
        handle = stream if stream is not None else sys.stdin.buffer
        return cls(
            name=STDIN_NAME,
            handle=handle,
            identity=opener.stat(handle),
            is_stdin=True,
        )

    @property
    def is_open(self) -> bool:
        return self.handle is not None

    def reopen(self, opener: FileOpener) -> None:
        """
        Open the file by name and snapshot its identity.

        Raises:
            OSError: If the open or the stat fails; the file stays closed
        """
        handle = opener.open(self.name)
        try:
            identity = opener.stat(handle)
        except OSError:
            handle.close()
            raise
        self.adopt(handle, identity)

    def adopt(self, handle: BinaryIO, identity: FileIdentity) -> None:
        """Replace the current handle (closing it) with a newly opened one."""
        if self.handle is not None and self.handle is not handle:
            self.handle.close()
        self.handle = handle
        self.identity = identity

    def position(self) -> int:
        """Current read offset of the handle."""
        if self.handle is None:
            raise ValueError(f"{self.name} is not open")
        return self.handle.tell()

    def close(self) -> None:
        """Close the handle and mark the file unavailable."""
        if self.handle is not None:
            try:
                self.handle.close()
            finally:
                self.handle = None
            logger.debug("Closed tracked file", name=self.name)
