"""
File-open service and identity snapshots.

The tail engine never calls open() itself when (re)acquiring files; it asks
a FileOpener. The default opener can be restricted to a fixed set of names,
so that a follow session can only ever reopen the files it was given.
"""

import os
import stat
from dataclasses import dataclass
from typing import BinaryIO, Iterable, Optional

from logfollow.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class FileIdentity:
    """
    Snapshot of a file's identity as of one stat call.

    Attributes:
        device: Device id
        inode: Inode number
        link_count: Hard-link count
        size: Size in bytes
        mode: File mode bits
    """
    device: int
    inode: int
    link_count: int
    size: int
    mode: int = stat.S_IFREG

    @classmethod
    def from_stat(cls, st: os.stat_result) -> "FileIdentity":
        """Build a snapshot from an os.stat_result."""
        return cls(
            device=st.st_dev,
            inode=st.st_ino,
            link_count=st.st_nlink,
            size=st.st_size,
            mode=st.st_mode,
        )

    @property
    def is_regular(self) -> bool:
        """True for regular files (seekable, mappable)."""
        return stat.S_ISREG(self.mode)

    @property
    def is_fifo(self) -> bool:
        """True for pipes and FIFOs."""
        return stat.S_ISFIFO(self.mode)

    def same_file(self, other: "FileIdentity") -> bool:
        """True if both snapshots describe the same underlying file."""
        return self.device == other.device and self.inode == other.inode


class FileOpener:
    """
    Opens files for reading and takes identity snapshots.

    Attributes:
        allowed: Names this opener may open (None = unrestricted)
    """

    def __init__(self, allowed: Optional[Iterable[str]] = None):
        """
        Initialize the opener.

        Args:
            allowed: Optional set of names; opening anything else raises
                PermissionError
        """
        self.allowed = frozenset(allowed) if allowed is not None else None

    def open(self, path: str) -> BinaryIO:
        """
        Open a file for binary reading.

        Args:
            path: Name to open

        Returns:
            Buffered binary handle

        Raises:
            PermissionError: If the name is outside the allowed set
            OSError: If the open fails
        """
        if self.allowed is not None and path not in self.allowed:
            raise PermissionError(f"Opening {path!r} is not permitted")

        handle = open(path, "rb")
        logger.debug("Opened file", path=path, fd=handle.fileno())
        return handle

    def stat(self, handle: BinaryIO) -> FileIdentity:
        """
        Snapshot the identity of an open handle.

        Raises:
            OSError: If fstat fails
        """
        return FileIdentity.from_stat(os.fstat(handle.fileno()))
