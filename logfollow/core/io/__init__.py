"""
Low-level I/O used by the tail engine.
"""

from logfollow.core.io.mapped import (
    DEFAULT_WINDOW_SIZE,
    MappedWindow,
    align_window_size,
)
from logfollow.core.io.opener import FileIdentity, FileOpener
from logfollow.core.io.sink import OutputError, OutputSink

__all__ = [
    # Mapped windows
    "DEFAULT_WINDOW_SIZE",
    "MappedWindow",
    "align_window_size",
    # Opening and identity
    "FileIdentity",
    "FileOpener",
    # Output
    "OutputError",
    "OutputSink",
]
