"""
logfollow - display the end of files and follow them as they grow.

This package implements a tail engine with:
- Byte and line offsets from the start or the end of a file
- Backward memory-mapped scans for the last N lines of large files
- Multiplexed output of several files with source headers
- Follow-by-name across log rotation, truncation and recreation
"""

__version__ = "0.1.0"

from logfollow.core import io, tail

__all__ = [
    "io",
    "tail",
]
