"""
The tail engine.

This package provides positioning and following of files with:
- Byte and line offsets from the start or end of a file
- Backward mapped scans for the last N lines of large files
- Header-labelled multiplexing of several files
- Rotation, truncation and disappearance detection while following
"""

from logfollow.core.tail.counting import tail_bytes, tail_lines
from logfollow.core.tail.display import DisplayMultiplexer, DisplayState, format_header
from logfollow.core.tail.follow import FollowConfig, FollowLoop
from logfollow.core.tail.probe import IdentityProbe, ProbeOutcome, ProbeResult
from logfollow.core.tail.report import ErrorReporter
from logfollow.core.tail.reverse import ReverseLineScanner
from logfollow.core.tail.seeker import PositionSeeker
from logfollow.core.tail.style import DisplayStyle
from logfollow.core.tail.tracked import TrackedFile

__all__ = [
    "DisplayMultiplexer",
    "DisplayState",
    "DisplayStyle",
    "ErrorReporter",
    "FollowConfig",
    "FollowLoop",
    "IdentityProbe",
    "PositionSeeker",
    "ProbeOutcome",
    "ProbeResult",
    "ReverseLineScanner",
    "TrackedFile",
    "format_header",
    "tail_bytes",
    "tail_lines",
]
