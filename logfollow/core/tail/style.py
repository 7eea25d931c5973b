"""
Display styles: where in a file the display starts.
"""

from enum import Enum


class DisplayStyle(str, Enum):
    """
    Combination of unit (bytes or lines) and anchor (start or end).
    """

    BYTES_FROM_START = "bytes_from_start"   # skip N bytes, show the rest
    LINES_FROM_START = "lines_from_start"   # skip N lines, show the rest
    BYTES_FROM_END = "bytes_from_end"       # show the last N bytes
    LINES_FROM_END = "lines_from_end"       # show the last N lines

    @property
    def from_end(self) -> bool:
        return self in (DisplayStyle.BYTES_FROM_END, DisplayStyle.LINES_FROM_END)

    @property
    def counts_lines(self) -> bool:
        return self in (DisplayStyle.LINES_FROM_START, DisplayStyle.LINES_FROM_END)

    @classmethod
    def choose(cls, lines: bool, from_end: bool) -> "DisplayStyle":
        """Pick the style for a unit/anchor pair."""
        if lines:
            return cls.LINES_FROM_END if from_end else cls.LINES_FROM_START
        return cls.BYTES_FROM_END if from_end else cls.BYTES_FROM_START
