"""Core components for positioning and following files."""

from logfollow.core import io, tail

__all__ = ["io", "tail"]
