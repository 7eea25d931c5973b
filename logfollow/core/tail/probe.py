"""
Identity probing for follow-by-name.

Each poll, the path of every open file is opened again and its identity is
compared against the snapshot of the handle being followed. Comparing
device and inode is the only constant-time way to tell "the file was
replaced" apart from "the file just grew".
"""

from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, Optional

from logfollow.core.io.opener import FileIdentity, FileOpener
from logfollow.core.tail.tracked import TrackedFile
from logfollow.utils.logging import get_logger

logger = get_logger(__name__)


class ProbeOutcome(str, Enum):
    """What happened to the file at a tracked path since the last poll."""

    UNCHANGED = "unchanged"    # same file, possibly grown
    REPLACED = "replaced"      # a different file now lives at the path
    VANISHED = "vanished"      # the path can no longer be opened
    TRUNCATED = "truncated"    # same file, but shorter than what was read


@dataclass
class ProbeResult:
    """
    Tagged result of one probe.

    Attributes:
        outcome: Classification of the change
        handle: Newly opened handle (REPLACED only; caller takes ownership)
        identity: Snapshot of the newly opened handle (REPLACED only)
        error: Failure other than a missing file (VANISHED only)
    """
    outcome: ProbeOutcome
    handle: Optional[BinaryIO] = None
    identity: Optional[FileIdentity] = None
    error: Optional[OSError] = None


class IdentityProbe:
    """
    Classifies changes at tracked paths.

    Attributes:
        opener: Open service and identity provider
    """

    def __init__(self, opener: FileOpener):
        self.opener = opener

    def probe(self, tracked: TrackedFile) -> ProbeResult:
        """
        Reopen a tracked path and compare identities.

        Args:
            tracked: Open, non-stdin file

        Returns:
            Probe result; the probe handle is closed unless it is returned
        """
        handle = None
        try:
            handle = self.opener.open(tracked.name)
            fresh = self.opener.stat(handle)
        except FileNotFoundError:
            if handle is not None:
                handle.close()
            return ProbeResult(ProbeOutcome.VANISHED)
        except OSError as e:
            if handle is not None:
                handle.close()
            return ProbeResult(ProbeOutcome.VANISHED, error=e)

        cached = tracked.identity
        if cached is None or not fresh.same_file(cached) or fresh.link_count == 0:
            logger.info(
                "Tracked file replaced",
                name=tracked.name,
                old_inode=cached.inode if cached else None,
                new_inode=fresh.inode,
            )
            return ProbeResult(ProbeOutcome.REPLACED, handle=handle, identity=fresh)

        handle.close()

        if fresh.is_regular and fresh.size < tracked.position():
            logger.info(
                "Tracked file truncated",
                name=tracked.name,
                size=fresh.size,
                position=tracked.position(),
            )
            return ProbeResult(ProbeOutcome.TRUNCATED, identity=fresh)

        return ProbeResult(ProbeOutcome.UNCHANGED)
