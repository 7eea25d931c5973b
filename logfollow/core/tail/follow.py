"""
Indefinite following of one or more files.

Every tracked file is positioned once, then the loop polls forever:

1. with follow-by-name enabled, closed files are reopened and open files
   are probed for replacement, disappearance and truncation;
2. every open file is asked for new content;
3. the loop sleeps for a fixed interval.

There is no terminal state; the loop ends when the process is stopped.
Only output failures escape the loop.
"""

import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from logfollow.core.io.opener import FileOpener
from logfollow.core.tail.display import DisplayMultiplexer
from logfollow.core.tail.probe import IdentityProbe, ProbeOutcome
from logfollow.core.tail.report import ErrorReporter
from logfollow.core.tail.seeker import PositionSeeker
from logfollow.core.tail.style import DisplayStyle
from logfollow.core.tail.tracked import TrackedFile
from logfollow.utils.config import Config
from logfollow.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class FollowConfig:
    """
    Follow loop settings.

    Attributes:
        poll_interval: Seconds slept between polls
        by_name: Reopen files by name and track replacement (identity watch)
    """
    poll_interval: float = 0.25
    by_name: bool = False

    def __post_init__(self):
        if self.poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {self.poll_interval}")

    @classmethod
    def from_config(cls, config: Config, by_name: bool = False) -> "FollowConfig":
        """Build settings from the configuration tree."""
        return cls(
            poll_interval=float(config.get("follow.poll_interval", 0.25)),
            by_name=by_name,
        )


class FollowLoop:
    """
    Drives the follow session over an ordered set of tracked files.

    Files are serviced in the order given, every iteration.

    Attributes:
        files: Tracked files, in display order
        config: Loop settings
        iterations: Completed poll iterations
    """

    def __init__(
        self,
        files: List[TrackedFile],
        seeker: PositionSeeker,
        display: DisplayMultiplexer,
        opener: FileOpener,
        reporter: ErrorReporter,
        config: Optional[FollowConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the loop.

        Args:
            files: Tracked files (closed entries are allowed)
            seeker: Initial positioning
            display: Per-poll output
            opener: Open service used for reopening and probing
            reporter: Receives per-file failures
            config: Loop settings
            sleep: Sleep function (injected by tests)
        """
        self.files = files
        self.seeker = seeker
        self.display = display
        self.opener = opener
        self.reporter = reporter
        self.config = config or FollowConfig()
        self.sleep = sleep
        self.probe = IdentityProbe(opener)
        self.iterations = 0
        self._open_errors: dict = {}

    def start(self, style: DisplayStyle, offset: int) -> bool:
        """
        Position and display every open file once.

        Args:
            style: Unit and anchor of the offset
            offset: Count of bytes or lines

        Returns:
            True if at least one file was open
        """
        active = False
        for tracked in self.files:
            if not tracked.is_open:
                continue
            active = True

            if self.display.headers:
                self.display.print_header(tracked)
            if not self.seeker.forward(tracked, style, offset):
                tracked.close()
            self.display.mark(tracked)

        logger.info(
            "Follow session started",
            files=len(self.files),
            active=active,
            by_name=self.config.by_name,
        )
        return active

    def poll(self) -> None:
        """Run one iteration: reacquire, probe, display."""
        if self.config.by_name:
            for tracked in self.files:
                if tracked.is_stdin:
                    continue
                if not tracked.is_open:
                    self._reacquire(tracked)
                else:
                    self._check_identity(tracked)

        for tracked in self.files:
            if tracked.is_open:
                self.display.show(tracked)

        self.iterations += 1

    def run(self, style: DisplayStyle, offset: int, iterations: Optional[int] = None) -> None:
        """
        Position all files, then poll until stopped.

        Args:
            style: Unit and anchor of the initial offset
            offset: Count of bytes or lines
            iterations: Stop after this many polls (None = never)
        """
        if not self.start(style, offset) and not self.config.by_name:
            return

        while iterations is None or self.iterations < iterations:
            self.poll()
            self.sleep(self.config.poll_interval)

    def _reacquire(self, tracked: TrackedFile) -> None:
        try:
            tracked.reopen(self.opener)
        except FileNotFoundError:
            self._open_errors.pop(tracked.name, None)
            return
        except OSError as e:
            # Report a persistent failure once, not on every poll.
            if self._open_errors.get(tracked.name) != e.errno:
                self._open_errors[tracked.name] = e.errno
                self.reporter.report_error(tracked.name, e)
            return

        self._open_errors.pop(tracked.name, None)
        self.display.forget(tracked)
        logger.info("Tracked file appeared", name=tracked.name, inode=tracked.identity.inode)

    def _check_identity(self, tracked: TrackedFile) -> None:
        result = self.probe.probe(tracked)

        if result.outcome is ProbeOutcome.UNCHANGED:
            return

        if result.outcome is ProbeOutcome.VANISHED:
            if result.error is not None:
                self._open_errors[tracked.name] = result.error.errno
                self.reporter.report_error(tracked.name, result.error)
            self.display.show(tracked)
            tracked.close()
            logger.info("Tracked file vanished", name=tracked.name)

        elif result.outcome is ProbeOutcome.REPLACED:
            self.display.show(tracked)
            tracked.adopt(result.handle, result.identity)
            self.display.forget(tracked)

        elif result.outcome is ProbeOutcome.TRUNCATED:
            try:
                tracked.handle.seek(0)
            except OSError as e:
                tracked.close()
                self.reporter.report_error(tracked.name, e)
                return
            tracked.identity = result.identity
            self.display.forget(tracked)
