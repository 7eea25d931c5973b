#!/usr/bin/env python3
"""
Command-line entry point for logfollow.

Usage:
    # Last 10 lines of a file
    python -m logfollow.cli.main app.log

    # Last 100 bytes of several files, with headers
    python -m logfollow.cli.main -c 100 a.log b.log

    # Follow a log across rotation
    python -m logfollow.cli.main -F -n 0 /var/log/messages
"""

import argparse
import re
import sys
from typing import List, Optional, Tuple

from logfollow.core.io.opener import FileOpener
from logfollow.core.io.sink import OutputError, OutputSink
from logfollow.core.tail.display import DisplayMultiplexer
from logfollow.core.tail.follow import FollowConfig, FollowLoop
from logfollow.core.tail.report import PROGRAM_NAME, ErrorReporter
from logfollow.core.tail.reverse import ReverseLineScanner
from logfollow.core.tail.seeker import PositionSeeker
from logfollow.core.tail.style import DisplayStyle
from logfollow.core.tail.tracked import TrackedFile
from logfollow.utils.config import Config
from logfollow.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

BLOCK_SIZE = 512
DEFAULT_LINES = 10

_COUNT_RE = re.compile(r"^([+-]?)(\d+)$")


def parse_count(value: str) -> Tuple[bool, int]:
    """
    Parse a -b/-c/-n argument.

    Args:
        value: "N" or "-N" (from the end) or "+N" (from the start)

    Returns:
        Tuple of (from_end, count)

    Raises:
        argparse.ArgumentTypeError: If value is not a count
    """
    match = _COUNT_RE.match(value.strip())
    if not match:
        raise argparse.ArgumentTypeError(f"illegal offset -- {value}")
    sign, digits = match.groups()
    return sign != "+", int(digits)


def parse_interval(value: str) -> float:
    """Parse a positive number of seconds."""
    try:
        seconds = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid interval -- {value}")
    if seconds <= 0:
        raise argparse.ArgumentTypeError(f"interval must be positive -- {value}")
    return seconds


def parse_args(argv: Optional[List[str]] = None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog=PROGRAM_NAME,
        description='Display the last part of files, optionally following them as they grow',
    )

    follow = parser.add_mutually_exclusive_group()
    follow.add_argument(
        '-f',
        dest='follow',
        action='store_true',
        help='Keep reading the open files as they grow'
    )
    follow.add_argument(
        '-F',
        dest='by_name',
        action='store_true',
        help='Follow files by name, reopening them when rotated or recreated'
    )

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        '-q',
        dest='quiet',
        action='store_true',
        help='Never print headers giving file names'
    )
    verbosity.add_argument(
        '-v',
        dest='verbose',
        action='store_true',
        help='Always print headers giving file names'
    )

    position = parser.add_mutually_exclusive_group()
    position.add_argument(
        '-b',
        dest='blocks',
        type=parse_count,
        metavar='[+-]N',
        help='Location is N 512-byte blocks'
    )
    position.add_argument(
        '-c',
        dest='bytes',
        type=parse_count,
        metavar='[+-]N',
        help='Location is N bytes'
    )
    position.add_argument(
        '-n',
        dest='lines',
        type=parse_count,
        metavar='[+-]N',
        help=f'Location is N lines (default: {DEFAULT_LINES})'
    )

    parser.add_argument(
        '-s',
        dest='sleep_interval',
        type=parse_interval,
        default=None,
        metavar='SECONDS',
        help='Seconds between polls when following (default: from config)'
    )

    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='YAML configuration file'
    )

    parser.add_argument(
        '--log-level',
        type=str,
        default=None,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level (default: from config)'
    )

    parser.add_argument('files', nargs='*', help='Files to display (default: stdin)')

    return parser.parse_args(argv)


def resolve_position(args) -> Tuple[DisplayStyle, int]:
    """
    Turn the -b/-c/-n arguments into a display style and offset.

    "+N" means starting with unit N, so the number of units skipped is N - 1.
    """
    if args.blocks is not None:
        (from_end, count), lines, units = args.blocks, False, BLOCK_SIZE
    elif args.bytes is not None:
        (from_end, count), lines, units = args.bytes, False, 1
    elif args.lines is not None:
        (from_end, count), lines, units = args.lines, True, 1
    else:
        (from_end, count), lines, units = (True, DEFAULT_LINES), True, 1

    offset = count * units
    if not from_end and offset:
        offset -= units

    return DisplayStyle.choose(lines=lines, from_end=from_end), offset


def open_files(names: List[str], opener: FileOpener, reporter: ErrorReporter) -> List[TrackedFile]:
    """
    Create one tracked file per name, opening what can be opened.

    Files that fail to open are reported and kept, closed, in the list.
    """
    files = []
    for name in names:
        tracked = TrackedFile(name=name)
        try:
            tracked.reopen(opener)
        except OSError as e:
            reporter.report_error(name, e)
        files.append(tracked)
    return files


def display_once(
    files: List[TrackedFile],
    seeker: PositionSeeker,
    display: DisplayMultiplexer,
    style: DisplayStyle,
    offset: int,
) -> None:
    """Display each open file once, in order."""
    for tracked in files:
        if not tracked.is_open:
            continue
        if display.headers:
            display.print_header(tracked)
        seeker.forward(tracked, style, offset)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    config = Config(args.config)
    configure_logging(
        log_level=args.log_level or config.get("logging.level", "WARNING"),
        log_format=config.get("logging.format", "console"),
        log_output=config.get("logging.output", "stderr"),
    )

    style, offset = resolve_position(args)
    reporter = ErrorReporter()
    sink = OutputSink(on_error=reporter.report_output_error)
    chunk_size = int(config.get("display.chunk_size", 64 * 1024))

    by_name = args.by_name
    follow = args.follow or by_name

    opener = FileOpener(allowed=args.files)
    if args.files:
        files = open_files(args.files, opener, reporter)
    else:
        try:
            files = [TrackedFile.stdin(opener)]
        except OSError as e:
            reporter.report_error("stdin", e)
            return reporter.exit_status
        if files[0].identity.is_fifo:
            # A pipe never grows once its writer is gone.
            follow = by_name = False

    headers = args.verbose or (not args.quiet and len(files) > 1)

    scanner = ReverseLineScanner(
        reporter,
        window_size=int(config.get("scan.window_size", 4 * 1024 * 1024)),
    )
    seeker = PositionSeeker(sink, reporter, scanner, chunk_size=chunk_size)
    display = DisplayMultiplexer(sink, reporter, headers=headers, chunk_size=chunk_size)

    logger.debug(
        "Starting",
        files=[f.name for f in files],
        style=style.value,
        offset=offset,
        follow=follow,
        by_name=by_name,
    )

    try:
        if follow:
            follow_config = FollowConfig.from_config(config, by_name=by_name)
            if args.sleep_interval is not None:
                follow_config = FollowConfig(poll_interval=args.sleep_interval, by_name=by_name)
            loop = FollowLoop(files, seeker, display, opener, reporter, config=follow_config)
            loop.run(style, offset)
        else:
            display_once(files, seeker, display, style, offset)

    except OutputError as e:
        sys.stderr.write(f"{PROGRAM_NAME}: {e}\n")
        return 1

    except KeyboardInterrupt:
        logger.info("Received interrupt signal")

    finally:
        for tracked in files:
            if not tracked.is_stdin:
                tracked.close()
        logger.info(
            "Finished",
            bytes_written=sink.bytes_written,
            errors=reporter.errors,
            exit_status=reporter.exit_status,
        )

    return reporter.exit_status


if __name__ == '__main__':
    sys.exit(main())
