"""Command-line front door for lazycm.

Parses CLI options, sets up logging and hands over to the interactive
runtime.
"""

from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence
from pathlib import Path

from .logs import configure_logging
from .runtime import run_app

logger = logging.getLogger(__name__)


def _non_negative_int(value: str) -> int:
    """argparse type for integer values >= 0."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("value must be >= 0")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lazycm",
        description="Run a shell command and act on the lines of its output.",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default=None,
        help="Command line to run right away (quote it as one argument).",
    )
    parser.add_argument("--shell", default=None, help="Shell used to run commands (default: from profile, /bin/sh).")
    parser.add_argument(
        "--tab-size",
        type=_non_negative_int,
        default=None,
        help="Tab stop width for command output; 0 drops tabs (default: from profile, 8).",
    )
    parser.add_argument("--config", type=Path, default=None, help="Profile file to load and save.")
    parser.add_argument("--verbose", action="store_true", help="Write debug records to the log file.")
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """Parse CLI arguments and launch the interactive worklist."""
    args = build_parser().parse_args(argv)
    log_path = configure_logging(verbose=args.verbose)
    logger.debug("logging to %s", log_path)
    run_app(args.command, shell=args.shell, tab_size=args.tab_size, config_path=args.config)


if __name__ == "__main__":
    main()
