"""CLI entry point: report lines longer than 80 characters in one file."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, NoReturn, Optional

from common.config import DEFAULT_PROFILE, load_runtime_config
from common.errors import BackendError, ErrorCode
from common.progress import ScanEventLog
from core.checking import LengthChecker

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_READER_ERROR = 2

USAGE_HINT = (
    "This program takes only one argument which is the name of a file whose "
    "line lengths have to be checked. Put -- before a file name that starts with -."
)


class UsageParser(argparse.ArgumentParser):
    """Argument parser that raises instead of exiting on misuse."""

    def error(self, message: str) -> NoReturn:
        raise BackendError(ErrorCode.USAGE_ERROR, message)


def render_usage_error(parser: argparse.ArgumentParser, exc: BackendError) -> None:
    print("Error: Incorrect usage.")
    print(USAGE_HINT)
    parser.print_usage(sys.stdout)
    print(f"{parser.prog}: {exc.args[0]}")
    print("Please try again. Exiting..")


def build_parser() -> argparse.ArgumentParser:
    parser = UsageParser(
        prog="longline-check",
        description="Report lines longer than 80 characters in a text file.",
    )
    parser.add_argument("file", help="Path of the file whose line lengths are checked")
    parser.add_argument(
        "--profile",
        default=DEFAULT_PROFILE,
        help=f"Reader profile to use (default: {DEFAULT_PROFILE})",
    )
    parser.add_argument("--config", help="JSON config document with reader profiles")
    parser.add_argument("--event-log", help="Append JSONL scan events to this file")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except BackendError as exc:
        render_usage_error(parser, exc)
        return EXIT_USAGE

    try:
        runtime = load_runtime_config(
            args.profile,
            config_path=Path(args.config) if args.config else None,
        )
    except BackendError as exc:
        print(f"[config] {exc.args[0]}")
        return EXIT_USAGE

    try:
        events = ScanEventLog(Path(args.event_log) if args.event_log else None)
    except BackendError as exc:
        print(f"[config] {exc.args[0]}")
        return EXIT_USAGE

    checker = LengthChecker(runtime.reader_settings(), events=events)
    try:
        report = checker.run(Path(args.file))
    except BackendError as exc:
        print(exc.args[0])
        return EXIT_USAGE
    return EXIT_OK if report.ok else EXIT_READER_ERROR


def run() -> None:
    raise SystemExit(main())


if __name__ == "__main__":
    run()
