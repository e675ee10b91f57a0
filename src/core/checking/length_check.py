"""Single pass over a file reporting lines longer than the allowed width."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Callable, Optional

from common.errors import BackendError, ErrorCode
from common.models import CheckReport, ReaderSettings
from common.progress import ScanEventLog
from core.reading import LineReader

MAX_LINE_LENGTH = 80


def open_source(path: Path) -> int:
    """Open ``path`` read-only and return the raw descriptor."""

    try:
        return os.open(path, os.O_RDONLY)
    except OSError as exc:
        raise BackendError(
            ErrorCode.OPEN_FAILURE,
            f'File "{path}" could not be opened. Exiting..',
            context={"path": str(path), "errno": exc.errno},
        ) from exc


class LengthChecker:
    """Reads a file line by line and reports over-length lines through ``out``."""

    def __init__(
        self,
        settings: Optional[ReaderSettings] = None,
        *,
        out: Callable[[str], None] = print,
        events: Optional[ScanEventLog] = None,
    ) -> None:
        self.settings = settings or ReaderSettings()
        self.out = out
        self.events = events or ScanEventLog(None)

    def run(self, path: Path) -> CheckReport:
        fd = open_source(path)
        try:
            report = self.scan(fd, path)
        finally:
            os.close(fd)
        self.summarize(report)
        return report

    def scan(self, fd: int, path: Path) -> CheckReport:
        report = CheckReport(path=path)
        reader = LineReader.from_settings(fd, self.settings)
        self._emit(
            "scan_started",
            path=str(path),
            increment=self.settings.increment,
            scan=self.settings.scan,
            rewind=self.settings.rewind,
        )
        try:
            for line in reader:
                report.lines_read += 1
                length = len(line)
                if length > MAX_LINE_LENGTH:
                    report.over_length.append(report.lines_read)
                    self.out(
                        f"The length of the line at line number {report.lines_read} "
                        f"is greater than {MAX_LINE_LENGTH} characters."
                    )
                    self._emit("line_over_length", line_number=report.lines_read, length=length)
        except BackendError as exc:
            report.error = exc
            self._emit("reader_error", code=exc.code.value, message=str(exc), context=exc.context)
        return report

    def summarize(self, report: CheckReport) -> None:
        if report.over_length:
            self.out(
                f"Total {report.over_length_count} lines have a length of more than "
                f"{MAX_LINE_LENGTH} characters."
            )
        else:
            self.out(f"No lines have a length of more than {MAX_LINE_LENGTH} characters.")
        if report.error is not None:
            self.out(f"Error happened: {report.error.code.value} ({report.error.args[0]})")
        self._emit(
            "scan_finished",
            path=str(report.path),
            lines_read=report.lines_read,
            over_length=report.over_length_count,
            error=report.error.code.value if report.error else None,
        )

    def _emit(self, event: str, **fields: Any) -> None:
        try:
            self.events.emit(event, **fields)
        except BackendError as exc:
            # The scan carries on without the log; the report is still printed.
            self.out(f"[event-log] {exc.args[0]} Event logging disabled.")
            self.events = ScanEventLog(None)
