"""Data models shared across the reader, checker, and CLI layers."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Literal, Optional

from .errors import BackendError

ScanMode = Literal["rescan", "incremental"]
RewindMode = Literal["seek", "retain"]

DEFAULT_BUFFER_INCREMENT = 1024


@dataclass(slots=True)
class Line:
    """One logical line handed over by the reader.

    ``data`` never contains the newline. ``terminated`` is False only for a
    final line that ran into end-of-input (or a read error) without one.
    """

    data: bytearray
    terminated: bool = True

    def __len__(self) -> int:
        return len(self.data)


@dataclass(slots=True)
class ReaderSettings:
    """Tuning knobs for ``LineReader``."""

    increment: int = DEFAULT_BUFFER_INCREMENT
    scan: ScanMode = "rescan"
    rewind: RewindMode = "seek"


@dataclass(slots=True)
class GlobalSettings:
    buffer_increment: int = DEFAULT_BUFFER_INCREMENT


@dataclass(slots=True)
class ProfileSettings:
    name: str
    description: str = ""
    scan: ScanMode = "rescan"
    rewind: RewindMode = "seek"


@dataclass(slots=True)
class RuntimeConfig:
    global_settings: GlobalSettings
    profile: ProfileSettings

    def reader_settings(self) -> ReaderSettings:
        return ReaderSettings(
            increment=self.global_settings.buffer_increment,
            scan=self.profile.scan,
            rewind=self.profile.rewind,
        )


@dataclass(slots=True)
class CheckReport:
    """Outcome of one pass over a file."""

    path: Path
    lines_read: int = 0
    over_length: List[int] = field(default_factory=list)
    error: Optional[BackendError] = None

    @property
    def over_length_count(self) -> int:
        return len(self.over_length)

    @property
    def ok(self) -> bool:
        return self.error is None
