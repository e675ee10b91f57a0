"""Incremental line extraction from a raw, read-only file descriptor."""
from __future__ import annotations

import errno
import os
from typing import Iterator, Optional, Tuple

from common.errors import BackendError, ErrorCode
from common.models import DEFAULT_BUFFER_INCREMENT, Line, ReaderSettings

NEWLINE = b"\n"
SCAN_MODES = ("rescan", "incremental")
REWIND_MODES = ("seek", "retain")


def _allocate(size: int) -> bytes:
    return bytes(size)


class LineReader:
    """Reads one logical line per call from a borrowed file descriptor.

    The working buffer grows by ``increment`` bytes whenever it fills up
    without a newline in sight. Bytes read past the newline are either given
    back to the descriptor with a relative ``lseek`` (``rewind="seek"``) or
    kept and served first on the next call (``rewind="retain"``). The latter
    also works for pipes.

    ``scan="rescan"`` searches the whole buffered region after every growth
    step; ``scan="incremental"`` only looks at bytes appended since the last
    search.
    """

    def __init__(
        self,
        fd: int,
        *,
        increment: int = DEFAULT_BUFFER_INCREMENT,
        scan: str = "rescan",
        rewind: str = "seek",
    ) -> None:
        if isinstance(increment, bool) or not isinstance(increment, int) or increment <= 0:
            raise BackendError(
                ErrorCode.CONFIG_ERROR,
                f"Buffer increment must be a positive integer, got {increment!r}",
            )
        if scan not in SCAN_MODES:
            raise BackendError(ErrorCode.CONFIG_ERROR, f"Unknown scan mode '{scan}'")
        if rewind not in REWIND_MODES:
            raise BackendError(ErrorCode.CONFIG_ERROR, f"Unknown rewind mode '{rewind}'")
        self.fd = fd
        self.increment = increment
        self.scan = scan
        self.rewind = rewind
        self._pending = bytearray()
        self._deferred: Optional[BackendError] = None

    @classmethod
    def from_settings(cls, fd: int, settings: ReaderSettings) -> "LineReader":
        return cls(fd, increment=settings.increment, scan=settings.scan, rewind=settings.rewind)

    def __iter__(self) -> Iterator[Line]:
        while True:
            line = self.next_line()
            if line is None:
                return
            yield line

    def next_line(self) -> Optional[Line]:
        """Return the next line, or ``None`` once the input is exhausted.

        Raises ``BackendError`` with one of the reader error codes when the
        descriptor is unusable, the buffer cannot grow, the cursor cannot be
        repositioned, or a read fails before any byte was gathered.
        """

        self._check_descriptor()
        buffer = self._pending
        self._pending = bytearray()
        filled = len(buffer)
        scanned = 0
        exhausted = False

        while True:
            start = scanned if self.scan == "incremental" else 0
            index = buffer.find(NEWLINE, start, filled)
            if index >= 0:
                return self._extract(buffer, filled, index)
            scanned = filled
            if exhausted:
                break
            self._grow(buffer)
            filled, exhausted = self._fill(buffer, filled)

        if filled == 0:
            return None
        del buffer[filled:]
        return Line(buffer, terminated=False)

    def _check_descriptor(self) -> None:
        fd = self.fd
        if isinstance(fd, bool) or not isinstance(fd, int) or fd < 0:
            self._pending = bytearray()
            raise BackendError(
                ErrorCode.INVALID_DESCRIPTOR,
                f"File descriptor must be a non-negative integer, got {fd!r}",
            )

    def _grow(self, buffer: bytearray) -> None:
        size = len(buffer)
        try:
            buffer.extend(_allocate(self.increment))
        except MemoryError as exc:
            buffer.clear()
            raise BackendError(
                ErrorCode.OUT_OF_MEMORY,
                f"Could not grow line buffer beyond {size} bytes",
                context={"increment": self.increment},
            ) from exc

    def _fill(self, buffer: bytearray, filled: int) -> Tuple[int, bool]:
        """Read into the free tail of ``buffer``; report (filled, exhausted)."""

        if self._deferred is not None:
            if filled:
                return filled, True
            error, self._deferred = self._deferred, None
            raise error

        capacity = len(buffer)
        while filled < capacity:
            try:
                chunk = self._read_chunk(capacity - filled)
            except OSError as exc:
                error = self._read_failure(exc)
                if not filled:
                    raise error from exc
                # Hand out what we have; the failure surfaces on the next call.
                error.__cause__ = exc
                self._deferred = error
                return filled, True
            if not chunk:
                return filled, True
            buffer[filled : filled + len(chunk)] = chunk
            filled += len(chunk)
        return filled, False

    def _read_chunk(self, size: int) -> bytes:
        return os.read(self.fd, size)

    def _read_failure(self, exc: OSError) -> BackendError:
        if exc.errno == errno.EBADF:
            return BackendError(
                ErrorCode.INVALID_DESCRIPTOR,
                f"File descriptor {self.fd} is not open for reading",
                context={"errno": exc.errno},
            )
        return BackendError(
            ErrorCode.READ_ERROR,
            f"Reading from file descriptor {self.fd} failed: {exc.strerror or exc}",
            context={"errno": exc.errno},
        )

    def _extract(self, buffer: bytearray, filled: int, index: int) -> Line:
        excess = filled - (index + 1)
        if self.rewind == "retain":
            self._pending = buffer[index + 1 : filled]
        else:
            if excess:
                try:
                    os.lseek(self.fd, -excess, os.SEEK_CUR)
                except OSError as exc:
                    raise BackendError(
                        ErrorCode.SEEK_FAILURE,
                        f"Could not move file descriptor {self.fd} back by {excess} bytes",
                        context={"errno": exc.errno, "excess": excess},
                    ) from exc
                # The rewound bytes are read again, so a stale failure no longer applies.
                self._deferred = None
        del buffer[index:]
        return Line(buffer)
