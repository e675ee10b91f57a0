"""Structured event logging for length-check runs."""
from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Any, Optional

from .errors import BackendError, ErrorCode


class ScanEventLog:
    """Appends scan events to JSONL for later inspection.

    The target is created (or opened for append) up front so an unusable
    path fails before any scanning starts.
    """

    def __init__(self, path: Optional[Path]) -> None:
        self.path = path
        if path:
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                with path.open("a", encoding="utf-8"):
                    pass
            except OSError as exc:
                raise BackendError(
                    ErrorCode.CONFIG_ERROR,
                    f"Event log '{path}' cannot be written: {exc.strerror or exc}",
                    context={"path": str(path), "errno": exc.errno},
                ) from exc

    def emit(self, event: str, **fields: Any) -> None:
        if not self.path:
            return
        payload = {"event": event, **fields, "timestamp": time.time()}
        try:
            with self.path.open("a", encoding="utf-8") as handle:
                handle.write(json.dumps(payload, default=str))
                handle.write("\n")
        except OSError as exc:
            raise BackendError(
                ErrorCode.CONFIG_ERROR,
                f"Event log '{self.path}' cannot be written: {exc.strerror or exc}",
                context={"path": str(self.path), "errno": exc.errno, "event": event},
            ) from exc
