"""Shared error codes and exceptions for the reader, checker, and CLI."""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    INVALID_DESCRIPTOR = "INVALID_DESCRIPTOR"
    OUT_OF_MEMORY = "OUT_OF_MEMORY"
    SEEK_FAILURE = "SEEK_FAILURE"
    READ_ERROR = "READ_ERROR"
    USAGE_ERROR = "USAGE_ERROR"
    OPEN_FAILURE = "OPEN_FAILURE"
    CONFIG_ERROR = "CONFIG_ERROR"


READER_ERROR_CODES = frozenset(
    {
        ErrorCode.INVALID_DESCRIPTOR,
        ErrorCode.OUT_OF_MEMORY,
        ErrorCode.SEEK_FAILURE,
        ErrorCode.READ_ERROR,
    }
)


class BackendError(RuntimeError):
    """Exception carrying a structured error code for the CLI."""

    def __init__(self, code: ErrorCode, message: str, *, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.code = code
        self.context = context or {}

    def __str__(self) -> str:
        base = super().__str__()
        return f"[{self.code.value}] {base}" if base else self.code.value
