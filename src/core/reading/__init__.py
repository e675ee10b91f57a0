"""Incremental reading of logical lines from raw file descriptors."""

from .line_reader import LineReader

__all__ = ["LineReader"]
