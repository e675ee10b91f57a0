"""Line length checks over a single file."""

from .length_check import MAX_LINE_LENGTH, LengthChecker, open_source

__all__ = ["LengthChecker", "MAX_LINE_LENGTH", "open_source"]
