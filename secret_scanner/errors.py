"""
Exception hierarchy for the secret scanning engine.
"""
import re
from typing import Optional


class ScannerError(Exception):
    """Base class for every error raised by the scanner."""


class InvalidPatternError(ScannerError):
    """
    Raised when a pattern source cannot be compiled.

    The registry is left untouched when this is raised.

    Attributes:
        name (str): The name the pattern was being registered under.
        pattern (str): The offending regular-expression source.
        cause (Optional[re.error]): The underlying compilation error.
    """

    def __init__(self, name: str, pattern: str, cause: Optional[re.error] = None):
        self.name = name
        self.pattern = pattern
        self.cause = cause
        message = f"Invalid pattern '{name}'"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class ScanCancelledError(ScannerError):
    """Raised when a scan observes a cancelled token."""

    def __init__(self, message: str = "operation cancelled by token"):
        super().__init__(message)


class ReadFailureError(ScannerError):
    """Raised when scan input cannot be read."""
