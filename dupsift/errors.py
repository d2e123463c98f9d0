"""
Exception types raised by the duplicate detection engine.
"""

from typing import Optional


class DupsiftError(Exception):
    """Base class for all dupsift errors."""


class AccessError(DupsiftError):
    """A file could not be opened, stat'ed or read."""

    def __init__(self, path: str, reason: Optional[str] = None):
        self.path = path
        self.reason = reason
        message = f"Cannot access {path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class DuplicatePathError(DupsiftError):
    """The same path was inserted twice into one candidate store."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Path already present: {path}")


class HashingCancelled(DupsiftError):
    """Confirmation hashing was stopped by a cancel request."""
