"""Exceptions raised by chainmend.

Chain, tool-pairing and progress defects are reported as data in validation
results. These exceptions cover input the engine cannot work with at all.
"""

from __future__ import annotations


class ChainmendError(Exception):
    """Base class for chainmend errors."""


class InvalidRecordError(ChainmendError):
    """Raised when a record cannot be used as a transcript message."""

    def __init__(self, reason: str, line: int | None = None) -> None:
        where = f" at line {line}" if line is not None else ""
        super().__init__(f"Invalid record{where}: {reason}")
        self.reason = reason
        self.line = line


class MessageNotFoundError(ChainmendError):
    """Raised when an operation that requires a message cannot find it."""

    def __init__(self, message_id: str) -> None:
        super().__init__(f"Message not found: {message_id!r}")
        self.message_id = message_id


class SplitError(ChainmendError):
    """Raised when a transcript cannot be split at the requested message."""
