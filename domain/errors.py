"""
Typed errors raised by the session domain rules.

Domain functions raise these; the application layer converts them into
CommandResult values so callers never see an exception for a rejected
user action.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Kinds of rejection a session command can report."""

    INVALID_INPUT = "invalid_input"
    ALREADY_GROUPED = "already_grouped"
    NOT_FOUND = "not_found"


class SessionError(Exception):
    """Base class for rejected session operations. No mutation was applied."""

    kind: ErrorKind = ErrorKind.INVALID_INPUT

    def __init__(self, message: str, *, subject_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.subject_id = subject_id


class InvalidInputError(SessionError):
    """Non-finite/negative weight, bad reps, empty batch, malformed reorder."""

    kind = ErrorKind.INVALID_INPUT


class AlreadyGroupedError(SessionError):
    """Grouping operation on an exercise that already belongs to a group."""

    kind = ErrorKind.ALREADY_GROUPED


class NotFoundError(SessionError):
    """Exercise, set, group or item id absent from the current session."""

    kind = ErrorKind.NOT_FOUND


class SessionStoreError(Exception):
    """Raised by persistence adapters when a load or save fails."""
