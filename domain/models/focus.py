"""
Focus and progression cursors for a session.
"""

from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, Field


class ItemStatus(str, Enum):
    """Per-item position in the session workflow."""

    NOT_STARTED = "not_started"
    ACTIVE = "active"
    COMPLETE = "complete"
    SKIPPED = "skipped"
    DEFERRED = "deferred"


class FocusState(BaseModel):
    """
    Explicit cursor state passed into and returned from progression rules.

    - progression_id: item the workflow considers next to do (never complete)
    - focus_id: item currently expanded for viewing/editing
    - last_focused_id: item focused just before the session ran out of work

    Skip and defer marks are kept per exercise id so they survive
    regrouping. An item counts as skipped (deferred) when all of its
    members carry the mark.
    """

    progression_id: Optional[str] = Field(default=None)
    focus_id: Optional[str] = Field(default=None)
    last_focused_id: Optional[str] = Field(default=None)
    skipped_ids: Tuple[str, ...] = Field(default=())
    deferred_ids: Tuple[str, ...] = Field(default=())

    @property
    def is_editing_history(self) -> bool:
        """Focus has been moved away from the progression item."""
        return self.focus_id is not None and self.focus_id != self.progression_id

    model_config = {"frozen": True}
