"""
SessionItem: the derived unit of display ordering.

Session items are never stored. They are projected from the flat exercise
list by ``domain.session_items.build_session_items``.
"""

from enum import Enum
from typing import Tuple

from pydantic import BaseModel, Field


class SessionItemType(str, Enum):
    """
    Shape of a session item.

    - SINGLE: one standalone exercise
    - SUPERSET: two or more exercises sharing a group id
    """

    SINGLE = "single"
    SUPERSET = "superset"


class SessionItem(BaseModel):
    """
    Read-only view of one standalone exercise or one superset group.

    ``id`` is the exercise id for a single and the group id for a superset.
    ``is_complete`` is true only when every member exercise is complete.
    """

    id: str = Field(..., description="Exercise id (single) or group id (superset)")
    type: SessionItemType = Field(..., description="Single exercise or superset")
    exercise_ids: Tuple[str, ...] = Field(
        ..., min_length=1, description="Member exercise ids in flat-list order"
    )
    is_complete: bool = Field(default=False, description="All members complete")

    @property
    def is_superset(self) -> bool:
        """Check if this item is a superset group."""
        return self.type == SessionItemType.SUPERSET

    def contains(self, exercise_id: str) -> bool:
        """Check if ``exercise_id`` is a member of this item."""
        return exercise_id in self.exercise_ids

    model_config = {"frozen": True}
