"""
Exercise value object: an exercise instance within one logging session.

This is the session-scoped instance, not the global catalog entry. The
catalog supplies name/source when the exercise is added; after that the
instance has its own id and owns its sets.
"""

from datetime import datetime
from typing import Literal, Optional, Tuple

from pydantic import BaseModel, Field

from domain.models.workout_set import WorkoutSet


class Exercise(BaseModel):
    """
    Value object representing an exercise logged in a session.

    Exercises sharing the same ``group_id`` form one superset. A missing
    ``group_id`` means the exercise is standalone.

    ``last_set_at`` tracks the most recently logged set for rest-timer
    ownership. It only moves forward when a set is created; editing or
    deleting sets never rewinds it.

    Examples:
        >>> ex = Exercise(id="e1", name="Bench Press")
        >>> ex.is_grouped
        False
        >>> ex.set_count
        0
    """

    # Identity
    id: str = Field(..., min_length=1, description="Session instance id")
    name: str = Field(..., min_length=1, description="Display name copied from the catalog")
    source: Literal["system", "user"] = Field(
        default="user", description="Catalog the name came from"
    )
    catalog_id: Optional[str] = Field(
        default=None, description="Catalog entry id, distinct from the instance id"
    )
    added_at: Optional[datetime] = Field(
        default=None, description="When the exercise was added to the session"
    )

    # Logging state
    sets: Tuple[WorkoutSet, ...] = Field(
        default=(), description="Sets in logging order"
    )
    is_complete: bool = Field(default=False, description="User finished this exercise")
    group_id: Optional[str] = Field(
        default=None, description="Superset membership; None for standalone"
    )
    last_set_at: Optional[datetime] = Field(
        default=None, description="Timestamp of the most recently created set"
    )

    @property
    def is_grouped(self) -> bool:
        """Check if this exercise carries a group id."""
        return self.group_id is not None

    @property
    def set_count(self) -> int:
        """Number of logged sets."""
        return len(self.sets)

    @property
    def has_sets(self) -> bool:
        """Check if at least one set has been logged."""
        return bool(self.sets)

    def find_set(self, set_id: str) -> Optional[WorkoutSet]:
        """Return the set with ``set_id`` or None."""
        return next((s for s in self.sets if s.id == set_id), None)

    def __str__(self) -> str:
        parts = [self.name]
        if self.sets:
            parts.append(f"({len(self.sets)} sets)")
        if self.group_id:
            parts.append(f"[{self.group_id}]")
        return " ".join(parts)

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "examples": [
                {"id": "ex-1", "name": "Bench Press", "source": "system"},
                {
                    "id": "ex-2",
                    "name": "Bent Over Row",
                    "group_id": "group-3f2a",
                    "sets": [
                        {
                            "id": "set-1",
                            "weight": 60,
                            "reps": 10,
                            "timestamp": "2024-01-01T10:00:00Z",
                            "superset_set_id": "superset-9c1d",
                        }
                    ],
                },
            ]
        },
    }
