"""
WorkoutSet value object: one logged set of one exercise.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class WorkoutSet(BaseModel):
    """
    Value object representing a single logged set.

    Weight is always stored in kilograms; display units are a rendering
    concern. Zero reps is valid (timed holds, bodyweight work logged as 0).

    ``superset_set_id`` is shared by every set created in the same
    "log set" action across the members of a group, so sets entered
    together can be recognized even though each is stored on its own
    exercise.

    Examples:
        >>> from datetime import datetime, timezone
        >>> s = WorkoutSet(
        ...     id="s1",
        ...     weight=60.0,
        ...     reps=10,
        ...     timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc),
        ... )
        >>> s.volume
        600.0
    """

    id: str = Field(..., min_length=1, description="Set id, unique within its exercise")
    weight: float = Field(
        ..., ge=0, allow_inf_nan=False, description="Weight in kilograms"
    )
    reps: int = Field(..., ge=0, description="Repetitions performed")
    timestamp: datetime = Field(..., description="When the set was logged")
    rest_duration: Optional[int] = Field(
        default=None,
        ge=0,
        description="Seconds of rest since the previous set before this one was logged",
    )
    superset_set_id: Optional[str] = Field(
        default=None,
        description="Correlation id shared by sets logged together across a group",
    )

    @property
    def volume(self) -> float:
        """Weight times reps."""
        return self.weight * self.reps

    def __str__(self) -> str:
        return f"{self.weight:g}kg x {self.reps}"

    model_config = {"frozen": True}
