"""
Session aggregate root: one logging session from "start" to "finish".
"""

from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from domain.models.exercise import Exercise
from domain.models.focus import FocusState


class Session(BaseModel):
    """
    Aggregate root representing a workout logging session.

    The flat ``exercises`` list is the mutable source of truth. Session
    items, rest ownership and statuses are all derived from it. Unlike the
    value objects it contains, a Session has identity and is mutated by the
    application layer.

    ``last_set_at`` / ``last_set_owner_id`` mirror the most recent set across
    the whole session. ``rest_dismissed_at`` records the last time the rest
    timer was stopped, by a dismissal or by completing the owning item, so
    the stop survives a reload.

    Examples:
        >>> from datetime import datetime, timezone
        >>> session = Session(
        ...     id="s-1",
        ...     started_at=datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc),
        ...     exercises=[Exercise(id="e1", name="Squat")],
        ... )
        >>> session.session_type
        'exercise'
    """

    # Identity
    id: str = Field(..., min_length=1, description="Session id (UUID)")
    name: str = Field(default="", max_length=200, description="Display name")
    is_user_named: bool = Field(
        default=False, description="User renamed the session; suppresses auto-naming"
    )

    # Structure
    exercises: List[Exercise] = Field(
        default_factory=list, description="Exercises in flat presentation order"
    )

    # Timing
    started_at: datetime = Field(..., description="When logging started")
    ended_at: Optional[datetime] = Field(default=None, description="When the session finished")
    is_complete: bool = Field(default=False, description="Session finished and archived")

    # Rest timer mirror
    last_set_at: Optional[datetime] = Field(
        default=None, description="Timestamp of the most recent set in the session"
    )
    last_set_owner_id: Optional[str] = Field(
        default=None, description="Exercise or group id that logged the most recent set"
    )
    rest_dismissed_at: Optional[datetime] = Field(
        default=None, description="When the rest timer was last dismissed or its owner completed"
    )

    # Cursor state
    focus: FocusState = Field(default_factory=FocusState)

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def session_type(self) -> Literal["exercise", "workout"]:
        """'exercise' for exactly one exercise, 'workout' otherwise."""
        return "exercise" if len(self.exercises) == 1 else "workout"

    @property
    def duration_sec(self) -> int:
        """Rounded seconds between start and end; 0 while still open."""
        if self.ended_at is None:
            return 0
        return max(0, round((self.ended_at - self.started_at).total_seconds()))

    @property
    def total_sets(self) -> int:
        """Total sets logged across all exercises."""
        return sum(ex.set_count for ex in self.exercises)

    @property
    def has_logged_sets(self) -> bool:
        """Check if any exercise has at least one set."""
        return any(ex.has_sets for ex in self.exercises)

    @property
    def exercise_ids(self) -> List[str]:
        """Exercise ids in flat order."""
        return [ex.id for ex in self.exercises]

    def exercises_by_id(self) -> Dict[str, Exercise]:
        """Map exercise id to exercise."""
        return {ex.id: ex for ex in self.exercises}

    def find_exercise(self, exercise_id: str) -> Optional[Exercise]:
        """Return the exercise with ``exercise_id`` or None."""
        return next((ex for ex in self.exercises if ex.id == exercise_id), None)

    def __str__(self) -> str:
        return f"{self.name or 'Session'} ({len(self.exercises)} exercises, {self.total_sets} sets)"
