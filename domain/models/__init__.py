"""
Domain models for the workout session engine.

This package contains pure domain models that are independent of
persistence and rendering concerns.

These models represent the core concepts:
- Session: The aggregate root holding the flat, ordered exercise list
- Exercise: A session-scoped exercise instance with its logged sets
- WorkoutSet: One logged set (weight in kg x reps)
- SessionItem: Derived display unit, a single exercise or a superset group
- FocusState: Progression and interaction-focus cursors
- RestOwner: The exercise or group the rest timer is counting for

Usage:
    >>> from datetime import datetime, timezone
    >>> from domain.models import Session, Exercise

    >>> session = Session(
    ...     id="s-1",
    ...     started_at=datetime.now(timezone.utc),
    ...     exercises=[Exercise(id="e1", name="Squat")],
    ... )

    >>> # Serialize to JSON
    >>> json_str = session.model_dump_json(indent=2)

    >>> # Deserialize from JSON
    >>> session = Session.model_validate_json(json_str)
"""

from domain.models.exercise import Exercise
from domain.models.focus import FocusState, ItemStatus
from domain.models.rest_owner import RestOwner
from domain.models.session import Session
from domain.models.session_item import SessionItem, SessionItemType
from domain.models.workout_set import WorkoutSet

__all__ = [
    # Main entities
    "Session",
    "Exercise",
    "WorkoutSet",
    # Derived views and state
    "SessionItem",
    "FocusState",
    "RestOwner",
    # Enums
    "SessionItemType",
    "ItemStatus",
]
