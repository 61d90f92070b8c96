"""
Domain layer for the session engine.

This package contains pure models and rules that are independent of
persistence and presentation concerns. Every rule module is a set of
functions over the flat exercise list and explicit state; none of them
read a clock or touch storage.
"""

from domain.models import (
    Exercise,
    FocusState,
    ItemStatus,
    RestOwner,
    Session,
    SessionItem,
    SessionItemType,
    WorkoutSet,
)

__all__ = [
    "Exercise",
    "FocusState",
    "ItemStatus",
    "RestOwner",
    "Session",
    "SessionItem",
    "SessionItemType",
    "WorkoutSet",
]
