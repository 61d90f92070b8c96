"""
Automatic session names.
"""

from datetime import datetime, tzinfo
from typing import Optional, Sequence

from domain.models import Exercise

MAX_NAME_LENGTH = 200


def time_of_day_name(started_at: datetime, tz: Optional[tzinfo] = None) -> str:
    """
    Name a workout after the local hour it started.

    04:00-11:59 is morning, 12:00-16:59 afternoon, everything else evening.
    ``started_at`` is converted to ``tz`` first; None means the system
    local time zone.
    """
    hour = started_at.astimezone(tz).hour
    if 4 <= hour < 12:
        return "Morning workout"
    if 12 <= hour < 17:
        return "Afternoon workout"
    return "Evening workout"


def auto_session_name(
    exercises: Sequence[Exercise],
    started_at: datetime,
    tz: Optional[tzinfo] = None,
) -> str:
    """A one-exercise session is named after its exercise, otherwise by time of day."""
    if len(exercises) == 1:
        return exercises[0].name[:MAX_NAME_LENGTH]
    return time_of_day_name(started_at, tz)
