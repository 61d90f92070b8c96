"""
Rest timer rules: ownership, elapsed time and display formatting.

The timer is never stored as a ticking value. Everything is derived from
set timestamps and an injected ``now``:

    elapsed = floor(now - owner.started_at), clamped at zero

Only the owning item reports a non-zero elapsed value. Ownership goes to
the group id when the exercise that logged the set belongs to a group with
at least two members, otherwise to the exercise id.
"""

import math
from datetime import datetime
from typing import Optional, Sequence

from domain.models import Exercise, RestOwner, Session
from domain.session_items import MIN_GROUP_SIZE, build_session_items, find_item, group_membership

SECONDS_PER_HOUR = 3600


# =============================================================================
# Elapsed time and formatting
# =============================================================================


def elapsed_seconds(now: datetime, since: Optional[datetime]) -> int:
    """Whole seconds from ``since`` to ``now``; 0 when absent or in the future."""
    if since is None:
        return 0
    delta = (now - since).total_seconds()
    return max(0, math.floor(delta))


def format_elapsed(seconds: Optional[int]) -> str:
    """
    Format elapsed seconds for display.

    Below an hour: zero-padded ``MM:SS`` (247 -> "04:07").
    From an hour on: ``H:MM`` (3900 -> "1:05").
    Negative or missing values format as "00:00".
    """
    if seconds is None or seconds < 0:
        return "00:00"
    seconds = int(seconds)
    if seconds < SECONDS_PER_HOUR:
        minutes, secs = divmod(seconds, 60)
        return f"{minutes:02d}:{secs:02d}"
    hours, remainder = divmod(seconds, SECONDS_PER_HOUR)
    return f"{hours}:{remainder // 60:02d}"


def session_elapsed_seconds(
    started_at: datetime, ended_at: Optional[datetime], now: datetime
) -> int:
    """Seconds since the session started (up to ``ended_at`` if finished)."""
    return elapsed_seconds(ended_at or now, started_at)


def compute_duration_sec(started_at: datetime, ended_at: datetime) -> int:
    """Rounded duration in seconds, never negative."""
    return max(0, round((ended_at - started_at).total_seconds()))


# =============================================================================
# Ownership
# =============================================================================


def owner_for_exercise(exercises: Sequence[Exercise], exercise_id: str) -> str:
    """Item id that owns rest after ``exercise_id`` logs a set."""
    members = group_membership(exercises)
    exercise = next((ex for ex in exercises if ex.id == exercise_id), None)
    if exercise is not None and exercise.group_id is not None:
        if len(members.get(exercise.group_id, [])) >= MIN_GROUP_SIZE:
            return exercise.group_id
    return exercise_id


def _last_set_at(exercise: Exercise) -> Optional[datetime]:
    if exercise.last_set_at is not None:
        return exercise.last_set_at
    if exercise.sets:
        return max(s.timestamp for s in exercise.sets)
    return None


def resolve_rest_owner(
    exercises: Sequence[Exercise],
    dismissed_at: Optional[datetime] = None,
) -> Optional[RestOwner]:
    """
    Recompute the rest owner from exercise timestamps.

    Each session item's effective timestamp is the latest last-set time of
    its members. The item with the greatest timestamp owns the timer; ties
    go to the earlier item in session order. An owner whose timestamp is at
    or before ``dismissed_at`` yields no owner. Completing the owner item
    stamps ``dismissed_at``, so a finished item does not resume its timer
    unless a set was logged on it afterwards.

    Args:
        exercises: Flat exercise list
        dismissed_at: Last rest-timer dismissal, if any

    Returns:
        RestOwner or None
    """
    by_id = {ex.id: ex for ex in exercises}
    best = None
    best_at: Optional[datetime] = None

    for item in build_session_items(exercises):
        stamps = [
            stamp
            for stamp in (_last_set_at(by_id[ex_id]) for ex_id in item.exercise_ids)
            if stamp is not None
        ]
        if not stamps:
            continue
        item_at = max(stamps)
        if best_at is None or item_at > best_at:
            best, best_at = item, item_at

    if best is None:
        return None
    if dismissed_at is not None and best_at <= dismissed_at:
        return None

    return RestOwner(
        owner_id=best.id,
        kind="group" if best.is_superset else "exercise",
        started_at=best_at,
    )


def current_rest_owner(session: Session) -> Optional[RestOwner]:
    """
    Rest owner as mirrored on the session.

    Uses ``last_set_owner_id``/``last_set_at`` when they still point at a
    live item, complete or not; otherwise falls back to ``resolve_rest_owner``.
    """
    items = build_session_items(session.exercises)
    if session.last_set_owner_id is None or session.last_set_at is None:
        return None
    if session.rest_dismissed_at is not None and session.last_set_at <= session.rest_dismissed_at:
        return None

    item = find_item(items, session.last_set_owner_id)
    if item is None:
        return resolve_rest_owner(session.exercises, session.rest_dismissed_at)
    return RestOwner(
        owner_id=item.id,
        kind="group" if item.is_superset else "exercise",
        started_at=session.last_set_at,
    )


def rest_elapsed_for_item(
    owner: Optional[RestOwner], item_id: Optional[str], now: datetime
) -> int:
    """Elapsed rest shown on ``item_id``: non-zero only for the owner."""
    if owner is None or item_id is None or owner.owner_id != item_id:
        return 0
    return elapsed_seconds(now, owner.started_at)
