"""
Set ledger: add, update and delete logged sets.

Validation happens before anything is built, so a rejected call never
leaves a half-applied change. ``last_set_at`` only moves when a set is
created; edits and deletions never rewind it.
"""

import logging
import math
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from domain.errors import InvalidInputError, NotFoundError
from domain.models import Exercise, WorkoutSet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SetEntry:
    """One member's values in a group "log set" action."""

    exercise_id: str
    weight: float
    reps: float


def new_set_id() -> str:
    """Generate a unique set id."""
    return f"set-{uuid.uuid4().hex}"


def new_correlation_id() -> str:
    """Generate a correlation id for sets logged together across a group."""
    return f"superset-{uuid.uuid4().hex}"


def validate_weight_reps(weight, reps) -> Tuple[float, int]:
    """
    Check weight and reps and return them in canonical form.

    Weight must be a finite number >= 0 (kilograms). Reps must be a
    non-negative whole number; an integral float such as ``8.0`` is
    accepted and stored as ``8``. Booleans are rejected for both.

    Returns:
        Tuple of (weight as float, reps as int)

    Raises:
        InvalidInputError: Either value is out of range or not a number
    """
    if isinstance(weight, bool) or not isinstance(weight, (int, float)):
        raise InvalidInputError(f"Weight must be a number, got {weight!r}")
    if not math.isfinite(weight) or weight < 0:
        raise InvalidInputError(f"Weight must be finite and >= 0, got {weight!r}")

    if isinstance(reps, bool) or not isinstance(reps, (int, float)):
        raise InvalidInputError(f"Reps must be a number, got {reps!r}")
    if not math.isfinite(reps) or reps < 0 or int(reps) != reps:
        raise InvalidInputError(f"Reps must be a whole number >= 0, got {reps!r}")

    return float(weight), int(reps)


def sets_in_display_order(sets: Sequence[WorkoutSet]) -> List[WorkoutSet]:
    """Sets sorted by timestamp, ties broken by id."""
    return sorted(sets, key=lambda s: (s.timestamp, s.id))


def _find_index(exercises: Sequence[Exercise], exercise_id: str) -> int:
    for idx, ex in enumerate(exercises):
        if ex.id == exercise_id:
            return idx
    raise NotFoundError(f"Exercise {exercise_id} not found", subject_id=exercise_id)


def _append_set(exercise: Exercise, new_set: WorkoutSet) -> Exercise:
    last = exercise.last_set_at
    if last is None or new_set.timestamp > last:
        last = new_set.timestamp
    return exercise.model_copy(
        update={"sets": exercise.sets + (new_set,), "last_set_at": last}
    )


# =============================================================================
# Operations
# =============================================================================


def add_set(
    exercises: Sequence[Exercise],
    exercise_id: str,
    weight,
    reps,
    *,
    now: datetime,
    rest_duration: Optional[int] = None,
    superset_set_id: Optional[str] = None,
    set_id: Optional[str] = None,
) -> Tuple[List[Exercise], WorkoutSet]:
    """
    Append a set to one exercise.

    Args:
        exercises: Flat exercise list
        exercise_id: Exercise receiving the set
        weight: Weight in kilograms
        reps: Repetitions
        now: Creation timestamp for the set
        rest_duration: Seconds rested before this set, if known
        superset_set_id: Correlation id when logged as part of a group action
        set_id: Set id to use; generated when omitted

    Returns:
        Tuple of (updated exercises, created set)

    Raises:
        NotFoundError: Exercise is missing
        InvalidInputError: Weight or reps are invalid
    """
    idx = _find_index(exercises, exercise_id)
    weight, reps = validate_weight_reps(weight, reps)
    if rest_duration is not None and rest_duration < 0:
        raise InvalidInputError(f"Rest duration must be >= 0, got {rest_duration!r}")

    new_set = WorkoutSet(
        id=set_id or new_set_id(),
        weight=weight,
        reps=reps,
        timestamp=now,
        rest_duration=rest_duration,
        superset_set_id=superset_set_id,
    )
    updated = list(exercises)
    updated[idx] = _append_set(exercises[idx], new_set)
    return updated, new_set


def add_group_set(
    exercises: Sequence[Exercise],
    entries: Sequence[SetEntry],
    correlation_id: Optional[str],
    *,
    now: datetime,
    rest_duration: Optional[int] = None,
) -> Tuple[List[Exercise], List[Tuple[str, WorkoutSet]]]:
    """
    Log one set on several group members in a single action.

    Every created set shares ``correlation_id`` as its ``superset_set_id``
    and the same timestamp. Entries with invalid weight/reps are skipped;
    the call succeeds as long as at least one entry is valid.

    Returns:
        Tuple of (updated exercises, list of (exercise id, created set))

    Raises:
        InvalidInputError: Empty batch, or no entry is valid
        NotFoundError: An entry names a missing exercise (nothing is logged)
    """
    if not entries:
        raise InvalidInputError("Group set batch is empty")

    known = {ex.id for ex in exercises}
    for entry in entries:
        if entry.exercise_id not in known:
            raise NotFoundError(
                f"Exercise {entry.exercise_id} not found", subject_id=entry.exercise_id
            )

    valid: List[Tuple[str, float, int]] = []
    for entry in entries:
        try:
            weight, reps = validate_weight_reps(entry.weight, entry.reps)
        except InvalidInputError as e:
            logger.debug("Skipping group set entry for %s: %s", entry.exercise_id, e.message)
            continue
        valid.append((entry.exercise_id, weight, reps))

    if not valid:
        raise InvalidInputError("No valid entries in group set batch")

    correlation_id = correlation_id or new_correlation_id()
    updated = list(exercises)
    created: List[Tuple[str, WorkoutSet]] = []
    for exercise_id, weight, reps in valid:
        updated, new_set = add_set(
            updated,
            exercise_id,
            weight,
            reps,
            now=now,
            rest_duration=rest_duration,
            superset_set_id=correlation_id,
        )
        created.append((exercise_id, new_set))

    return updated, created


def update_set(
    exercises: Sequence[Exercise],
    exercise_id: str,
    set_id: str,
    weight,
    reps,
) -> Tuple[List[Exercise], WorkoutSet]:
    """
    Change weight and reps of an existing set.

    The set keeps its id, timestamp, rest duration and correlation id.

    Raises:
        NotFoundError: Exercise or set is missing
        InvalidInputError: Weight or reps are invalid
    """
    idx = _find_index(exercises, exercise_id)
    exercise = exercises[idx]
    existing = exercise.find_set(set_id)
    if existing is None:
        raise NotFoundError(
            f"Set {set_id} not found on exercise {exercise_id}", subject_id=set_id
        )
    weight, reps = validate_weight_reps(weight, reps)

    changed = existing.model_copy(update={"weight": weight, "reps": reps})
    updated = list(exercises)
    updated[idx] = exercise.model_copy(
        update={"sets": tuple(changed if s.id == set_id else s for s in exercise.sets)}
    )
    return updated, changed


def delete_set(
    exercises: Sequence[Exercise],
    exercise_id: str,
    set_id: str,
) -> List[Exercise]:
    """
    Remove exactly one set from an exercise.

    Raises:
        NotFoundError: Exercise or set is missing
    """
    idx = _find_index(exercises, exercise_id)
    exercise = exercises[idx]
    if exercise.find_set(set_id) is None:
        raise NotFoundError(
            f"Set {set_id} not found on exercise {exercise_id}", subject_id=set_id
        )

    updated = list(exercises)
    updated[idx] = exercise.model_copy(
        update={"sets": tuple(s for s in exercise.sets if s.id != set_id)}
    )
    return updated
