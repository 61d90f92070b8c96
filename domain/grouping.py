"""
Grouping engine: superset membership and flat-list ordering.

All functions are pure: they take the current flat exercise list and return
a new one, or raise a SessionError subclass without touching the input.
None of them change sets or completion flags.
"""

import logging
import uuid
from typing import List, Sequence, Tuple

from domain.errors import AlreadyGroupedError, InvalidInputError, NotFoundError
from domain.models import Exercise
from domain.session_items import MIN_GROUP_SIZE, build_session_items

logger = logging.getLogger(__name__)


def new_group_id() -> str:
    """Generate a unique group id."""
    return f"group-{uuid.uuid4().hex}"


def _require(exercises: Sequence[Exercise], exercise_id: str) -> Exercise:
    for ex in exercises:
        if ex.id == exercise_id:
            return ex
    raise NotFoundError(f"Exercise {exercise_id} not found", subject_id=exercise_id)


def _index_of(exercises: Sequence[Exercise], exercise_id: str) -> int:
    for idx, ex in enumerate(exercises):
        if ex.id == exercise_id:
            return idx
    raise NotFoundError(f"Exercise {exercise_id} not found", subject_id=exercise_id)


def _set_group(exercise: Exercise, group_id) -> Exercise:
    return exercise.model_copy(update={"group_id": group_id})


def group_members(exercises: Sequence[Exercise], group_id: str) -> List[Exercise]:
    """Members of ``group_id`` in flat-list order."""
    return [ex for ex in exercises if ex.group_id == group_id]


def _require_group(exercises: Sequence[Exercise], group_id: str) -> List[Exercise]:
    members = group_members(exercises, group_id)
    if not members:
        raise NotFoundError(f"Group {group_id} not found", subject_id=group_id)
    return members


def make_contiguous(exercises: Sequence[Exercise], group_id: str) -> List[Exercise]:
    """
    Pull group members together at the position of the earliest member.

    Members keep their relative order; every other exercise keeps its
    relative order too.
    """
    members = group_members(exercises, group_id)
    if not members:
        return list(exercises)

    first = _index_of(exercises, members[0].id)
    rest = [ex for ex in exercises[first:] if ex.group_id != group_id]
    return list(exercises[:first]) + members + rest


# =============================================================================
# Membership operations
# =============================================================================


def pair(
    exercises: Sequence[Exercise],
    exercise_id_a: str,
    exercise_id_b: str,
    *,
    group_id: str = None,
) -> Tuple[List[Exercise], str]:
    """
    Put two ungrouped exercises into a new group.

    Args:
        exercises: Flat exercise list
        exercise_id_a: First exercise
        exercise_id_b: Second exercise
        group_id: Group id to use; generated when omitted

    Returns:
        Tuple of (updated exercises, new group id)

    Raises:
        InvalidInputError: Both ids are the same exercise
        NotFoundError: Either exercise is missing
        AlreadyGroupedError: Either exercise already has a group
    """
    if exercise_id_a == exercise_id_b:
        raise InvalidInputError("Cannot pair an exercise with itself", subject_id=exercise_id_a)

    for ex in (_require(exercises, exercise_id_a), _require(exercises, exercise_id_b)):
        if ex.group_id is not None:
            raise AlreadyGroupedError(
                f"Exercise {ex.id} already belongs to group {ex.group_id}",
                subject_id=ex.id,
            )

    gid = group_id or new_group_id()
    targets = {exercise_id_a, exercise_id_b}
    updated = [_set_group(ex, gid) if ex.id in targets else ex for ex in exercises]
    logger.debug("Paired %s and %s into %s", exercise_id_a, exercise_id_b, gid)
    return make_contiguous(updated, gid), gid


def add_to_group(
    exercises: Sequence[Exercise], group_id: str, exercise_id: str
) -> List[Exercise]:
    """
    Add an ungrouped exercise to an existing group.

    Raises:
        NotFoundError: Exercise or group is missing
        AlreadyGroupedError: Exercise already belongs to a group (any group)
    """
    target = _require(exercises, exercise_id)
    if target.group_id is not None:
        raise AlreadyGroupedError(
            f"Exercise {exercise_id} already belongs to group {target.group_id}",
            subject_id=exercise_id,
        )
    _require_group(exercises, group_id)

    updated = [_set_group(ex, group_id) if ex.id == exercise_id else ex for ex in exercises]
    return make_contiguous(updated, group_id)


def merge_groups(
    exercises: Sequence[Exercise], group_id_a: str, group_id_b: str
) -> List[Exercise]:
    """
    Move every member of group B into group A. No-op when the ids are equal.

    Raises:
        NotFoundError: Either group has no members
    """
    if group_id_a == group_id_b:
        return list(exercises)
    _require_group(exercises, group_id_a)
    _require_group(exercises, group_id_b)

    updated = [
        _set_group(ex, group_id_a) if ex.group_id == group_id_b else ex for ex in exercises
    ]
    return make_contiguous(updated, group_id_a)


def remove_from_group(exercises: Sequence[Exercise], exercise_id: str) -> List[Exercise]:
    """
    Clear an exercise's group id, dissolving the group if it drops below two.

    A group cannot exist with a single member, so when only one exercise
    would remain, that exercise is cleared as well. Removing an exercise
    that is not grouped is a no-op.

    Raises:
        NotFoundError: Exercise is missing
    """
    target = _require(exercises, exercise_id)
    group_id = target.group_id
    if group_id is None:
        return list(exercises)

    remaining = [ex for ex in group_members(exercises, group_id) if ex.id != exercise_id]
    dissolve = len(remaining) < MIN_GROUP_SIZE
    if dissolve:
        logger.debug("Group %s dissolved after removing %s", group_id, exercise_id)

    return [
        _set_group(ex, None)
        if ex.id == exercise_id or (dissolve and ex.group_id == group_id)
        else ex
        for ex in exercises
    ]


def dissolve_group(exercises: Sequence[Exercise], group_id: str) -> List[Exercise]:
    """
    Clear the group id on every member of ``group_id``.

    Raises:
        NotFoundError: Group has no members
    """
    _require_group(exercises, group_id)
    return [_set_group(ex, None) if ex.group_id == group_id else ex for ex in exercises]


def swap_member(
    exercises: Sequence[Exercise],
    group_id: str,
    outgoing_id: str,
    incoming_id: str,
) -> List[Exercise]:
    """
    Replace a group member with an ungrouped exercise.

    The incoming exercise takes the outgoing exercise's place in the flat
    list and joins the group. The outgoing exercise moves to the incoming
    exercise's former position as a standalone exercise; its sets are kept.

    Raises:
        NotFoundError: Either exercise is missing, or outgoing is not in the group
        AlreadyGroupedError: Incoming exercise already belongs to a group
    """
    outgoing = _require(exercises, outgoing_id)
    incoming = _require(exercises, incoming_id)

    if incoming.group_id is not None:
        raise AlreadyGroupedError(
            f"Exercise {incoming_id} already belongs to group {incoming.group_id}",
            subject_id=incoming_id,
        )
    if outgoing.group_id != group_id:
        raise NotFoundError(
            f"Exercise {outgoing_id} is not a member of group {group_id}",
            subject_id=outgoing_id,
        )

    out_idx = _index_of(exercises, outgoing_id)
    in_idx = _index_of(exercises, incoming_id)
    updated = list(exercises)
    updated[out_idx] = _set_group(incoming, group_id)
    updated[in_idx] = _set_group(outgoing, None)
    return updated


def remove_exercise(exercises: Sequence[Exercise], exercise_id: str) -> List[Exercise]:
    """
    Delete an exercise from the session, leaving its group valid.

    Raises:
        NotFoundError: Exercise is missing
    """
    ungrouped = remove_from_group(exercises, exercise_id)
    return [ex for ex in ungrouped if ex.id != exercise_id]


# =============================================================================
# Ordering operations
# =============================================================================


def reorder_items(exercises: Sequence[Exercise], item_ids: Sequence[str]) -> List[Exercise]:
    """
    Rewrite the flat order from a new order of session items.

    Groups move as a unit; members keep their relative order.

    Args:
        exercises: Flat exercise list
        item_ids: Every current session item id, each exactly once

    Raises:
        InvalidInputError: ``item_ids`` is not a permutation of the current items
    """
    items = build_session_items(exercises)
    if len(item_ids) != len(items) or set(item_ids) != {item.id for item in items}:
        raise InvalidInputError("Reorder must list every session item exactly once")

    by_item = {item.id: item for item in items}
    by_id = {ex.id: ex for ex in exercises}
    return [by_id[ex_id] for item_id in item_ids for ex_id in by_item[item_id].exercise_ids]


def move_item_to_end(exercises: Sequence[Exercise], item_id: str) -> List[Exercise]:
    """
    Move a session item (with all its members) to the end of the list.

    Raises:
        NotFoundError: No item with ``item_id``
    """
    items = build_session_items(exercises)
    ordered = [item.id for item in items if item.id != item_id]
    if len(ordered) == len(items):
        raise NotFoundError(f"Session item {item_id} not found", subject_id=item_id)
    return reorder_items(exercises, ordered + [item_id])
