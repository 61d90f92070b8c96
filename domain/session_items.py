"""
Session item projection: flat exercise list -> ordered singles and supersets.

The flat exercise list (with optional group ids) is the mutable source of
truth; the item list is a derived, read-only view rebuilt after every
mutation.
"""

from typing import Dict, List, Optional, Sequence

from domain.models import Exercise, SessionItem, SessionItemType

MIN_GROUP_SIZE = 2


def group_membership(exercises: Sequence[Exercise]) -> Dict[str, List[Exercise]]:
    """
    Collect exercises by group id, preserving flat-list order.

    Args:
        exercises: Flat exercise list

    Returns:
        Mapping of group id to its members in order. Standalone exercises
        are not included.
    """
    members: Dict[str, List[Exercise]] = {}
    for ex in exercises:
        if ex.group_id is not None:
            members.setdefault(ex.group_id, []).append(ex)
    return members


def build_session_items(exercises: Sequence[Exercise]) -> List[SessionItem]:
    """
    Project the flat exercise list into ordered session items.

    - Every exercise appears in exactly one item.
    - Exercises sharing a group id with at least two members become one
      superset item placed where the earliest member sits.
    - An exercise whose group id has fewer than two members is a single.

    Pure and deterministic: the same list always gives the same items in
    the same order.

    Args:
        exercises: Flat exercise list in presentation order

    Returns:
        List of SessionItem
    """
    members = group_membership(exercises)
    items: List[SessionItem] = []
    emitted_groups = set()

    for ex in exercises:
        group = members.get(ex.group_id) if ex.group_id is not None else None
        if group is not None and len(group) >= MIN_GROUP_SIZE:
            if ex.group_id in emitted_groups:
                continue
            emitted_groups.add(ex.group_id)
            items.append(
                SessionItem(
                    id=ex.group_id,
                    type=SessionItemType.SUPERSET,
                    exercise_ids=tuple(m.id for m in group),
                    is_complete=all(m.is_complete for m in group),
                )
            )
        else:
            items.append(
                SessionItem(
                    id=ex.id,
                    type=SessionItemType.SINGLE,
                    exercise_ids=(ex.id,),
                    is_complete=ex.is_complete,
                )
            )

    return items


def find_item(items: Sequence[SessionItem], item_id: Optional[str]) -> Optional[SessionItem]:
    """Return the item with ``item_id`` or None."""
    if item_id is None:
        return None
    return next((item for item in items if item.id == item_id), None)


def item_index(items: Sequence[SessionItem], item_id: Optional[str]) -> int:
    """Position of ``item_id`` in ``items``, or -1."""
    for idx, item in enumerate(items):
        if item.id == item_id:
            return idx
    return -1


def item_for_exercise(
    items: Sequence[SessionItem], exercise_id: str
) -> Optional[SessionItem]:
    """Return the item containing ``exercise_id`` or None."""
    return next((item for item in items if item.contains(exercise_id)), None)
