"""
Focus and progression state machine.

Two cursors are tracked in an explicit FocusState:

- progression: the item the workflow considers next to do. It never points
  at a complete item and moves forward on its own when its item is
  completed, skipped or deferred.
- focus: the item expanded for viewing/editing. It follows progression
  unless the user opens a completed item to edit it; that never moves
  progression.

Every function takes the flat exercise list plus the current FocusState and
returns new values. Nothing here keeps state between calls.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from domain.errors import InvalidInputError, NotFoundError
from domain.grouping import move_item_to_end
from domain.models import Exercise, FocusState, ItemStatus, SessionItem
from domain.session_items import build_session_items, find_item, item_for_exercise, item_index

logger = logging.getLogger(__name__)


# =============================================================================
# Item predicates
# =============================================================================


def is_skipped(item: SessionItem, focus: FocusState) -> bool:
    """An item is skipped when every member exercise carries the skip mark."""
    return all(ex_id in focus.skipped_ids for ex_id in item.exercise_ids)


def is_deferred(item: SessionItem, focus: FocusState) -> bool:
    """An item is deferred when every member exercise carries the defer mark."""
    return all(ex_id in focus.deferred_ids for ex_id in item.exercise_ids)


def is_eligible(item: SessionItem, focus: FocusState) -> bool:
    """Item can hold the progression cursor: incomplete and not skipped."""
    return not item.is_complete and not is_skipped(item, focus)


def next_progression_id(
    items: Sequence[SessionItem],
    focus: FocusState,
    after_id: Optional[str] = None,
) -> Optional[str]:
    """
    Pick the next item for the progression cursor.

    Scans in list order starting just after ``after_id`` and wrapping
    around. Deferred items are passed over while any other eligible item
    exists; once only deferred items remain they are picked in order.

    Returns:
        Item id, or None when every item is complete or skipped
    """
    if not items:
        return None

    start = item_index(items, after_id) + 1
    ordered = list(items[start:]) + list(items[:start])
    eligible = [item for item in ordered if is_eligible(item, focus)]
    if not eligible:
        return None

    preferred = [item for item in eligible if not is_deferred(item, focus)]
    return (preferred or eligible)[0].id


def _progression_is_valid(items: Sequence[SessionItem], focus: FocusState) -> bool:
    item = find_item(items, focus.progression_id)
    if item is None or not is_eligible(item, focus):
        return False
    if is_deferred(item, focus):
        # A deferred item only holds progression when nothing else is left.
        return not any(
            is_eligible(other, focus) and not is_deferred(other, focus) for other in items
        )
    return True


# =============================================================================
# Status and queries
# =============================================================================


def item_status(
    item: SessionItem,
    focus: FocusState,
    exercises_by_id: Dict[str, Exercise],
) -> ItemStatus:
    """Workflow status of one session item."""
    if item.is_complete:
        return ItemStatus.COMPLETE
    if is_skipped(item, focus):
        return ItemStatus.SKIPPED
    if is_deferred(item, focus):
        return ItemStatus.DEFERRED
    if item.id == focus.progression_id:
        return ItemStatus.ACTIVE
    if any(exercises_by_id[ex_id].has_sets for ex_id in item.exercise_ids):
        return ItemStatus.ACTIVE
    return ItemStatus.NOT_STARTED


def item_statuses(exercises: Sequence[Exercise], focus: FocusState) -> Dict[str, ItemStatus]:
    """Status of every session item, keyed by item id, in session order."""
    by_id = {ex.id: ex for ex in exercises}
    return {
        item.id: item_status(item, focus, by_id) for item in build_session_items(exercises)
    }


def active_item_id(items: Sequence[SessionItem], focus: FocusState) -> Optional[str]:
    """
    Item the rendering layer should show expanded.

    Focus first, then progression, then the item focused before the session
    ran out of work, then the last item in session order.
    """
    for candidate in (focus.focus_id, focus.progression_id, focus.last_focused_id):
        if find_item(items, candidate) is not None:
            return candidate
    if items:
        return items[-1].id
    return None


def is_terminal(exercises: Sequence[Exercise], focus: FocusState) -> bool:
    """Every item is complete or skipped."""
    return not any(is_eligible(item, focus) for item in build_session_items(exercises))


# =============================================================================
# Reconciliation
# =============================================================================


def _remap_item_id(
    item_id: Optional[str],
    old_items: Sequence[SessionItem],
    new_items: Sequence[SessionItem],
) -> Optional[str]:
    """Follow an item id across a structural change via its first member."""
    if item_id is None:
        return None
    if find_item(new_items, item_id) is not None:
        return item_id
    old_item = find_item(old_items, item_id)
    if old_item is None:
        return None
    for ex_id in old_item.exercise_ids:
        new_item = item_for_exercise(new_items, ex_id)
        if new_item is not None:
            return new_item.id
    return None


def reconcile(
    old_exercises: Sequence[Exercise],
    new_exercises: Sequence[Exercise],
    focus: FocusState,
) -> FocusState:
    """
    Bring the cursors in line with a changed exercise list.

    Handles both structural changes (grouping, removal, reorder, addition)
    and completion changes:

    - Cursor ids are remapped through their first member exercise, so an
      exercise that gets paired keeps focus under its new group id.
    - If the focused item just flipped from incomplete to complete, focus
      and progression advance together past it.
    - If the progression item just completed while the user was editing
      another item, progression advances and focus stays put.
    - A progression cursor left on a vanished, complete or skipped item is
      recomputed.
    - When the session runs out of work, the item focused just before is
      kept as ``last_focused_id``.

    Args:
        old_exercises: Exercise list before the change
        new_exercises: Exercise list after the change
        focus: Cursor state before the change

    Returns:
        New FocusState
    """
    old_items = build_session_items(old_exercises)
    new_items = build_session_items(new_exercises)
    live_ids = {ex.id for ex in new_exercises}

    was_following = focus.focus_id is None or focus.focus_id == focus.progression_id
    old_complete = {item.id: item.is_complete for item in old_items}

    state = FocusState(
        progression_id=_remap_item_id(focus.progression_id, old_items, new_items),
        focus_id=_remap_item_id(focus.focus_id, old_items, new_items),
        last_focused_id=_remap_item_id(focus.last_focused_id, old_items, new_items),
        skipped_ids=tuple(ex_id for ex_id in focus.skipped_ids if ex_id in live_ids),
        deferred_ids=tuple(ex_id for ex_id in focus.deferred_ids if ex_id in live_ids),
    )

    def flipped(old_id: Optional[str], new_id: Optional[str]) -> bool:
        item = find_item(new_items, new_id)
        return item is not None and item.is_complete and old_complete.get(old_id) is False

    anchor = None
    if flipped(focus.focus_id, state.focus_id):
        anchor = state.focus_id
        was_following = True
    elif flipped(focus.progression_id, state.progression_id):
        anchor = state.progression_id

    progression = state.progression_id
    if anchor is not None:
        progression = next_progression_id(new_items, state, after_id=anchor)
    elif not _progression_is_valid(new_items, state):
        progression = next_progression_id(new_items, state, after_id=progression)

    focus_id = state.focus_id
    last_focused_id = state.last_focused_id
    if was_following or focus_id is None:
        if progression is None and (anchor is not None or focus_id is not None):
            last_focused_id = anchor or focus_id
        focus_id = progression

    if progression is not None and focus.progression_id is None and focus_id == progression:
        # Work was added after the session had run out.
        last_focused_id = None

    return state.model_copy(
        update={
            "progression_id": progression,
            "focus_id": focus_id,
            "last_focused_id": last_focused_id,
        }
    )


def initial_focus(exercises: Sequence[Exercise]) -> FocusState:
    """Cursor state for a freshly loaded exercise list."""
    return reconcile(exercises, exercises, FocusState())


# =============================================================================
# Transitions
# =============================================================================


def _require_item(items: Sequence[SessionItem], item_id: str) -> SessionItem:
    item = find_item(items, item_id)
    if item is None:
        raise NotFoundError(f"Session item {item_id} not found", subject_id=item_id)
    return item


def _without(ids: Sequence[str], removed: Sequence[str]) -> Tuple[str, ...]:
    return tuple(ex_id for ex_id in ids if ex_id not in removed)


def _with(ids: Sequence[str], added: Sequence[str]) -> Tuple[str, ...]:
    return tuple(ids) + tuple(ex_id for ex_id in added if ex_id not in ids)


def complete_exercises(
    exercises: Sequence[Exercise],
    focus: FocusState,
    exercise_ids: Sequence[str],
) -> Tuple[List[Exercise], FocusState]:
    """
    Mark exercises complete and advance the cursors.

    Completing some members of a group leaves the group item incomplete;
    the cursors only move once the whole item is complete.

    Raises:
        InvalidInputError: No exercise ids given
        NotFoundError: An exercise id is missing (nothing is marked)
    """
    if not exercise_ids:
        raise InvalidInputError("No exercises to complete")
    known = {ex.id for ex in exercises}
    for ex_id in exercise_ids:
        if ex_id not in known:
            raise NotFoundError(f"Exercise {ex_id} not found", subject_id=ex_id)

    targets = set(exercise_ids)
    updated = [
        ex.model_copy(update={"is_complete": True}) if ex.id in targets and not ex.is_complete else ex
        for ex in exercises
    ]
    return updated, reconcile(exercises, updated, focus)


def complete_item(
    exercises: Sequence[Exercise],
    focus: FocusState,
    item_id: str,
) -> Tuple[List[Exercise], FocusState]:
    """
    Complete every member of a session item.

    Completing an item that is already complete while it is being edited
    ends the edit: focus returns to the progression item.

    Raises:
        NotFoundError: No item with ``item_id``
    """
    item = _require_item(build_session_items(exercises), item_id)
    if item.is_complete:
        if focus.focus_id == item_id and focus.is_editing_history:
            update = {"focus_id": focus.progression_id}
            if focus.progression_id is None:
                update["last_focused_id"] = item_id
            return list(exercises), focus.model_copy(update=update)
        return list(exercises), focus
    return complete_exercises(exercises, focus, item.exercise_ids)


def skip_item(
    exercises: Sequence[Exercise],
    focus: FocusState,
    item_id: str,
) -> FocusState:
    """
    Skip an item: it is excluded from auto-advance but stays editable.

    Raises:
        NotFoundError: No item with ``item_id``
    """
    items = build_session_items(exercises)
    item = _require_item(items, item_id)

    state = focus.model_copy(
        update={
            "skipped_ids": _with(focus.skipped_ids, item.exercise_ids),
            "deferred_ids": _without(focus.deferred_ids, item.exercise_ids),
        }
    )
    if focus.progression_id != item_id:
        return reconcile(exercises, exercises, state)

    progression = next_progression_id(items, state, after_id=item_id)
    update = {"progression_id": progression}
    if focus.focus_id in (None, item_id):
        update["focus_id"] = progression
        if progression is None:
            update["last_focused_id"] = item_id
    logger.debug("Skipped %s, progression -> %s", item_id, progression)
    return state.model_copy(update=update)


def defer_item(
    exercises: Sequence[Exercise],
    focus: FocusState,
    item_id: str,
) -> Tuple[List[Exercise], FocusState]:
    """
    Defer an item: move it to the end of the session and advance past it.

    Raises:
        NotFoundError: No item with ``item_id``
        InvalidInputError: The item is already complete
    """
    item = _require_item(build_session_items(exercises), item_id)
    if item.is_complete:
        raise InvalidInputError(f"Session item {item_id} is already complete", subject_id=item_id)

    reordered = move_item_to_end(exercises, item_id)
    items = build_session_items(reordered)
    state = focus.model_copy(
        update={
            "deferred_ids": _with(focus.deferred_ids, item.exercise_ids),
            "skipped_ids": _without(focus.skipped_ids, item.exercise_ids),
        }
    )
    if focus.progression_id != item_id:
        return reordered, reconcile(exercises, reordered, state)

    progression = next_progression_id(items, state, after_id=item_id)
    update = {"progression_id": progression}
    if focus.focus_id in (None, item_id):
        update["focus_id"] = progression
    logger.debug("Deferred %s, progression -> %s", item_id, progression)
    return reordered, state.model_copy(update=update)


def focus_item(
    exercises: Sequence[Exercise],
    focus: FocusState,
    item_id: str,
) -> FocusState:
    """
    Move interaction focus to an item.

    An incomplete item becomes the progression item too, and loses any
    skip/defer mark. A complete item is opened for editing only: progression
    does not move and no auto-advance runs.

    Raises:
        NotFoundError: No item with ``item_id``
    """
    item = _require_item(build_session_items(exercises), item_id)
    if item.is_complete:
        return focus.model_copy(update={"focus_id": item_id})

    return focus.model_copy(
        update={
            "progression_id": item_id,
            "focus_id": item_id,
            "skipped_ids": _without(focus.skipped_ids, item.exercise_ids),
            "deferred_ids": _without(focus.deferred_ids, item.exercise_ids),
        }
    )
