"""
Unit tests for domain/grouping.py

Tests for:
- pair / add_to_group / merge_groups / remove_from_group / swap_member
- Group dissolution below two members
- Item reordering with atomic groups
"""

import pytest

from domain import grouping
from domain.errors import AlreadyGroupedError, InvalidInputError, NotFoundError
from domain.session_items import build_session_items
from tests.fakes.builders import make_exercise


def ids(exercises):
    return [ex.id for ex in exercises]


def groups(exercises):
    return {ex.id: ex.group_id for ex in exercises}


# =============================================================================
# pair
# =============================================================================


@pytest.mark.unit
class TestPair:
    """Tests for pairing two ungrouped exercises."""

    def test_pair_assigns_shared_group_id(self):
        exercises = [make_exercise("a"), make_exercise("b")]

        updated, group_id = grouping.pair(exercises, "a", "b")

        assert group_id.startswith("group-")
        assert groups(updated) == {"a": group_id, "b": group_id}

    def test_pair_pulls_members_together(self):
        exercises = [make_exercise("a"), make_exercise("b"), make_exercise("c")]

        updated, _ = grouping.pair(exercises, "a", "c")

        assert ids(updated) == ["a", "c", "b"]

    def test_pair_uses_given_group_id(self):
        updated, group_id = grouping.pair(
            [make_exercise("a"), make_exercise("b")], "a", "b", group_id="g-fixed"
        )
        assert group_id == "g-fixed"
        assert updated[0].group_id == "g-fixed"

    def test_pair_rejects_grouped_exercise_without_mutation(self):
        exercises = [make_exercise("a", group_id="g1"), make_exercise("x", group_id="g1"), make_exercise("b")]

        with pytest.raises(AlreadyGroupedError):
            grouping.pair(exercises, "a", "b")

        assert groups(exercises) == {"a": "g1", "x": "g1", "b": None}

    def test_pair_with_itself_is_invalid(self):
        with pytest.raises(InvalidInputError):
            grouping.pair([make_exercise("a")], "a", "a")

    def test_pair_unknown_exercise(self):
        with pytest.raises(NotFoundError):
            grouping.pair([make_exercise("a")], "a", "zzz")

    def test_pair_does_not_touch_sets_or_completion(self):
        exercises = [make_exercise("a", complete=True, last_set_offset=10), make_exercise("b")]

        updated, _ = grouping.pair(exercises, "a", "b")

        assert updated[0].sets == exercises[0].sets
        assert updated[0].is_complete is True
        assert updated[0].last_set_at == exercises[0].last_set_at


# =============================================================================
# add_to_group / merge_groups
# =============================================================================


@pytest.mark.unit
class TestAddAndMerge:
    """Tests for adding members and merging groups."""

    def test_add_to_group(self):
        exercises = [
            make_exercise("a", group_id="g1"),
            make_exercise("c"),
            make_exercise("b", group_id="g1"),
        ]

        updated = grouping.add_to_group(exercises, "g1", "c")

        assert groups(updated) == {"a": "g1", "b": "g1", "c": "g1"}
        assert ids(updated) == ["a", "c", "b"]

    def test_add_to_group_rejects_member_of_same_group(self):
        exercises = [make_exercise("a", group_id="g1"), make_exercise("b", group_id="g1")]

        with pytest.raises(AlreadyGroupedError):
            grouping.add_to_group(exercises, "g1", "a")

    def test_add_to_group_rejects_member_of_other_group(self):
        exercises = [
            make_exercise("a", group_id="g1"),
            make_exercise("b", group_id="g1"),
            make_exercise("c", group_id="g2"),
            make_exercise("d", group_id="g2"),
        ]

        with pytest.raises(AlreadyGroupedError):
            grouping.add_to_group(exercises, "g1", "c")

    def test_add_to_unknown_group(self):
        with pytest.raises(NotFoundError):
            grouping.add_to_group([make_exercise("a")], "nope", "a")

    def test_merge_groups_moves_all_of_b_into_a(self):
        exercises = [
            make_exercise("a", group_id="g1"),
            make_exercise("c", group_id="g2"),
            make_exercise("b", group_id="g1"),
            make_exercise("d", group_id="g2"),
        ]

        updated = grouping.merge_groups(exercises, "g1", "g2")

        assert set(groups(updated).values()) == {"g1"}
        assert ids(updated) == ["a", "c", "b", "d"]
        assert len(build_session_items(updated)) == 1

    def test_merge_same_group_is_noop(self):
        exercises = [make_exercise("a", group_id="g1"), make_exercise("b", group_id="g1")]

        assert grouping.merge_groups(exercises, "g1", "g1") == exercises

    def test_merge_unknown_group(self):
        exercises = [make_exercise("a", group_id="g1"), make_exercise("b", group_id="g1")]

        with pytest.raises(NotFoundError):
            grouping.merge_groups(exercises, "g1", "g9")


# =============================================================================
# remove_from_group / dissolve_group
# =============================================================================


@pytest.mark.unit
class TestRemoveFromGroup:
    """Tests for removing members and dissolution."""

    @pytest.mark.parametrize("removed", ["a", "b"])
    def test_removing_from_pair_dissolves_group(self, removed):
        exercises = [make_exercise("a", group_id="g1"), make_exercise("b", group_id="g1")]

        updated = grouping.remove_from_group(exercises, removed)

        assert groups(updated) == {"a": None, "b": None}

    def test_removing_from_trio_keeps_group(self):
        exercises = [
            make_exercise("a", group_id="g1"),
            make_exercise("b", group_id="g1"),
            make_exercise("c", group_id="g1"),
        ]

        updated = grouping.remove_from_group(exercises, "b")

        assert groups(updated) == {"a": "g1", "b": None, "c": "g1"}

    def test_removing_ungrouped_is_noop(self):
        exercises = [make_exercise("a")]
        assert grouping.remove_from_group(exercises, "a") == exercises

    def test_remove_unknown_exercise(self):
        with pytest.raises(NotFoundError):
            grouping.remove_from_group([make_exercise("a")], "zzz")

    def test_dissolve_group(self):
        exercises = [
            make_exercise("a", group_id="g1"),
            make_exercise("b", group_id="g1"),
            make_exercise("c", group_id="g1"),
        ]

        updated = grouping.dissolve_group(exercises, "g1")

        assert all(ex.group_id is None for ex in updated)

    def test_remove_exercise_keeps_group_valid(self):
        exercises = [
            make_exercise("a", group_id="g1"),
            make_exercise("b", group_id="g1"),
            make_exercise("c"),
        ]

        updated = grouping.remove_exercise(exercises, "a")

        assert ids(updated) == ["b", "c"]
        assert updated[0].group_id is None


# =============================================================================
# swap_member
# =============================================================================


@pytest.mark.unit
class TestSwapMember:
    """Tests for swapping a group member."""

    def test_incoming_takes_outgoing_position(self):
        exercises = [
            make_exercise("a", group_id="g"),
            make_exercise("b", group_id="g"),
            make_exercise("c"),
        ]

        updated = grouping.swap_member(exercises, "g", "a", "c")

        assert ids(updated) == ["c", "b", "a"]
        assert groups(updated) == {"c": "g", "b": "g", "a": None}

    def test_outgoing_keeps_its_sets(self):
        exercises = [
            make_exercise("a", group_id="g", last_set_offset=30),
            make_exercise("b", group_id="g"),
            make_exercise("c"),
        ]

        updated = grouping.swap_member(exercises, "g", "a", "c")

        outgoing = next(ex for ex in updated if ex.id == "a")
        assert outgoing.set_count == 1

    def test_swap_rejects_grouped_target(self):
        exercises = [
            make_exercise("a", group_id="G"),
            make_exercise("b", group_id="G"),
            make_exercise("c", group_id="H"),
            make_exercise("d", group_id="H"),
        ]

        with pytest.raises(AlreadyGroupedError):
            grouping.swap_member(exercises, "G", "a", "c")

        assert groups(exercises) == {"a": "G", "b": "G", "c": "H", "d": "H"}

    def test_swap_outgoing_not_in_group(self):
        exercises = [
            make_exercise("a", group_id="g"),
            make_exercise("b", group_id="g"),
            make_exercise("c"),
            make_exercise("d"),
        ]

        with pytest.raises(NotFoundError):
            grouping.swap_member(exercises, "g", "d", "c")


# =============================================================================
# reorder_items / move_item_to_end
# =============================================================================


@pytest.mark.unit
class TestReorder:
    """Tests for reordering session items."""

    def test_group_moves_atomically(self):
        exercises = [
            make_exercise("a"),
            make_exercise("b", group_id="g"),
            make_exercise("c", group_id="g"),
            make_exercise("d"),
        ]

        updated = grouping.reorder_items(exercises, ["d", "g", "a"])

        assert ids(updated) == ["d", "b", "c", "a"]

    def test_reorder_same_order_is_idempotent(self):
        exercises = [make_exercise("a"), make_exercise("b", group_id="g"), make_exercise("c", group_id="g")]

        once = grouping.reorder_items(exercises, ["g", "a"])
        twice = grouping.reorder_items(once, ["g", "a"])

        assert once == twice

    @pytest.mark.parametrize(
        "order",
        [["a"], ["a", "b", "b"], ["a", "zzz"], ["a", "b", "c"]],
    )
    def test_reorder_requires_exact_permutation(self, order):
        exercises = [make_exercise("a"), make_exercise("b")]

        with pytest.raises(InvalidInputError):
            grouping.reorder_items(exercises, order)

    def test_reorder_cannot_split_group(self):
        exercises = [make_exercise("a", group_id="g"), make_exercise("b", group_id="g")]

        with pytest.raises(InvalidInputError):
            grouping.reorder_items(exercises, ["b", "a"])

    def test_move_item_to_end(self):
        exercises = [make_exercise("x"), make_exercise("y"), make_exercise("z")]

        assert ids(grouping.move_item_to_end(exercises, "x")) == ["y", "z", "x"]

    def test_move_unknown_item(self):
        with pytest.raises(NotFoundError):
            grouping.move_item_to_end([make_exercise("x")], "nope")
