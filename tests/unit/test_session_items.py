"""
Unit tests for domain/session_items.py

Tests for:
- Projection of the flat exercise list into singles and supersets
- Degenerate groups (fewer than two members) treated as singles
- Completeness of the projection
"""

import pytest

from domain.models import SessionItemType
from domain.session_items import build_session_items, find_item, item_for_exercise, item_index
from tests.fakes.builders import make_exercise


@pytest.mark.unit
class TestBuildSessionItems:
    """Tests for build_session_items."""

    def test_empty_list_gives_no_items(self):
        assert build_session_items([]) == []

    def test_standalone_exercises_are_singles_in_order(self):
        exercises = [make_exercise("a"), make_exercise("b"), make_exercise("c")]

        items = build_session_items(exercises)

        assert [item.id for item in items] == ["a", "b", "c"]
        assert all(item.type == SessionItemType.SINGLE for item in items)
        assert items[1].exercise_ids == ("b",)

    def test_group_members_combine_at_earliest_member(self):
        exercises = [
            make_exercise("a"),
            make_exercise("b", group_id="g1"),
            make_exercise("c"),
            make_exercise("d", group_id="g1"),
        ]

        items = build_session_items(exercises)

        assert [item.id for item in items] == ["a", "g1", "c"]
        assert items[1].type == SessionItemType.SUPERSET
        assert items[1].exercise_ids == ("b", "d")

    def test_group_with_one_member_is_single(self):
        exercises = [make_exercise("a", group_id="g1"), make_exercise("b")]

        items = build_session_items(exercises)

        assert [item.id for item in items] == ["a", "b"]
        assert items[0].type == SessionItemType.SINGLE

    def test_every_exercise_appears_exactly_once(self):
        exercises = [
            make_exercise("a", group_id="g1"),
            make_exercise("b", group_id="g2"),
            make_exercise("c", group_id="g1"),
            make_exercise("d"),
            make_exercise("e", group_id="g2"),
            make_exercise("f", group_id="g3"),
        ]

        items = build_session_items(exercises)
        seen = [ex_id for item in items for ex_id in item.exercise_ids]

        assert sorted(seen) == ["a", "b", "c", "d", "e", "f"]
        assert len(seen) == len(set(seen))

    @pytest.mark.parametrize(
        "flags,expected",
        [
            ((False, False), False),
            ((True, False), False),
            ((False, True), False),
            ((True, True), True),
        ],
    )
    def test_superset_complete_only_when_all_members_complete(self, flags, expected):
        exercises = [
            make_exercise("a", group_id="g1", complete=flags[0]),
            make_exercise("b", group_id="g1", complete=flags[1]),
        ]

        (item,) = build_session_items(exercises)

        assert item.is_complete is expected

    def test_projection_is_deterministic(self):
        exercises = [
            make_exercise("a", group_id="g2"),
            make_exercise("b", group_id="g1"),
            make_exercise("c", group_id="g2"),
            make_exercise("d", group_id="g1"),
        ]

        assert build_session_items(exercises) == build_session_items(list(exercises))
        assert [item.id for item in build_session_items(exercises)] == ["g2", "g1"]


@pytest.mark.unit
class TestItemLookups:
    """Tests for find_item, item_index and item_for_exercise."""

    def test_lookups(self):
        items = build_session_items(
            [make_exercise("a"), make_exercise("b", group_id="g"), make_exercise("c", group_id="g")]
        )

        assert find_item(items, "g").exercise_ids == ("b", "c")
        assert find_item(items, None) is None
        assert find_item(items, "missing") is None
        assert item_index(items, "g") == 1
        assert item_index(items, "missing") == -1
        assert item_for_exercise(items, "c").id == "g"
        assert item_for_exercise(items, "zzz") is None
