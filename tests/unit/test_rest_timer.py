"""
Unit tests for domain/rest_timer.py

Tests for:
- Elapsed time as a pure function of two timestamps
- MM:SS / H:MM formatting
- Ownership after logging and on resume
"""

from datetime import timedelta

import pytest

from domain.models import Session
from domain.rest_timer import (
    compute_duration_sec,
    current_rest_owner,
    elapsed_seconds,
    format_elapsed,
    owner_for_exercise,
    resolve_rest_owner,
    rest_elapsed_for_item,
    session_elapsed_seconds,
)
from tests.fakes.builders import make_exercise
from tests.fakes.clock import DEFAULT_START

T0 = DEFAULT_START


def at(seconds: float):
    return T0 + timedelta(seconds=seconds)


@pytest.mark.unit
class TestElapsedAndFormat:
    """Tests for elapsed_seconds and format_elapsed."""

    def test_elapsed_is_floored_difference(self):
        assert elapsed_seconds(at(90.9), T0) == 90

    def test_elapsed_without_start_is_zero(self):
        assert elapsed_seconds(at(10), None) == 0

    def test_elapsed_never_negative(self):
        assert elapsed_seconds(T0, at(10)) == 0

    @pytest.mark.parametrize(
        "seconds,expected",
        [
            (0, "00:00"),
            (7, "00:07"),
            (247, "04:07"),
            (3599, "59:59"),
            (3600, "1:00"),
            (3900, "1:05"),
            (3959, "1:05"),
            (36000, "10:00"),
            (-5, "00:00"),
            (None, "00:00"),
        ],
    )
    def test_format_elapsed(self, seconds, expected):
        assert format_elapsed(seconds) == expected

    def test_session_durations(self):
        assert session_elapsed_seconds(T0, None, at(125.7)) == 125
        assert session_elapsed_seconds(T0, at(600), at(9999)) == 600
        assert compute_duration_sec(T0, at(125.7)) == 126

        finished = Session(id="s", started_at=T0, ended_at=at(600))
        assert finished.duration_sec == 600


@pytest.mark.unit
class TestOwnership:
    """Tests for owner_for_exercise and resolve_rest_owner."""

    def test_grouped_exercise_hands_ownership_to_group(self):
        exercises = [make_exercise("a", group_id="g"), make_exercise("b", group_id="g")]

        assert owner_for_exercise(exercises, "a") == "g"

    def test_standalone_exercise_owns_itself(self):
        assert owner_for_exercise([make_exercise("a")], "a") == "a"

    def test_degenerate_group_member_owns_itself(self):
        exercises = [make_exercise("a", group_id="g"), make_exercise("b")]

        assert owner_for_exercise(exercises, "a") == "a"

    def test_no_sets_means_no_owner(self):
        assert resolve_rest_owner([make_exercise("a"), make_exercise("b")]) is None

    def test_resume_picks_maximum_effective_timestamp(self):
        exercises = [
            make_exercise("a", last_set_offset=100),
            make_exercise("b", group_id="g", last_set_offset=50),
            make_exercise("c", group_id="g", last_set_offset=300),
            make_exercise("d", last_set_offset=200),
        ]

        owner = resolve_rest_owner(exercises)

        assert owner.owner_id == "g"
        assert owner.kind == "group"
        assert owner.started_at == at(300)
        assert rest_elapsed_for_item(owner, "g", at(345)) == 45

    def test_resume_standalone_owner(self):
        exercises = [
            make_exercise("a", group_id="g", last_set_offset=50),
            make_exercise("b", group_id="g"),
            make_exercise("c", last_set_offset=80),
        ]

        owner = resolve_rest_owner(exercises)

        assert owner.owner_id == "c"
        assert owner.kind == "exercise"

    def test_tie_goes_to_earlier_item(self):
        exercises = [make_exercise("a", last_set_offset=60), make_exercise("b", last_set_offset=60)]

        assert resolve_rest_owner(exercises).owner_id == "a"

    def test_complete_item_keeps_ownership(self):
        exercises = [
            make_exercise("a", last_set_offset=10),
            make_exercise("b", last_set_offset=90, complete=True),
        ]

        assert resolve_rest_owner(exercises).owner_id == "b"

    def test_completion_stamp_hides_owner(self):
        exercises = [
            make_exercise("a", last_set_offset=10),
            make_exercise("b", last_set_offset=90, complete=True),
        ]

        assert resolve_rest_owner(exercises, dismissed_at=at(120)) is None

    def test_dismissal_hides_older_owner(self):
        exercises = [make_exercise("a", last_set_offset=10)]

        assert resolve_rest_owner(exercises, dismissed_at=at(20)) is None
        assert resolve_rest_owner(exercises, dismissed_at=at(5)).owner_id == "a"

    def test_only_owner_reports_elapsed(self):
        owner = resolve_rest_owner([make_exercise("a", last_set_offset=0), make_exercise("b")])

        assert rest_elapsed_for_item(owner, "a", at(30)) == 30
        assert rest_elapsed_for_item(owner, "b", at(30)) == 0
        assert rest_elapsed_for_item(None, "a", at(30)) == 0


@pytest.mark.unit
class TestCurrentRestOwner:
    """Tests for the session-level rest owner mirror."""

    def test_mirror_owner(self):
        session = Session(
            id="s",
            started_at=T0,
            exercises=[make_exercise("a", last_set_offset=10)],
            last_set_at=at(10),
            last_set_owner_id="a",
        )

        owner = current_rest_owner(session)

        assert owner.owner_id == "a"
        assert owner.started_at == at(10)

    def test_no_mirror_means_no_owner(self):
        session = Session(
            id="s", started_at=T0, exercises=[make_exercise("a", last_set_offset=10)]
        )

        assert current_rest_owner(session) is None

    def test_owner_on_completed_item_is_kept(self):
        session = Session(
            id="s",
            started_at=T0,
            exercises=[make_exercise("a", last_set_offset=10, complete=True)],
            last_set_at=at(10),
            last_set_owner_id="a",
        )

        assert current_rest_owner(session).owner_id == "a"

    def test_stale_owner_falls_back_to_resolution(self):
        session = Session(
            id="s",
            started_at=T0,
            exercises=[
                make_exercise("a", group_id="g", last_set_offset=10),
                make_exercise("b", group_id="g"),
            ],
            last_set_at=at(10),
            last_set_owner_id="a",
        )

        assert current_rest_owner(session).owner_id == "g"
