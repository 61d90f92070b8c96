"""
SessionEngine: command/result interface for a workout logging session.

The rendering layer calls one method per user action and gets a
CommandResult back. Domain rules raise typed SessionError subclasses; the
engine turns them into rejected results so no exception crosses this
boundary for a user mistake.

Every successful mutation is saved through the SessionStore. A failing
store is reported in the result (``persisted=False``) and never rolls back
the in-memory session, so the user's work survives for a later retry.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import tzinfo
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Union

from application.ports import Clock, SessionStore
from domain import grouping, progression, set_ledger
from domain.errors import InvalidInputError, NotFoundError, SessionError, SessionStoreError
from domain.models import (
    Exercise,
    FocusState,
    ItemStatus,
    RestOwner,
    Session,
    SessionItem,
    WorkoutSet,
)
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
from domain.session_items import build_session_items, find_item
from domain.session_naming import MAX_NAME_LENGTH, auto_session_name
from domain.set_ledger import SetEntry

logger = logging.getLogger(__name__)

@dataclass
class CommandResult:
    """Result of one engine command."""

    success: bool
    error_kind: Optional[str] = None
    error: Optional[str] = None
    exercise_id: Optional[str] = None
    group_id: Optional[str] = None
    set_ids: List[str] = field(default_factory=list)
    persisted: bool = False
    persist_error: Optional[str] = None
    discarded: bool = False

    @classmethod
    def rejected(cls, error: SessionError) -> "CommandResult":
        """Build a failed result from a domain rejection."""
        return cls(success=False, error_kind=error.kind.value, error=error.message)


class SessionEngine:
    """
    Owns the active session and applies user actions to it.

    Dependencies are injected via constructor for testability.

    Usage:
        >>> engine = SessionEngine(store=store, clock=clock)
        >>> engine.start_session()
        >>> squat = engine.add_exercise("Squat").exercise_id
        >>> result = engine.add_set(squat, weight=100, reps=5)
        >>> if result.success:
        ...     print(engine.rest_display())
    """

    def __init__(
        self,
        store: SessionStore,
        clock: Clock,
        local_tz: Optional[tzinfo] = None,
    ) -> None:
        """
        Initialize the engine.

        Args:
            store: Persistence gateway for the active session and history
            clock: Source of "now"
            local_tz: Time zone for time-of-day session names; None uses
                the system local time zone
        """
        self._store = store
        self._clock = clock
        self._local_tz = local_tz
        self._session: Optional[Session] = None

    # =========================================================================
    # Internal helpers
    # =========================================================================

    def _require_session(self) -> Session:
        if self._session is None:
            raise NotFoundError("No active session")
        return self._session

    def _require_open_session(self) -> None:
        """A finished session waiting to be archived only accepts finish or discard."""
        if self._session is not None and self._session.is_complete:
            raise InvalidInputError(
                "Session is finished; finish it again to archive or discard it",
                subject_id=self._session.id,
            )

    def _execute(self, action: str, command: Callable[[], CommandResult]) -> CommandResult:
        """Run a command, turning rejections into results and saving on success."""
        try:
            self._require_open_session()
            result = command()
        except SessionError as e:
            logger.info("%s rejected (%s): %s", action, e.kind.value, e.message)
            return CommandResult.rejected(e)

        if result.success and self._session is not None:
            self._persist(result)
        return result

    def _persist(self, result: CommandResult) -> None:
        try:
            self._store.save(self._session)
        except SessionStoreError as e:
            logger.warning("Failed to save session %s: %s", self._session.id, e)
            result.persisted = False
            result.persist_error = str(e)
            return
        result.persisted = True

    def _commit(
        self,
        exercises: Sequence[Exercise],
        focus: Optional[FocusState] = None,
    ) -> None:
        """Swap in a new exercise list and the matching cursor state."""
        session = self._require_session()
        if focus is None:
            focus = progression.reconcile(session.exercises, exercises, session.focus)
        session.exercises = list(exercises)
        session.focus = focus
        self._refresh_name()
        self._refresh_rest_owner()

    def _refresh_name(self) -> None:
        session = self._session
        if not session.is_user_named:
            session.name = auto_session_name(
                session.exercises, session.started_at, tz=self._local_tz
            )

    def _refresh_rest_owner(self) -> None:
        """Keep the rest owner mirror pointing at a live item."""
        session = self._session
        if session.last_set_owner_id is None:
            return

        item = find_item(build_session_items(session.exercises), session.last_set_owner_id)
        if item is None:
            owner = resolve_rest_owner(session.exercises, session.rest_dismissed_at)
            self._set_rest_owner(owner)

    def _stop_rest_if_owner_completed(self, before: Sequence[Exercise]) -> None:
        """
        Stop the rest timer when its owner item has just been completed.

        Only the transition counts: a set logged while editing an already
        complete item keeps the timer. The stop is stamped on
        ``rest_dismissed_at`` so a reload does not bring the timer back.
        """
        session = self._session
        owner_id = session.last_set_owner_id
        if owner_id is None:
            return
        item = find_item(build_session_items(session.exercises), owner_id)
        if item is None or not item.is_complete:
            return
        previous = find_item(build_session_items(before), owner_id)
        if previous is not None and previous.is_complete:
            return
        logger.debug("Rest owner %s completed, clearing timer", owner_id)
        session.last_set_owner_id = None
        session.rest_dismissed_at = self._clock.now()

    def _set_rest_owner(self, owner: Optional[RestOwner]) -> None:
        session = self._session
        if owner is None:
            session.last_set_owner_id = None
            return
        session.last_set_owner_id = owner.owner_id
        session.last_set_at = owner.started_at

    def _running_rest(self, now) -> Optional[int]:
        """Elapsed rest of the current owner, if a timer is running."""
        owner = current_rest_owner(self._session)
        if owner is None:
            return None
        elapsed = elapsed_seconds(now, owner.started_at)
        return elapsed if elapsed > 0 else None

    def _take_rest_ownership(self, exercise_id: str, now) -> None:
        session = self._session
        session.last_set_at = now
        session.last_set_owner_id = owner_for_exercise(session.exercises, exercise_id)

    # =========================================================================
    # Session lifecycle
    # =========================================================================

    def start_session(self, name: Optional[str] = None) -> CommandResult:
        """
        Start a new logging session.

        Rejected while another session is active; finish or discard it first.
        """

        def command() -> CommandResult:
            if self._session is not None:
                raise InvalidInputError(
                    "A session is already active", subject_id=self._session.id
                )
            now = self._clock.now()
            session = Session(id=str(uuid.uuid4()), started_at=now)
            if name is not None:
                session.name = _clean_name(name)
                session.is_user_named = True
            self._session = session
            self._refresh_name()
            logger.info("Started session %s", session.id)
            return CommandResult(success=True)

        return self._execute("start_session", command)

    def resume_session(self) -> CommandResult:
        """
        Load the active session from the store and restore its state.

        Cursors are re-validated against the loaded exercises and the rest
        owner is recomputed from exercise timestamps.
        """
        try:
            loaded = self._store.load()
        except SessionStoreError as e:
            logger.warning("Failed to load active session: %s", e)
            return CommandResult(success=False, error=str(e), persist_error=str(e))

        if loaded is None:
            return CommandResult.rejected(NotFoundError("No saved session"))

        loaded.focus = progression.reconcile(loaded.exercises, loaded.exercises, loaded.focus)
        self._session = loaded
        self._set_rest_owner(resolve_rest_owner(loaded.exercises, loaded.rest_dismissed_at))
        logger.info(
            "Resumed session %s with %d exercises", loaded.id, len(loaded.exercises)
        )
        return CommandResult(success=True)

    def rename_session(self, name: str) -> CommandResult:
        """Rename the session; automatic naming stops from now on."""

        def command() -> CommandResult:
            session = self._require_session()
            session.name = _clean_name(name)
            session.is_user_named = True
            return CommandResult(success=True)

        return self._execute("rename_session", command)

    def finish_session(self) -> CommandResult:
        """
        Finish the session and move it to history.

        A session without any logged set is discarded instead. Otherwise
        exercises without sets are dropped, the end time is stamped, and the
        session is archived and cleared from active state. If archiving
        fails the finished session stays active so the call can be retried.
        """
        try:
            session = self._require_session()
        except SessionError as e:
            return CommandResult.rejected(e)

        if not session.has_logged_sets:
            logger.info("Discarding session %s with no logged sets", session.id)
            result = self.discard_session()
            result.discarded = True
            return result

        if not session.is_complete:
            exercises = list(session.exercises)
            for exercise in session.exercises:
                if not exercise.has_sets:
                    exercises = grouping.remove_exercise(exercises, exercise.id)
            self._commit(exercises)
            session.ended_at = self._clock.now()
            session.is_complete = True

        result = CommandResult(success=True)
        try:
            self._store.archive(session)
            self._store.clear()
        except SessionStoreError as e:
            logger.warning("Failed to archive session %s: %s", session.id, e)
            result.persist_error = str(e)
            return result

        logger.info(
            "Finished session %s: %d sets in %ds",
            session.id,
            session.total_sets,
            compute_duration_sec(session.started_at, session.ended_at),
        )
        self._session = None
        result.persisted = True
        return result

    def discard_session(self) -> CommandResult:
        """Drop the active session without archiving it."""
        if self._session is None:
            return CommandResult.rejected(NotFoundError("No active session"))

        session_id = self._session.id
        self._session = None
        result = CommandResult(success=True)
        try:
            self._store.clear()
        except SessionStoreError as e:
            logger.warning("Failed to clear session %s: %s", session_id, e)
            result.persist_error = str(e)
            return result
        result.persisted = True
        return result

    # =========================================================================
    # Exercises
    # =========================================================================

    def add_exercise(
        self,
        name: str,
        source: str = "user",
        catalog_id: Optional[str] = None,
    ) -> CommandResult:
        """
        Add an exercise to the end of the session.

        ``name``/``source``/``catalog_id`` come from the catalog lookup and
        are stored as given.
        """

        def command() -> CommandResult:
            session = self._require_session()
            clean = (name or "").strip()
            if not clean:
                raise InvalidInputError("Exercise name is required")
            if len(clean) > MAX_NAME_LENGTH:
                raise InvalidInputError(
                    f"Exercise name must be at most {MAX_NAME_LENGTH} characters"
                )
            if source not in ("system", "user"):
                raise InvalidInputError(f"Unknown exercise source {source!r}")

            exercise = Exercise(
                id=str(uuid.uuid4()),
                name=clean,
                source=source,
                catalog_id=catalog_id,
                added_at=self._clock.now(),
            )
            self._commit(session.exercises + [exercise])
            logger.debug("Added exercise %s (%s)", exercise.id, exercise.name)
            return CommandResult(success=True, exercise_id=exercise.id)

        return self._execute("add_exercise", command)

    def remove_exercise(self, exercise_id: str) -> CommandResult:
        """Remove an exercise and its sets from the session."""

        def command() -> CommandResult:
            session = self._require_session()
            exercises = grouping.remove_exercise(session.exercises, exercise_id)
            if session.last_set_owner_id == exercise_id:
                session.last_set_owner_id = None
            self._commit(exercises)
            return CommandResult(success=True, exercise_id=exercise_id)

        return self._execute("remove_exercise", command)

    # =========================================================================
    # Set ledger
    # =========================================================================

    def add_set(
        self,
        exercise_id: str,
        weight,
        reps,
        rest_duration: Optional[int] = None,
    ) -> CommandResult:
        """
        Log a set on one exercise and hand it the rest timer.

        When no rest duration is given, the running rest timer (if any) is
        recorded on the set.
        """

        def command() -> CommandResult:
            session = self._require_session()
            now = self._clock.now()
            rest = rest_duration if rest_duration is not None else self._running_rest(now)
            exercises, new_set = set_ledger.add_set(
                session.exercises, exercise_id, weight, reps, now=now, rest_duration=rest
            )
            self._commit(exercises)
            self._take_rest_ownership(exercise_id, now)
            return CommandResult(success=True, exercise_id=exercise_id, set_ids=[new_set.id])

        return self._execute("add_set", command)

    def add_group_set(
        self,
        entries: Sequence[Union[SetEntry, Mapping]],
        correlation_id: Optional[str] = None,
    ) -> CommandResult:
        """
        Log one set on several group members in a single action.

        Entries may be SetEntry objects or mappings with ``exercise_id``,
        ``weight`` and ``reps``. Invalid entries are skipped individually.
        """

        def command() -> CommandResult:
            session = self._require_session()
            batch = [_as_entry(entry) for entry in entries]
            now = self._clock.now()
            exercises, created = set_ledger.add_group_set(
                session.exercises,
                batch,
                correlation_id,
                now=now,
                rest_duration=self._running_rest(now),
            )
            self._commit(exercises)
            first_id = created[0][0]
            self._take_rest_ownership(first_id, now)

            owner = session.last_set_owner_id
            return CommandResult(
                success=True,
                group_id=owner if owner != first_id else None,
                set_ids=[new_set.id for _, new_set in created],
            )

        return self._execute("add_group_set", command)

    def update_set(self, exercise_id: str, set_id: str, weight, reps) -> CommandResult:
        """Change weight/reps of a logged set. Rest ownership is unaffected."""

        def command() -> CommandResult:
            session = self._require_session()
            exercises, changed = set_ledger.update_set(
                session.exercises, exercise_id, set_id, weight, reps
            )
            self._commit(exercises, focus=session.focus)
            return CommandResult(success=True, exercise_id=exercise_id, set_ids=[changed.id])

        return self._execute("update_set", command)

    def delete_set(self, exercise_id: str, set_id: str) -> CommandResult:
        """Delete one logged set. Rest ownership is unaffected."""

        def command() -> CommandResult:
            session = self._require_session()
            exercises = set_ledger.delete_set(session.exercises, exercise_id, set_id)
            self._commit(exercises, focus=session.focus)
            return CommandResult(success=True, exercise_id=exercise_id, set_ids=[set_id])

        return self._execute("delete_set", command)

    # =========================================================================
    # Grouping
    # =========================================================================

    def pair(self, exercise_id_a: str, exercise_id_b: str) -> CommandResult:
        """Put two ungrouped exercises into a new superset."""

        def command() -> CommandResult:
            session = self._require_session()
            exercises, group_id = grouping.pair(session.exercises, exercise_id_a, exercise_id_b)
            self._commit(exercises)
            return CommandResult(success=True, group_id=group_id)

        return self._execute("pair", command)

    def add_to_group(self, group_id: str, exercise_id: str) -> CommandResult:
        """Add an ungrouped exercise to an existing superset."""

        def command() -> CommandResult:
            session = self._require_session()
            self._commit(grouping.add_to_group(session.exercises, group_id, exercise_id))
            return CommandResult(success=True, group_id=group_id, exercise_id=exercise_id)

        return self._execute("add_to_group", command)

    def merge_groups(self, group_id_a: str, group_id_b: str) -> CommandResult:
        """Move every member of group B into group A."""

        def command() -> CommandResult:
            session = self._require_session()
            self._commit(grouping.merge_groups(session.exercises, group_id_a, group_id_b))
            return CommandResult(success=True, group_id=group_id_a)

        return self._execute("merge_groups", command)

    def remove_from_group(self, exercise_id: str) -> CommandResult:
        """Take an exercise out of its superset, dissolving it below two members."""

        def command() -> CommandResult:
            session = self._require_session()
            self._commit(grouping.remove_from_group(session.exercises, exercise_id))
            return CommandResult(success=True, exercise_id=exercise_id)

        return self._execute("remove_from_group", command)

    def swap_member(self, group_id: str, outgoing_id: str, incoming_id: str) -> CommandResult:
        """Replace a superset member with an ungrouped exercise."""

        def command() -> CommandResult:
            session = self._require_session()
            self._commit(
                grouping.swap_member(session.exercises, group_id, outgoing_id, incoming_id)
            )
            return CommandResult(success=True, group_id=group_id, exercise_id=incoming_id)

        return self._execute("swap_member", command)

    def dissolve_group(self, group_id: str) -> CommandResult:
        """Ungroup every member of a superset."""

        def command() -> CommandResult:
            session = self._require_session()
            self._commit(grouping.dissolve_group(session.exercises, group_id))
            return CommandResult(success=True, group_id=group_id)

        return self._execute("dissolve_group", command)

    def reorder_items(self, item_ids: Sequence[str]) -> CommandResult:
        """Reorder session items; supersets always move as a unit."""

        def command() -> CommandResult:
            session = self._require_session()
            self._commit(grouping.reorder_items(session.exercises, item_ids))
            return CommandResult(success=True)

        return self._execute("reorder_items", command)

    # =========================================================================
    # Progression
    # =========================================================================

    def complete_exercise(self, exercise_id: str) -> CommandResult:
        """Mark one exercise complete."""
        return self.complete_group([exercise_id])

    def complete_group(self, exercise_ids: Sequence[str]) -> CommandResult:
        """Mark several exercises complete in one action."""

        def command() -> CommandResult:
            session = self._require_session()
            before = session.exercises
            exercises, focus = progression.complete_exercises(
                session.exercises, session.focus, list(exercise_ids)
            )
            self._commit(exercises, focus)
            self._stop_rest_if_owner_completed(before)
            return CommandResult(success=True)

        return self._execute("complete_group", command)

    def complete_item(self, item_id: str) -> CommandResult:
        """Complete every member of a session item."""

        def command() -> CommandResult:
            session = self._require_session()
            before = session.exercises
            exercises, focus = progression.complete_item(session.exercises, session.focus, item_id)
            self._commit(exercises, focus)
            self._stop_rest_if_owner_completed(before)
            return CommandResult(success=True)

        return self._execute("complete_item", command)

    def skip_item(self, item_id: str) -> CommandResult:
        """Skip a session item; it stays editable."""

        def command() -> CommandResult:
            session = self._require_session()
            focus = progression.skip_item(session.exercises, session.focus, item_id)
            self._commit(session.exercises, focus)
            return CommandResult(success=True)

        return self._execute("skip_item", command)

    def defer_item(self, item_id: str) -> CommandResult:
        """Move a session item to the end and advance past it."""

        def command() -> CommandResult:
            session = self._require_session()
            exercises, focus = progression.defer_item(session.exercises, session.focus, item_id)
            self._commit(exercises, focus)
            return CommandResult(success=True)

        return self._execute("defer_item", command)

    def focus_item(self, item_id: str) -> CommandResult:
        """Expand a session item; a completed one is opened for editing only."""

        def command() -> CommandResult:
            session = self._require_session()
            focus = progression.focus_item(session.exercises, session.focus, item_id)
            self._commit(session.exercises, focus)
            return CommandResult(success=True)

        return self._execute("focus_item", command)

    # =========================================================================
    # Rest timer
    # =========================================================================

    def dismiss_rest_timer(self) -> CommandResult:
        """Hide the rest timer until the next set is logged."""

        def command() -> CommandResult:
            session = self._require_session()
            session.rest_dismissed_at = self._clock.now()
            session.last_set_owner_id = None
            return CommandResult(success=True)

        return self._execute("dismiss_rest_timer", command)

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def session(self) -> Optional[Session]:
        """The active session, or None."""
        return self._session

    def session_items(self) -> List[SessionItem]:
        """Ordered singles and supersets for display."""
        if self._session is None:
            return []
        return build_session_items(self._session.exercises)

    def item_statuses(self) -> Dict[str, ItemStatus]:
        """Workflow status per session item id."""
        if self._session is None:
            return {}
        return progression.item_statuses(self._session.exercises, self._session.focus)

    def active_item_id(self) -> Optional[str]:
        """Item to show expanded."""
        if self._session is None:
            return None
        return progression.active_item_id(self.session_items(), self._session.focus)

    def progression_item_id(self) -> Optional[str]:
        """Item the workflow considers next; None once everything is done."""
        if self._session is None:
            return None
        return self._session.focus.progression_id

    def is_terminal(self) -> bool:
        """Every item is complete or skipped; the workout has no work left."""
        if self._session is None:
            return False
        return progression.is_terminal(self._session.exercises, self._session.focus)

    def exercise_sets(self, exercise_id: str) -> List[WorkoutSet]:
        """Sets of one exercise in display order; empty when unknown."""
        if self._session is None:
            return []
        exercise = self._session.find_exercise(exercise_id)
        if exercise is None:
            return []
        return set_ledger.sets_in_display_order(exercise.sets)

    def rest_owner(self) -> Optional[RestOwner]:
        """Exercise or group the rest timer is counting for."""
        if self._session is None:
            return None
        return current_rest_owner(self._session)

    def rest_elapsed_seconds(self, item_id: Optional[str] = None) -> Optional[int]:
        """
        Seconds since the owner's last set.

        With ``item_id``, only the owning item gets a value; every other
        item gets None.
        """
        owner = self.rest_owner()
        if owner is None:
            return None
        if item_id is None:
            item_id = owner.owner_id
        elif item_id != owner.owner_id:
            return None
        return rest_elapsed_for_item(owner, item_id, self._clock.now())

    def rest_display(self, item_id: Optional[str] = None) -> Optional[str]:
        """Formatted rest timer (``MM:SS`` or ``H:MM``), or None."""
        seconds = self.rest_elapsed_seconds(item_id)
        if seconds is None:
            return None
        return format_elapsed(seconds)

    def session_elapsed_seconds(self) -> int:
        """Seconds since the session started."""
        if self._session is None:
            return 0
        session = self._session
        return session_elapsed_seconds(session.started_at, session.ended_at, self._clock.now())


def _clean_name(name: str) -> str:
    clean = (name or "").strip()
    if not clean:
        raise InvalidInputError("Session name is required")
    if len(clean) > MAX_NAME_LENGTH:
        raise InvalidInputError(
            f"Session name must be at most {MAX_NAME_LENGTH} characters"
        )
    return clean


def _as_entry(entry: Union[SetEntry, Mapping]) -> SetEntry:
    if isinstance(entry, SetEntry):
        return entry
    try:
        return SetEntry(
            exercise_id=entry["exercise_id"], weight=entry["weight"], reps=entry["reps"]
        )
    except (KeyError, TypeError) as e:
        raise InvalidInputError(f"Malformed group set entry: {entry!r}") from e
