"""
Fake Session Store for testing.

In-memory implementation of SessionStore with failure injection, so tests
can check that a failing store never rolls back engine state.
"""
from typing import List, Optional

from domain.errors import SessionStoreError
from domain.models import Session


class FakeSessionStore:
    """
    In-memory fake implementation of SessionStore.

    Sessions are stored as JSON strings so every load returns a fresh copy,
    the same way a real store would.

    Usage:
        store = FakeSessionStore()
        store.fail_saves = True  # every save raises SessionStoreError
        store.seed_active(session)
    """

    def __init__(self):
        self._active: Optional[str] = None
        self._history: List[str] = []
        self.save_count = 0
        self.fail_saves = False
        self.fail_loads = False
        self.fail_archive = False

    def reset(self) -> None:
        """Clear all stored data and failure flags."""
        self.__init__()

    def seed_active(self, session: Session) -> None:
        """Store an active session without counting a save."""
        self._active = session.model_dump_json()

    @property
    def active(self) -> Optional[Session]:
        """Last saved active session (test helper)."""
        if self._active is None:
            return None
        return Session.model_validate_json(self._active)

    # =========================================================================
    # SessionStore Protocol Methods
    # =========================================================================

    def load(self) -> Optional[Session]:
        if self.fail_loads:
            raise SessionStoreError("load failed")
        return self.active

    def save(self, session: Session) -> None:
        if self.fail_saves:
            raise SessionStoreError("disk full")
        self._active = session.model_dump_json()
        self.save_count += 1

    def clear(self) -> None:
        self._active = None

    def archive(self, session: Session) -> None:
        if self.fail_archive:
            raise SessionStoreError("archive failed")
        self._history = [
            raw for raw in self._history if Session.model_validate_json(raw).id != session.id
        ]
        self._history.append(session.model_dump_json())

    def history(self) -> List[Session]:
        return [Session.model_validate_json(raw) for raw in self._history]
