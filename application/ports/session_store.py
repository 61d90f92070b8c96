"""
Session Store Interface (Port).

Persistence gateway for the active logging session and the history of
finished sessions. Schema versioning and import merging belong to the
adapter; the engine only loads and saves whole Session aggregates.
"""
from typing import List, Optional, Protocol

from domain.models import Session


class SessionStore(Protocol):
    """
    Abstract interface for session persistence.

    Implementations raise ``domain.errors.SessionStoreError`` when a read
    or write fails. The engine reports such failures to the caller and keeps
    its in-memory state.
    """

    def load(self) -> Optional[Session]:
        """
        Load the active session.

        Returns:
            The active Session, or None if there is none
        """
        ...

    def save(self, session: Session) -> None:
        """
        Persist the active session, replacing any previous one.

        Args:
            session: Current session state
        """
        ...

    def clear(self) -> None:
        """Forget the active session."""
        ...

    def archive(self, session: Session) -> None:
        """
        Append a finished session to history.

        Args:
            session: Finished session (``is_complete`` set)
        """
        ...

    def history(self) -> List[Session]:
        """
        List finished sessions.

        Returns:
            Sessions ordered by started_at, oldest first
        """
        ...
