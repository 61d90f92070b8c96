"""
JSON file implementation of SessionStore.

Layout inside the data directory:

- active_session.json: the session currently being logged
- history.json: finished sessions

Both files are wrapped in an envelope carrying ``schema_version``. Writes go
to a temporary file in the same directory which is then renamed over the
target, so a crash never leaves a half-written file behind.
"""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from pydantic import ValidationError

from domain.errors import SessionStoreError
from domain.models import Session
from infrastructure.storage.merge import merge_sessions

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1
ACTIVE_FILENAME = "active_session.json"
HISTORY_FILENAME = "history.json"


class JsonFileSessionStore:
    """
    SessionStore protocol implementation backed by JSON files.

    The directory is created on first write.
    """

    def __init__(self, directory: Union[str, Path]):
        """
        Initialize with the data directory.

        Args:
            directory: Directory holding the session files
        """
        self._directory = Path(directory)

    @property
    def active_path(self) -> Path:
        return self._directory / ACTIVE_FILENAME

    @property
    def history_path(self) -> Path:
        return self._directory / HISTORY_FILENAME

    # =========================================================================
    # File helpers
    # =========================================================================

    def _read_envelope(self, path: Path) -> Optional[Dict[str, Any]]:
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise SessionStoreError(f"Could not read {path.name}: {e}") from e

        if not isinstance(data, dict):
            raise SessionStoreError(f"{path.name} is not a JSON object")
        version = data.get("schema_version")
        if version != SCHEMA_VERSION:
            raise SessionStoreError(
                f"{path.name} has unsupported schema version {version!r} "
                f"(expected {SCHEMA_VERSION})"
            )
        return data

    def _write_envelope(self, path: Path, payload: Dict[str, Any]) -> None:
        envelope = {"schema_version": SCHEMA_VERSION, **payload}
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._directory, prefix=f".{path.stem}-", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(envelope, f, indent=2)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise SessionStoreError(f"Could not write {path.name}: {e}") from e

    def _write_history(self, sessions: Sequence[Session]) -> None:
        self._write_envelope(
            self.history_path,
            {"sessions": [s.model_dump(mode="json") for s in sessions]},
        )

    # =========================================================================
    # SessionStore Protocol Methods
    # =========================================================================

    def load(self) -> Optional[Session]:
        """Load the active session, or None if no file exists."""
        data = self._read_envelope(self.active_path)
        if data is None:
            return None
        try:
            return Session.model_validate(data.get("session"))
        except ValidationError as e:
            raise SessionStoreError(f"Invalid active session: {e}") from e

    def save(self, session: Session) -> None:
        """Write the active session."""
        self._write_envelope(self.active_path, {"session": session.model_dump(mode="json")})
        logger.debug("Saved session %s to %s", session.id, self.active_path)

    def clear(self) -> None:
        """Delete the active session file."""
        try:
            self.active_path.unlink(missing_ok=True)
        except OSError as e:
            raise SessionStoreError(f"Could not remove {ACTIVE_FILENAME}: {e}") from e

    def archive(self, session: Session) -> None:
        """Add a finished session to history, replacing an older copy."""
        self._write_history(merge_sessions(self.history(), [session]))
        logger.info("Archived session %s", session.id)

    def history(self) -> List[Session]:
        """Finished sessions, oldest first."""
        data = self._read_envelope(self.history_path)
        if data is None:
            return []
        try:
            sessions = [Session.model_validate(raw) for raw in data.get("sessions", [])]
        except ValidationError as e:
            raise SessionStoreError(f"Invalid session history: {e}") from e
        return sorted(sessions, key=lambda s: (s.started_at, s.id))

    # =========================================================================
    # Import
    # =========================================================================

    def import_history(self, sessions: Sequence[Session]) -> List[Session]:
        """
        Merge imported sessions into history.

        Returns:
            The merged history as written
        """
        merged = merge_sessions(self.history(), sessions)
        self._write_history(merged)
        return merged
