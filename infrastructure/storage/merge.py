"""
Merge policy for imported session history.

Records are deduplicated by id. When both sides have the same session, the
one with the later ``ended_at`` (or ``started_at`` for an open session)
wins; on a tie the imported record wins.
"""
import logging
from datetime import datetime
from typing import Dict, List, Sequence

from domain.models import Session

logger = logging.getLogger(__name__)


def _recency(session: Session) -> datetime:
    if session.ended_at is not None and session.ended_at > session.started_at:
        return session.ended_at
    return session.started_at


def merge_sessions(
    existing: Sequence[Session],
    imported: Sequence[Session],
) -> List[Session]:
    """
    Merge two session lists, keeping the newest record per id.

    Args:
        existing: Sessions already stored
        imported: Sessions read from an import

    Returns:
        Merged sessions ordered by started_at, oldest first
    """
    merged: Dict[str, Session] = {session.id: session for session in existing}
    replaced = 0

    for session in imported:
        current = merged.get(session.id)
        if current is None or _recency(session) >= _recency(current):
            if current is not None:
                replaced += 1
            merged[session.id] = session

    logger.info(
        "Merged %d imported sessions into %d existing (%d replaced)",
        len(imported),
        len(existing),
        replaced,
    )
    return sorted(merged.values(), key=lambda s: (s.started_at, s.id))
