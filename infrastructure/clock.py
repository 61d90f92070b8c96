"""
System clock adapter.
"""
from datetime import datetime, timezone


class SystemClock:
    """Clock protocol implementation backed by the system time (UTC)."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
