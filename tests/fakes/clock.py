"""
Fake Clock for testing.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

DEFAULT_START = datetime(2024, 1, 15, 9, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """
    Clock whose time only moves when told to.

    Usage:
        clock = FakeClock()
        clock.advance(seconds=30)
        clock.set(datetime(2024, 1, 1, 18, 0, tzinfo=timezone.utc))
    """

    def __init__(self, start: Optional[datetime] = None):
        self._now = start or DEFAULT_START

    def now(self) -> datetime:
        return self._now

    def advance(self, seconds: float = 0, minutes: float = 0, hours: float = 0) -> datetime:
        """Move time forward and return the new now."""
        self._now = self._now + timedelta(seconds=seconds, minutes=minutes, hours=hours)
        return self._now

    def set(self, when: datetime) -> None:
        """Jump to an absolute time."""
        self._now = when
