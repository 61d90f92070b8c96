"""
Clock Interface (Port).

Single source of "now" for the engine. Injected so tests can control time.
"""
from datetime import datetime
from typing import Protocol


class Clock(Protocol):
    """Supplies timezone-aware timestamps."""

    def now(self) -> datetime:
        """Current time as an aware datetime."""
        ...
