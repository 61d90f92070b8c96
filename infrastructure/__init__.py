"""
Infrastructure layer for the session engine.

Concrete implementations of the ports in ``application.ports``:
- storage/: JSON file session store and import merging
- clock: system clock
"""

from infrastructure.clock import SystemClock
from infrastructure.storage import JsonFileSessionStore, merge_sessions

__all__ = [
    "JsonFileSessionStore",
    "SystemClock",
    "merge_sessions",
]
