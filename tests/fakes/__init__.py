"""
Fake port implementations for testing.

In-memory stand-ins for the SessionStore and Clock ports so the engine can
be driven deterministically without touching the filesystem or real time.

Usage:
    from tests.fakes import FakeClock, FakeSessionStore

    clock = FakeClock()
    store = FakeSessionStore()
    engine = SessionEngine(store=store, clock=clock)
    clock.advance(seconds=90)
"""

from tests.fakes.clock import FakeClock
from tests.fakes.session_store import FakeSessionStore

__all__ = [
    "FakeClock",
    "FakeSessionStore",
]
