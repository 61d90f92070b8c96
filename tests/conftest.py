"""
Shared fixtures for the session engine tests.
"""

import pytest

from application.use_cases import SessionEngine
from tests.fakes import FakeClock, FakeSessionStore


@pytest.fixture
def clock() -> FakeClock:
    """Clock fixed at 2024-01-15 09:00 UTC."""
    return FakeClock()


@pytest.fixture
def store() -> FakeSessionStore:
    """Fresh in-memory session store."""
    return FakeSessionStore()


@pytest.fixture
def engine(store: FakeSessionStore, clock: FakeClock) -> SessionEngine:
    """Engine with an active, empty session."""
    engine = SessionEngine(store=store, clock=clock)
    engine.start_session()
    return engine
