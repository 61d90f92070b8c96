"""
Wiring for the session engine.

Builds the engine from settings with the JSON file store and the system
clock. Tests construct SessionEngine directly with fakes instead.

Usage:
    from infrastructure.factory import create_session_engine

    engine = create_session_engine()
    engine.resume_session()
"""

from typing import Optional

from application.use_cases import SessionEngine
from infrastructure.clock import SystemClock
from infrastructure.storage import JsonFileSessionStore
from shared.settings import Settings, get_settings


def get_session_store(settings: Optional[Settings] = None) -> JsonFileSessionStore:
    """JSON store rooted at the configured data directory."""
    settings = settings or get_settings()
    return JsonFileSessionStore(settings.data_dir)


def create_session_engine(settings: Optional[Settings] = None) -> SessionEngine:
    """Session engine backed by the JSON store and the system clock."""
    settings = settings or get_settings()
    return SessionEngine(
        store=get_session_store(settings),
        clock=SystemClock(),
        local_tz=settings.local_tz,
    )
