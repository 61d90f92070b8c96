"""
Ports for the session engine.

The engine depends on these interfaces only; concrete adapters live in
``infrastructure/``.

- SessionStore: load/save the active session, archive finished ones
- Clock: supplies "now"

Usage:
    from application.ports import Clock, SessionStore

    class SessionEngine:
        def __init__(self, store: SessionStore, clock: Clock):
            ...
"""

from application.ports.clock import Clock
from application.ports.session_store import SessionStore

__all__ = [
    "Clock",
    "SessionStore",
]
