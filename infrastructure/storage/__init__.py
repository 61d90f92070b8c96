"""
File-backed session storage.

Usage:
    from infrastructure.storage import JsonFileSessionStore

    store = JsonFileSessionStore(settings.data_dir)
    session = store.load()
"""

from infrastructure.storage.json_session_store import JsonFileSessionStore
from infrastructure.storage.merge import merge_sessions

__all__ = [
    "JsonFileSessionStore",
    "merge_sessions",
]
