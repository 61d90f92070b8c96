"""
Application layer for the workout session engine.

This package contains:
- ports/: Interfaces the engine depends on (SessionStore, Clock)
- use_cases/: SessionEngine, the command/result interface
"""
