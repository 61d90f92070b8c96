"""
Application use cases for the workout session engine.

SessionEngine is the single command/result entry point for the rendering
layer. It orchestrates the domain rules and the SessionStore/Clock ports;
dependencies are injected via the constructor for testability.

Usage:
    from application.use_cases import SessionEngine, CommandResult

    engine = SessionEngine(store=store, clock=clock)
    engine.start_session()
    result = engine.add_exercise("Bench Press")
    if result.success:
        engine.add_set(result.exercise_id, weight=60, reps=10)
"""

from application.use_cases.session_engine import CommandResult, SessionEngine

__all__ = [
    "CommandResult",
    "SessionEngine",
]
