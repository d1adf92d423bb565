"""
Errors - Exceptions raised by the engine.

Gameplay outcomes (out-of-range clicks, mismatched merges, rejected
positions) are NOT exceptions. They come back as result objects.
Exceptions are reserved for bad configuration and broken preconditions.
"""


class CellMergeError(Exception):
    """Base class for all engine exceptions."""


class ConfigError(CellMergeError, ValueError):
    """Invalid configuration (spawn table, grid, environment)."""


class SessionNotStartedError(CellMergeError, RuntimeError):
    """An operation needed a started session but the session was never started."""


class SessionNotFoundError(CellMergeError, KeyError):
    """No session exists with the given ID."""

    def __init__(self, session_id: str):
        super().__init__(session_id)
        self.session_id = session_id

    def __str__(self) -> str:
        return f"Session {self.session_id} not found"


class InvalidPositionError(CellMergeError, ValueError):
    """A position that cannot be placed on the grid (non-finite or out of range)."""
