"""
Session Module - Manages ephemeral game sessions.

A session represents one play-through:
- Created when a player starts
- Holds the game state and the loop driving it
- Destroyed when the player leaves (or the process ends)

Sessions are EPHEMERAL:
- No persistence
- Cell changes exist only in memory
"""

from .manager import SessionManager, Session, SessionState
from .game_loop import GameLoop, LoopState, new_game_state

__all__ = [
    "SessionManager",
    "Session",
    "SessionState",
    "GameLoop",
    "LoopState",
    "new_game_state",
]
