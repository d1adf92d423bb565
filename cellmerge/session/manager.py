"""
Session Manager - Creates and manages game sessions.

A session is one player's run of the game:
- Created with a config and a starting position
- Holds the GameState and the GameLoop driving it
- Lives in memory only, for the lifetime of the process

PERSISTENCE RULES:
- NO database, no files
- Ending a session discards all of its state
- Independent sessions never share state (each has its own overlay)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
import logging
import time
import uuid

from ..config import GameConfig
from ..engine_core.grid import CLASSROOM, LatLng
from ..engine_core.reducer import validate_position
from ..errors import InvalidPositionError, SessionNotFoundError
from ..movement import MovementMode, PositionSource, StartResult
from ..render import Renderer
from .game_loop import GameLoop, WinNotifier, new_game_state

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """State of a game session."""
    CREATED = "created"  # Built, loop not started
    ACTIVE = "active"  # Loop running
    ENDED = "ended"  # Stopped and discarded


@dataclass
class Session:
    """
    An ephemeral game session.

    Contains:
    - The config it was created with
    - The game loop (which owns the GameState)
    - Session metadata
    """
    session_id: str
    config: GameConfig
    loop: GameLoop
    created_at: float
    state: SessionState = SessionState.CREATED
    start_result: StartResult | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def game_state(self):
        return self.loop.state

    def is_active(self) -> bool:
        """Check if session is still active."""
        return self.state in {SessionState.CREATED, SessionState.ACTIVE}

    def start(self, mode: MovementMode = MovementMode.STEP) -> StartResult:
        self.start_result = self.loop.start(mode)
        self.state = SessionState.ACTIVE
        return self.start_result


class SessionManager:
    """
    Manages game sessions.

    Responsibilities:
    - Create sessions from configs
    - Track active sessions
    - Clean up ended and stale sessions

    No persistence - sessions are in-memory only.
    """

    def __init__(self, default_config: GameConfig | None = None):
        self.default_config = default_config or GameConfig()
        self._sessions: dict[str, Session] = {}

    def create_session(
        self,
        config: GameConfig | None = None,
        start: LatLng | None = None,
        renderer: Renderer | None = None,
        notifier: WinNotifier | None = None,
        position_source: PositionSource | None = None,
        mode: MovementMode | None = MovementMode.STEP,
    ) -> Session:
        """
        Create a new game session.

        Args:
            config: Game tuning (defaults to the manager's config)
            start: Starting position (defaults to the classroom)
            renderer: Where frames go (defaults to a NullRenderer)
            notifier: Called once with the win message
            position_source: Source for feed mode
            mode: Movement mode to start in; None leaves the session unstarted

        Returns:
            New Session, started unless mode is None

        Raises:
            InvalidPositionError: If start is non-finite or out of range
        """
        config = config or self.default_config
        start = start or CLASSROOM

        error = validate_position(start)
        if error:
            raise InvalidPositionError(error)

        state = new_game_state(config, start)
        loop = GameLoop(
            state,
            config=config,
            renderer=renderer,
            notifier=notifier,
            position_source=position_source,
        )

        session = Session(
            session_id=str(uuid.uuid4()),
            config=config,
            loop=loop,
            created_at=time.time(),
        )
        self._sessions[session.session_id] = session
        logger.info(
            "Created session %s at (%s, %s), %s origin",
            session.session_id, start.lat, start.lng, config.grid.scheme.value,
        )

        if mode is not None:
            session.start(mode)
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def require_session(self, session_id: str) -> Session:
        """Get a session by ID or raise SessionNotFoundError."""
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def end_session(self, session_id: str) -> bool:
        """
        End a session and clean up.

        The session is removed from memory. Returns False if it did
        not exist.
        """
        session = self._sessions.pop(session_id, None)
        if not session:
            return False
        session.loop.stop()
        session.state = SessionState.ENDED
        logger.info("Ended session %s", session_id)
        return True

    def list_active_sessions(self) -> list[str]:
        """List IDs of active sessions."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> int:
        """
        End sessions older than max_age.

        Called periodically to free memory. Returns how many were ended.
        """
        current_time = time.time()
        stale = [
            session_id for session_id, session in self._sessions.items()
            if current_time - session.created_at > max_age_seconds
        ]
        for session_id in stale:
            self.end_session(session_id)
        return len(stale)
