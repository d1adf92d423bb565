"""
API Service - Business logic layer between the HTTP API and the engine.

The service:
1. Translates API requests into engine calls
2. Manages sessions (one push position source per session)
3. Formats engine results as response models

This layer is framework-agnostic; app.py only does HTTP plumbing.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
import logging

from .. import __version__
from ..config import GameConfig
from ..engine_core.action import ActionResult
from ..engine_core.grid import CellCoordinate, GridConfig, LatLng, OriginScheme
from ..errors import InvalidPositionError
from ..movement import MovementMode, PushPositionSource, parse_direction
from ..render import status_text
from ..session import Session, SessionManager
from .schemas import (
    ActionResponse,
    CellInfo,
    CreateSessionRequest,
    ErrorCode,
    GameStateResponse,
    HealthResponse,
    ModeResponse,
    MovementModeName,
    OriginSchemeName,
    PlayerInfo,
    SessionResponse,
    SessionStatus,
)

logger = logging.getLogger(__name__)


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()
        session = service.create_session(CreateSessionRequest())
        service.interact(session.session_id, 0, 0)
        service.move(session.session_id, "north")
    """
    config: GameConfig = field(default_factory=GameConfig)
    session_manager: SessionManager | None = None
    session_max_age: int = 3600

    # Position feed per session, fed by POST /position
    _sources: dict[str, PushPositionSource] = field(default_factory=dict)

    def __post_init__(self):
        if self.session_manager is None:
            self.session_manager = SessionManager(default_config=self.config)

    # =========================================================================
    # Sessions
    # =========================================================================

    def create_session(self, request: CreateSessionRequest) -> SessionResponse:
        """Create and start a new game session. Stale sessions are ended first."""
        self.cleanup_stale_sessions(self.session_max_age)

        scheme = OriginScheme(request.origin_scheme.value)
        config = replace(
            self.config,
            grid=GridConfig.for_scheme(scheme, cell_size=self.config.grid.cell_size),
            seed=request.seed or self.config.seed,
        )
        if request.evict_offscreen is not None:
            config = replace(config, evict_offscreen=request.evict_offscreen)

        if (request.lat is None) != (request.lng is None):
            raise InvalidPositionError("lat and lng must be given together")
        start = None
        if request.lat is not None:
            start = LatLng(request.lat, request.lng)

        source = PushPositionSource(name="client", available=request.location_available)
        session = self.session_manager.create_session(
            config=config,
            start=start,
            position_source=source,
            mode=None,
        )
        announcements: list[str] = []
        session.metadata["announcements"] = announcements
        session.loop.notifier = announcements.append
        session.start(MovementMode(request.mode.value))

        self._sources[session.session_id] = source
        return self._session_to_response(session)

    def get_session(self, session_id: str) -> SessionResponse:
        return self._session_to_response(self.session_manager.require_session(session_id))

    def end_session(self, session_id: str) -> bool:
        self._sources.pop(session_id, None)
        return self.session_manager.end_session(session_id)

    def list_sessions(self) -> list[str]:
        return self.session_manager.list_active_sessions()

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> int:
        """End stale sessions and drop their position sources."""
        ended = self.session_manager.cleanup_stale_sessions(max_age_seconds)
        for session_id in list(self._sources):
            if self.session_manager.get_session(session_id) is None:
                del self._sources[session_id]
        return ended

    # =========================================================================
    # Game Loop
    # =========================================================================

    def get_game_state(self, session_id: str) -> GameStateResponse:
        """The current frame: visible cells and player status."""
        session = self.session_manager.require_session(session_id)
        loop = session.loop
        frame = loop.last_frame or loop.frame()
        cell_range = frame.cell_range
        return GameStateResponse(
            session_id=session_id,
            player=self._player_info(session),
            status_text=status_text(frame),
            i_min=cell_range.i_min,
            i_max=cell_range.i_max,
            j_min=cell_range.j_min,
            j_max=cell_range.j_max,
            cells=[
                CellInfo(
                    i=cell.coord.i,
                    j=cell.coord.j,
                    value=cell.value,
                    in_reach=cell.in_reach,
                    overridden=cell.overridden,
                )
                for cell in frame.cells
            ],
            overlay_size=len(session.game_state.overlay),
            evicted=frame.evicted,
        )

    def interact(self, session_id: str, i: int, j: int) -> ActionResponse:
        """Click on cell (i, j)."""
        session = self.session_manager.require_session(session_id)
        result = session.loop.interact(CellCoordinate(i, j))
        return self._action_to_response(session, result)

    def move(self, session_id: str, direction: str) -> ActionResponse:
        """One discrete step. Only valid in step mode."""
        session = self.session_manager.require_session(session_id)
        parsed = parse_direction(direction)
        if parsed is None:
            return self._error_response(
                session, f"Unknown direction: {direction}", ErrorCode.VALIDATION_ERROR
            )
        if session.loop.mode != MovementMode.STEP:
            return self._error_response(
                session, "Discrete steps are only accepted in step mode", ErrorCode.WRONG_MODE
            )
        result = session.loop.step(parsed)
        return self._action_to_response(session, result)

    def push_position(self, session_id: str, lat: float, lng: float) -> ActionResponse:
        """A location fix from the client. Only valid in feed mode."""
        session = self.session_manager.require_session(session_id)
        if session.loop.mode != MovementMode.FEED:
            return self._error_response(
                session, "Position fixes are only accepted in feed mode", ErrorCode.WRONG_MODE
            )
        source = self._sources[session_id]
        session.loop.last_result = None
        source.push(lat, lng)
        result = session.loop.last_result
        if result is None:
            return self._error_response(session, "Fix was not delivered", ErrorCode.INTERNAL_ERROR)
        return self._action_to_response(session, result)

    def switch_mode(self, session_id: str, mode: MovementModeName) -> ModeResponse:
        session = self.session_manager.require_session(session_id)
        result = session.loop.switch_mode(MovementMode(mode.value))
        current = session.loop.mode
        return ModeResponse(
            success=result.success,
            mode=MovementModeName(current.value) if current else None,
            error=result.error,
        )

    def health(self) -> HealthResponse:
        return HealthResponse(status="healthy", service="cellmerge", version=__version__)

    # =========================================================================
    # Conversion Helpers
    # =========================================================================

    def _player_info(self, session: Session) -> PlayerInfo:
        state = session.game_state
        cell = state.player_cell
        return PlayerInfo(
            lat=state.player.position.lat,
            lng=state.player.position.lng,
            i=cell.i,
            j=cell.j,
            held_value=state.player.held_value,
            has_won=state.player.has_won,
        )

    def _session_to_response(self, session: Session) -> SessionResponse:
        mode = session.loop.mode
        start_result = session.start_result
        return SessionResponse(
            session_id=session.session_id,
            status=SessionStatus(session.state.value),
            mode=MovementModeName(mode.value) if mode else None,
            origin_scheme=OriginSchemeName(session.config.grid.scheme.value),
            cell_size=session.config.grid.cell_size,
            interact_steps=session.config.interact_steps,
            win_target=session.config.win_target,
            created_at=session.created_at,
            player=self._player_info(session),
            start_error=start_result.error if start_result else None,
        )

    def _action_to_response(self, session: Session, result: ActionResult | None) -> ActionResponse:
        if result is None:
            return self._error_response(session, "Input ignored", ErrorCode.WRONG_MODE)

        win_text = None
        if result.won:
            announcements = session.metadata.get("announcements") or []
            win_text = announcements[-1] if announcements else None

        return ActionResponse(
            success=result.success,
            outcome=result.outcome.value if result.outcome else None,
            changed=result.changed,
            won=result.won,
            win_message=win_text,
            player=self._player_info(session),
            state_changes=result.state_changes,
            error=result.error,
            error_code=ErrorCode(result.error_code) if result.error_code in ErrorCode.__members__ else None,
        )

    def _error_response(self, session: Session, message: str, code: ErrorCode) -> ActionResponse:
        return ActionResponse(
            success=False,
            player=self._player_info(session),
            error=message,
            error_code=code,
        )
