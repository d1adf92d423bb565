"""
FastAPI Application - REST API for map clients.

Endpoints:
    POST   /api/v1/sessions                  Create game session
    GET    /api/v1/sessions                  List active sessions
    GET    /api/v1/sessions/{id}             Get session status
    DELETE /api/v1/sessions/{id}             End session
    GET    /api/v1/sessions/{id}/state       Visible cells + player status
    POST   /api/v1/sessions/{id}/interact    Click on a cell
    POST   /api/v1/sessions/{id}/move        Discrete step (step mode)
    POST   /api/v1/sessions/{id}/position    Location fix (feed mode)
    POST   /api/v1/sessions/{id}/mode        Switch movement mode

Clicks out of reach and mismatched merges are NOT errors: they return
200 with changed=false. Errors are reserved for unknown sessions, bad
positions, and inputs that do not match the active movement mode.
"""

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import GameConfig
from ..errors import ConfigError, InvalidPositionError, SessionNotFoundError
from .service import APIService
from .schemas import (
    ActionResponse,
    CreateSessionRequest,
    EndSessionResponse,
    ErrorCode,
    ErrorResponse,
    GameStateResponse,
    HealthResponse,
    InteractRequest,
    ModeRequest,
    ModeResponse,
    MoveRequest,
    PositionRequest,
    SessionListResponse,
    SessionResponse,
)

logger = logging.getLogger(__name__)

# Environment configuration
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

# HTTP status for each failure code of an action
_ACTION_ERROR_STATUS = {
    ErrorCode.INVALID_POSITION: 422,
    ErrorCode.VALIDATION_ERROR: 422,
    ErrorCode.WRONG_MODE: 409,
    ErrorCode.SOURCE_UNAVAILABLE: 409,
    ErrorCode.INTERNAL_ERROR: 500,
}


def create_app(service: APIService | None = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (built from the environment if not provided)

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="Cellmerge Engine API",
        description="""
Location-grid merge game. The map is split into cells; each cell holds a
deterministic token. Walk around, pick a token up, and drop it on an equal
token nearby to merge them.

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `INVALID_POSITION` | Position not finite / out of range / jumped too far |
| `SOURCE_UNAVAILABLE` | Location feed cannot start on this client |
| `WRONG_MODE` | Input does not match the active movement mode |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or APIService(config=GameConfig.from_env())

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: dict | None = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def action_response(response: ActionResponse):
        if response.success or response.error_code is None:
            return response
        return JSONResponse(
            status_code=_ACTION_ERROR_STATUS.get(response.error_code, 400),
            content=response.model_dump(mode="json"),
        )

    @app.exception_handler(SessionNotFoundError)
    async def session_not_found(request, exc: SessionNotFoundError):
        return make_error_response(ErrorCode.SESSION_NOT_FOUND, str(exc), status_code=404)

    @app.exception_handler(ConfigError)
    async def config_error(request, exc: ConfigError):
        return make_error_response(ErrorCode.VALIDATION_ERROR, str(exc), status_code=422)

    @app.exception_handler(InvalidPositionError)
    async def invalid_position(request, exc: InvalidPositionError):
        return make_error_response(ErrorCode.INVALID_POSITION, str(exc), status_code=422)

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        responses={422: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Create a new game session",
    )
    async def create_session(body: CreateSessionRequest) -> SessionResponse:
        """
        Create and start a session.

        If `mode=feed` but `location_available=false`, the session is
        still created; `mode` comes back null and `start_error` says why.
        """
        return api_service.create_session(body)

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List active sessions",
    )
    async def list_sessions() -> SessionListResponse:
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get session status",
    )
    async def get_session(session_id: str) -> SessionResponse:
        return api_service.get_session(session_id)

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a game session",
    )
    async def end_session(session_id: str) -> EndSessionResponse:
        """End a session and discard its state."""
        success = api_service.end_session(session_id)
        return EndSessionResponse(success=success, session_id=session_id)

    # =========================================================================
    # Game Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/sessions/{session_id}/state",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Visible cells and player status",
    )
    async def get_state(session_id: str) -> GameStateResponse:
        return api_service.get_game_state(session_id)

    @app.post(
        "/api/v1/sessions/{session_id}/interact",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Click on a cell",
    )
    async def interact(session_id: str, body: InteractRequest):
        """
        Pick up, merge, or nothing.

        Cells out of reach are ignored (`outcome=out_of_range`).
        """
        return action_response(api_service.interact(session_id, body.i, body.j))

    @app.post(
        "/api/v1/sessions/{session_id}/move",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ActionResponse}},
        tags=["Movement"],
        summary="Take one step",
    )
    async def move(session_id: str, body: MoveRequest):
        return action_response(api_service.move(session_id, body.direction))

    @app.post(
        "/api/v1/sessions/{session_id}/position",
        response_model=ActionResponse,
        responses={
            404: {"model": ErrorResponse},
            409: {"model": ActionResponse},
            422: {"model": ActionResponse},
        },
        tags=["Movement"],
        summary="Report a location fix",
    )
    async def position(session_id: str, body: PositionRequest):
        """Replace the player position. Rejected fixes leave it unchanged."""
        return action_response(api_service.push_position(session_id, body.lat, body.lng))

    @app.post(
        "/api/v1/sessions/{session_id}/mode",
        response_model=ModeResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Movement"],
        summary="Switch movement mode",
    )
    async def switch_mode(session_id: str, body: ModeRequest):
        """On failure the previous mode stays active."""
        response = api_service.switch_mode(session_id, body.mode)
        if not response.success:
            return make_error_response(
                ErrorCode.SOURCE_UNAVAILABLE,
                response.error or "Could not switch mode",
                status_code=409,
                details={"mode": response.mode.value if response.mode else None},
            )
        return response

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        return api_service.health()

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Cellmerge Engine API",
            "version": __version__,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app


# For running directly: uvicorn cellmerge.api.app:app
app = create_app()
