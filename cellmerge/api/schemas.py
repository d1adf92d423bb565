"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between a map client and the engine.
The client renders; the engine decides.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has ended
- INVALID_POSITION: Position is not finite, out of range, or jumped too far
- SOURCE_UNAVAILABLE: The location feed cannot be started on this client
- WRONG_MODE: Input does not match the active movement mode
- VALIDATION_ERROR: Malformed request
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class SessionStatus(str, Enum):
    """Session status values."""
    CREATED = "created"
    ACTIVE = "active"
    ENDED = "ended"


class MovementModeName(str, Enum):
    """Movement modes a client can select."""
    STEP = "step"
    FEED = "feed"


class OriginSchemeName(str, Enum):
    """Grid origin schemes."""
    LOCAL = "local"
    GLOBAL = "global"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    INVALID_POSITION = "INVALID_POSITION"
    SOURCE_UNAVAILABLE = "SOURCE_UNAVAILABLE"
    WRONG_MODE = "WRONG_MODE"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class PlayerInfo(BaseModel):
    """Player position and hand."""
    lat: float
    lng: float
    i: int
    j: int
    held_value: Optional[int] = None
    has_won: bool = False


class CellInfo(BaseModel):
    """One visible cell."""
    i: int
    j: int
    value: int = Field(description="Effective value; 0 is empty")
    in_reach: bool = False
    overridden: bool = Field(False, description="True if the value differs from the generated one")


# =============================================================================
# Request Models
# =============================================================================

class CreateSessionRequest(BaseModel):
    """
    Request to create a new game session.

    POST /api/v1/sessions
    """
    origin_scheme: OriginSchemeName = OriginSchemeName.LOCAL
    lat: Optional[float] = Field(None, description="Starting latitude (defaults to the classroom)")
    lng: Optional[float] = Field(None, description="Starting longitude")
    seed: str = ""
    mode: MovementModeName = MovementModeName.STEP
    location_available: bool = Field(True, description="Whether this client can feed positions")
    evict_offscreen: Optional[bool] = None


class InteractRequest(BaseModel):
    """
    Click on a cell.

    POST /api/v1/sessions/{session_id}/interact
    """
    i: int
    j: int


class MoveRequest(BaseModel):
    """
    One discrete step.

    POST /api/v1/sessions/{session_id}/move
    """
    direction: str = Field(description="north/south/east/west, or a key name like 'w' or 'ArrowUp'")


class PositionRequest(BaseModel):
    """
    A fix from the client's location feed.

    POST /api/v1/sessions/{session_id}/position
    """
    lat: float
    lng: float


class ModeRequest(BaseModel):
    """
    Switch movement mode.

    POST /api/v1/sessions/{session_id}/mode
    """
    mode: MovementModeName


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Error response for any 4xx or 5xx status."""
    error: str
    error_code: ErrorCode
    details: Optional[dict] = None


class SessionResponse(BaseModel):
    """Session information."""
    session_id: str
    status: SessionStatus
    mode: Optional[MovementModeName] = None
    origin_scheme: OriginSchemeName
    cell_size: float
    interact_steps: int
    win_target: int
    created_at: float = 0.0
    player: PlayerInfo
    start_error: Optional[str] = None


class GameStateResponse(BaseModel):
    """What to draw: the visible cells plus player status."""
    session_id: str
    player: PlayerInfo
    status_text: str
    i_min: int
    i_max: int
    j_min: int
    j_max: int
    cells: list[CellInfo] = Field(default_factory=list)
    overlay_size: int = 0
    evicted: int = 0


class ActionResponse(BaseModel):
    """Result of an interaction or a movement input."""
    success: bool
    outcome: Optional[str] = None
    changed: bool = False
    won: bool = False
    win_message: Optional[str] = None
    player: PlayerInfo
    state_changes: list[str] = Field(default_factory=list)
    error: Optional[str] = None
    error_code: Optional[ErrorCode] = None


class ModeResponse(BaseModel):
    """Result of a mode switch."""
    success: bool
    mode: Optional[MovementModeName] = None
    error: Optional[str] = None


class SessionListResponse(BaseModel):
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    success: bool
    session_id: str


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
