"""
Engine Core - Deterministic grid and game state management.

The engine is the runtime that:
1. Quantizes positions into cells (GridMapper)
2. Generates base token values per cell (TokenGenerator)
3. Layers player changes on top (OverlayStore)
4. Applies interactions and moves via the reducer
5. Answers which cells are visible (Viewport)
"""

from .grid import (
    CellCoordinate,
    LatLng,
    Bounds,
    Direction,
    GridConfig,
    GridMapper,
    OriginScheme,
    CLASSROOM,
    NULL_ISLAND,
)
from .generator import TokenGenerator, SpawnTable, SpawnBand, luck, EMPTY
from .overlay import OverlayStore
from .viewport import CellRange, Viewport, visible_cells
from .state import GameState, PlayerState, HoldState
from .action import Action, ActionType, ActionResult, Outcome
from .reducer import Reducer, apply_action, validate_position

__all__ = [
    "CellCoordinate",
    "LatLng",
    "Bounds",
    "Direction",
    "GridConfig",
    "GridMapper",
    "OriginScheme",
    "CLASSROOM",
    "NULL_ISLAND",
    "TokenGenerator",
    "SpawnTable",
    "SpawnBand",
    "luck",
    "EMPTY",
    "OverlayStore",
    "CellRange",
    "Viewport",
    "visible_cells",
    "GameState",
    "PlayerState",
    "HoldState",
    "Action",
    "ActionType",
    "ActionResult",
    "Outcome",
    "Reducer",
    "apply_action",
    "validate_position",
]
