"""
Game State - The session aggregate the engine operates on.

One GameState per session:
- Player position, held token, win flag
- The overlay store (which owns the generator)

Unlike a replayable board game, this state is mutated in place:
it is created once at startup and lives for the whole session.
Several GameStates can coexist in one process without interference.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum

from .grid import CellCoordinate, GridMapper, LatLng
from .overlay import OverlayStore


class HoldState(Enum):
    """The two states of the pick-up/merge machine."""
    IDLE = "idle"
    HOLDING = "holding"


@dataclass
class PlayerState:
    """
    The single player.

    has_won is monotonic: once True it is never reset.
    """
    position: LatLng
    held_value: int | None = None
    has_won: bool = False

    @property
    def hold_state(self) -> HoldState:
        if self.held_value is None:
            return HoldState.IDLE
        return HoldState.HOLDING


@dataclass
class GameState:
    """
    Complete game state for one session.

    All mutation goes through the reducer (interactions) or the game
    loop (position updates).
    """
    mapper: GridMapper
    player: PlayerState
    overlay: OverlayStore = field(default_factory=OverlayStore)

    # Counters, for the HUD
    merges: int = 0
    best_value: int = 0

    @property
    def player_cell(self) -> CellCoordinate:
        return self.mapper.to_cell(self.player.position)

    def effective_value(self, coord: CellCoordinate) -> int:
        return self.overlay.effective_value(coord)

    def in_reach(self, coord: CellCoordinate, steps: int) -> bool:
        """True when coord is within `steps` Chebyshev distance of the player."""
        return self.player_cell.chebyshev(coord) <= steps
