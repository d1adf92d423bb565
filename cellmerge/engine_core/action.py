"""
Action System - Actions, outcomes, and results.

Actions represent:
1. Interactions (a click on a cell)
2. Position updates (from either movement controller)

All state changes flow through actions, and every action comes back
as an ActionResult. Ignored clicks and mismatched merges are normal
outcomes, not failures.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum

from .grid import CellCoordinate, LatLng


class ActionType(Enum):
    """Types of actions in the system."""
    INTERACT = "interact"
    MOVE_TO = "move_to"


class Outcome(Enum):
    """What an action actually did."""
    # Interactions
    PICKED_UP = "picked_up"
    MERGED = "merged"
    OUT_OF_RANGE = "out_of_range"
    EMPTY_CELL = "empty_cell"
    MISMATCH = "mismatch"

    # Position updates
    MOVED = "moved"
    REJECTED = "rejected"


@dataclass
class Action:
    """
    A complete action to be applied to the game state.

    Exactly one of `coord` (INTERACT) or `position` (MOVE_TO) is set.
    """
    action_type: ActionType
    coord: CellCoordinate | None = None
    position: LatLng | None = None
    source: str | None = None  # "step", "feed", "api", ...

    @classmethod
    def interact(cls, coord: CellCoordinate) -> Action:
        """Factory for a click on a cell."""
        return cls(action_type=ActionType.INTERACT, coord=coord)

    @classmethod
    def move_to(cls, lat: float, lng: float, source: str | None = None) -> Action:
        """Factory for an absolute position update."""
        return cls(
            action_type=ActionType.MOVE_TO,
            position=LatLng(lat, lng),
            source=source,
        )


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether the action was accepted
    - What it did (outcome) and whether state changed
    - Whether this action won the game (fires the notification once)
    - Human-readable changes, for logs and the HUD
    """
    success: bool
    outcome: Outcome | None = None
    changed: bool = False
    won: bool = False
    held_value: int | None = None
    error: str | None = None
    error_code: str | None = None
    state_changes: list[str] = field(default_factory=list)

    @classmethod
    def failure(cls, error: str, error_code: str | None = None) -> ActionResult:
        """Create a failure result. Nothing changed."""
        return cls(
            success=False,
            outcome=Outcome.REJECTED,
            error=error,
            error_code=error_code,
        )

    @classmethod
    def unchanged(cls, outcome: Outcome, held_value: int | None) -> ActionResult:
        """Accepted, but a no-op."""
        return cls(success=True, outcome=outcome, held_value=held_value)

    @classmethod
    def applied(
        cls,
        outcome: Outcome,
        held_value: int | None,
        changes: list[str] | None = None,
        won: bool = False,
    ) -> ActionResult:
        """Accepted, and state changed."""
        return cls(
            success=True,
            outcome=outcome,
            changed=True,
            won=won,
            held_value=held_value,
            state_changes=changes or [],
        )
