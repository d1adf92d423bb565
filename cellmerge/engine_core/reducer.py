"""
Reducer - Applies actions to game state.

The reducer is the single point of gameplay mutation.
All interactions and position updates go through apply().

The pick-up/merge machine:
- Idle + click on a nonzero cell   -> Holding(v), cell overridden to 0
- Holding(v) + click on a v cell   -> Idle, cell overridden to 2v
- anything else                    -> unchanged
- clicks beyond interact_steps     -> ignored entirely

The win check runs only on Idle -> Holding. has_won never resets.
"""

from __future__ import annotations
from dataclasses import dataclass
import logging

from .state import GameState
from .action import Action, ActionType, ActionResult, Outcome
from .generator import EMPTY
from .grid import LatLng

logger = logging.getLogger(__name__)

DEFAULT_INTERACT_STEPS = 3
DEFAULT_WIN_TARGET = 32


def validate_position(position: LatLng) -> str | None:
    """
    Check that a position is usable.

    Returns error message if invalid, None if valid.
    """
    if not position.is_finite():
        return f"Position is not finite: ({position.lat}, {position.lng})"
    if not -90.0 <= position.lat <= 90.0:
        return f"Latitude out of range: {position.lat}"
    if not -180.0 <= position.lng <= 180.0:
        return f"Longitude out of range: {position.lng}"
    return None


@dataclass
class Reducer:
    """
    Reducer applies actions to game state.

    Stateless - all state is in GameState.
    The rule parameters live here.
    """
    interact_steps: int = DEFAULT_INTERACT_STEPS
    win_target: int = DEFAULT_WIN_TARGET
    max_jump_cells: int | None = None

    def apply(self, state: GameState, action: Action) -> ActionResult:
        """
        Apply an action to the game state.

        Returns ActionResult describing what happened.
        """
        handler = self._get_handler(action.action_type)
        if not handler:
            return ActionResult.failure(
                f"No handler for action type: {action.action_type}",
                error_code="NO_HANDLER",
            )
        result = handler(state, action)
        for change in result.state_changes:
            logger.debug(change)
        return result

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.INTERACT: self._handle_interact,
            ActionType.MOVE_TO: self._handle_move_to,
        }
        return handlers.get(action_type)

    def _handle_interact(self, state: GameState, action: Action) -> ActionResult:
        """Handle a click on a cell."""
        coord = action.coord
        if coord is None:
            return ActionResult.failure("Interact action has no cell", error_code="INVALID_ACTION")

        player = state.player

        # Out of reach: silently ignored, not an error
        if not state.in_reach(coord, self.interact_steps):
            return ActionResult.unchanged(Outcome.OUT_OF_RANGE, player.held_value)

        value = state.effective_value(coord)

        if player.held_value is None:
            if value <= EMPTY:
                return ActionResult.unchanged(Outcome.EMPTY_CELL, None)

            state.overlay.set_value(coord, EMPTY)
            player.held_value = value
            state.best_value = max(state.best_value, value)
            changes = [f"Picked up {value} from {coord}"]

            won = False
            if not player.has_won and value >= self.win_target:
                player.has_won = True
                won = True
                changes.append(f"Reached {value}, win target is {self.win_target}")

            return ActionResult.applied(Outcome.PICKED_UP, value, changes, won=won)

        held = player.held_value
        if held > EMPTY and value == held:
            merged = held * 2
            state.overlay.set_value(coord, merged)
            player.held_value = None
            state.merges += 1
            state.best_value = max(state.best_value, merged)
            return ActionResult.applied(
                Outcome.MERGED,
                None,
                [f"Merged {held} into {coord}, now {merged}"],
            )

        # Empty or different value: keep holding
        return ActionResult.unchanged(Outcome.MISMATCH, held)

    def _handle_move_to(self, state: GameState, action: Action) -> ActionResult:
        """Handle an absolute position update."""
        position = action.position
        player = state.player
        if position is None:
            return ActionResult.failure("Move action has no position", error_code="INVALID_ACTION")

        error = validate_position(position)
        if error:
            return ActionResult.failure(error, error_code="INVALID_POSITION")

        new_cell = state.mapper.to_cell(position)
        if self.max_jump_cells is not None:
            jump = state.player_cell.chebyshev(new_cell)
            if jump > self.max_jump_cells:
                return ActionResult.failure(
                    f"Position jumped {jump} cells (limit {self.max_jump_cells})",
                    error_code="INVALID_POSITION",
                )

        old_cell = state.player_cell
        player.position = position
        changes = []
        if new_cell != old_cell:
            changes.append(f"Player moved {old_cell} -> {new_cell}")
        return ActionResult.applied(Outcome.MOVED, player.held_value, changes)


def apply_action(state: GameState, action: Action, reducer: Reducer | None = None) -> ActionResult:
    """
    Convenience function to apply an action.

    Uses default rules unless a reducer is given.
    """
    reducer = reducer or Reducer()
    return reducer.apply(state, action)
