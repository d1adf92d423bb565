"""
Game Loop - Wires the engine to its collaborators.

The loop owns, for one session:
- The GameState and the reducer
- The viewport that follows the player
- The movement selector (step / feed controllers)
- The renderer and the win notifier

Every state-affecting event ends with redraw():
1. Recompute the visible cell range around the player
2. Evict off-screen overlay entries (if enabled)
3. Build a Frame and hand it to the renderer

Everything runs synchronously on the caller's thread; nothing here
blocks or schedules work.
"""

from __future__ import annotations
from enum import Enum
from typing import Callable
import logging

from ..config import GameConfig
from ..errors import SessionNotStartedError
from ..engine_core.action import Action, ActionResult
from ..engine_core.generator import TokenGenerator
from ..engine_core.grid import CellCoordinate, Direction, GridMapper, LatLng
from ..engine_core.overlay import OverlayStore
from ..engine_core.reducer import Reducer
from ..engine_core.state import GameState, PlayerState
from ..engine_core.viewport import Viewport
from ..movement import (
    ContinuousFeedController,
    DiscreteStepController,
    MovementMode,
    MovementSelector,
    PositionSource,
    PushPositionSource,
    StartResult,
)
from ..render import CellView, Frame, NullRenderer, Renderer, win_message

logger = logging.getLogger(__name__)

WinNotifier = Callable[[str], None]


class LoopState(Enum):
    """State of the game loop."""
    CREATED = "created"
    RUNNING = "running"
    STOPPED = "stopped"


class GameLoop:
    """
    The main game loop driver.

    Usage:
        loop = GameLoop(state, config, renderer=my_renderer)
        loop.start()                       # step mode by default

        loop.step(Direction.NORTH)         # key/button input
        loop.interact(CellCoordinate(1, 0))

        loop.switch_mode(MovementMode.FEED)
        source.push(36.99, -122.05)        # external fix
    """

    def __init__(
        self,
        state: GameState,
        config: GameConfig | None = None,
        renderer: Renderer | None = None,
        notifier: WinNotifier | None = None,
        position_source: PositionSource | None = None,
    ):
        self.state = state
        self.config = config or GameConfig(grid=state.mapper.config)
        self.reducer = Reducer(
            interact_steps=self.config.interact_steps,
            win_target=self.config.win_target,
            max_jump_cells=self.config.max_jump_cells,
        )
        self.viewport = Viewport(
            mapper=state.mapper,
            center=state.player.position,
            radius_cells=self.config.viewport_radius,
            padding_cells=self.config.viewport_padding,
        )
        self.renderer = renderer or NullRenderer()
        self.notifier = notifier
        self.position_source = position_source or PushPositionSource(name="push")

        self.step_controller = DiscreteStepController(
            mapper=state.mapper,
            current_position=lambda: self.state.player.position,
            apply_position=self.apply_player_position,
        )
        self.feed_controller = ContinuousFeedController(
            source=self.position_source,
            apply_position=self.apply_player_position,
        )
        self.movement = MovementSelector([self.step_controller, self.feed_controller])

        self.loop_state = LoopState.CREATED
        self.win_announcements = 0
        self.last_frame: Frame | None = None
        self.last_result: ActionResult | None = None

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @property
    def is_running(self) -> bool:
        return self.loop_state == LoopState.RUNNING

    def start(self, mode: MovementMode = MovementMode.STEP) -> StartResult:
        """
        Start the session in a movement mode and draw the first frame.

        If the requested mode cannot start, the loop still runs, with
        no controller active, and the failure is returned.
        """
        if self.loop_state == LoopState.STOPPED:
            raise SessionNotStartedError("Game loop was stopped and cannot be restarted")
        self.loop_state = LoopState.RUNNING
        result = self.movement.switch(mode)
        self.redraw()
        return result

    def stop(self):
        """Cancel the active movement subscription."""
        self.movement.stop()
        self.loop_state = LoopState.STOPPED

    def _require_running(self, operation: str):
        if self.loop_state != LoopState.RUNNING:
            raise SessionNotStartedError(
                f"Cannot {operation}: game loop is {self.loop_state.value}"
            )

    # =========================================================================
    # Inputs
    # =========================================================================

    def interact(self, coord: CellCoordinate) -> ActionResult:
        """Click on a cell. Redraws if anything changed."""
        self._require_running("interact")
        result = self.reducer.apply(self.state, Action.interact(coord))
        self.last_result = result

        if result.won:
            self._announce_win(result.held_value)
        if result.changed:
            self.redraw(changes=result.state_changes)
        return result

    def apply_player_position(self, lat: float, lng: float) -> ActionResult:
        """
        Single funnel for every position update.

        Updates the player, recenters the viewport, redraws.
        Invalid positions are rejected and leave everything unchanged.
        """
        self._require_running("move")
        result = self.reducer.apply(self.state, Action.move_to(lat, lng))
        self.last_result = result
        if not result.success:
            logger.warning("Rejected position update (%s, %s): %s", lat, lng, result.error)
            return result

        self.viewport.recenter(self.state.player.position)
        self.redraw(changes=result.state_changes)
        return result

    def step(self, direction: Direction) -> ActionResult | None:
        """
        Directional input. Only has an effect in step mode.

        Returns None when the step controller is not the active one.
        """
        self._require_running("step")
        return self.step_controller.press(direction)

    def press_key(self, key: str) -> ActionResult | None:
        self._require_running("step")
        return self.step_controller.press_key(key)

    def switch_mode(self, mode: MovementMode) -> StartResult:
        self._require_running("switch movement mode")
        return self.movement.switch(mode)

    @property
    def mode(self) -> MovementMode | None:
        return self.movement.current_mode

    # =========================================================================
    # Presentation
    # =========================================================================

    def frame(self, evicted: int = 0, changes: list[str] | None = None) -> Frame:
        """Snapshot of what should be on screen right now."""
        cell_range = self.viewport.visible_cells()
        player_cell = self.state.player_cell
        steps = self.config.interact_steps
        overlay = self.state.overlay

        cells = [
            CellView(
                coord=coord,
                value=overlay.effective_value(coord),
                in_reach=player_cell.chebyshev(coord) <= steps,
                overridden=coord in overlay,
            )
            for coord in cell_range
        ]
        return Frame(
            cell_range=cell_range,
            cells=cells,
            player_position=self.state.player.position,
            player_cell=player_cell,
            held_value=self.state.player.held_value,
            has_won=self.state.player.has_won,
            win_target=self.config.win_target,
            best_value=self.state.best_value,
            evicted=evicted,
            changes=changes or [],
        )

    def redraw(self, changes: list[str] | None = None) -> Frame:
        """Recompute the visible range, evict if enabled, render."""
        evicted = 0
        if self.config.evict_offscreen:
            evicted = self.state.overlay.evict_outside(self.viewport.visible_cells())
            if evicted:
                logger.debug("Evicted %d off-screen overlay entries", evicted)

        frame = self.frame(evicted=evicted, changes=changes)
        self.last_frame = frame
        self.renderer.redraw(frame)
        return frame

    def _announce_win(self, value: int | None):
        # The reducer only reports a win once; this guards the notifier too
        if self.win_announcements:
            return
        self.win_announcements += 1
        logger.info("Win: reached %s (target %s)", value, self.config.win_target)
        if self.notifier:
            self.notifier(win_message(value or 0, self.config.win_target))


def new_game_state(config: GameConfig, start: LatLng) -> GameState:
    """Build a fresh GameState for a config and starting position."""
    generator = TokenGenerator(table=config.spawn_table, seed=config.seed)
    return GameState(
        mapper=GridMapper(config.grid),
        player=PlayerState(position=start),
        overlay=OverlayStore(generator=generator),
    )
