"""
Movement Selector - Keeps exactly one controller active.

Switching modes always stops the current controller before starting
the next. If the next one cannot start (e.g. no location support),
the previous controller is restarted and the failure is reported.
If the restart fails as well, no mode is left selected.
"""

from __future__ import annotations
import logging

from .controller import MovementController, MovementMode, StartResult

logger = logging.getLogger(__name__)


class MovementSelector:
    """
    Small state machine over the available controllers.

    Usage:
        selector = MovementSelector([step_controller, feed_controller])
        selector.switch(MovementMode.STEP)
        result = selector.switch(MovementMode.FEED)
        if not result.success:
            show_error(result.error)  # still in STEP mode
    """

    def __init__(self, controllers: list[MovementController]):
        self._controllers: dict[MovementMode, MovementController] = {
            c.mode: c for c in controllers
        }
        self.current_mode: MovementMode | None = None

    @property
    def active(self) -> MovementController | None:
        if self.current_mode is None:
            return None
        return self._controllers[self.current_mode]

    def switch(self, mode: MovementMode) -> StartResult:
        """
        Make `mode` the active controller.

        Switching to the current mode is a no-op.
        """
        target = self._controllers.get(mode)
        if target is None:
            return StartResult.unavailable(f"No controller for mode '{mode.value}'")

        if mode == self.current_mode:
            return target.start()

        previous = self.active
        if previous:
            previous.stop()

        result = target.start()
        if result.success:
            logger.info("Movement mode: %s", mode.value)
            self.current_mode = mode
            return result

        # Fall back to whatever was running before
        logger.warning("Could not switch to %s: %s", mode.value, result.error)
        if previous and not previous.start().success:
            logger.warning("Could not restore %s; no movement mode is active", previous.mode.value)
            self.current_mode = None
        return result

    def stop(self):
        """Stop the active controller, leaving no mode selected."""
        if self.active:
            self.active.stop()
        self.current_mode = None
