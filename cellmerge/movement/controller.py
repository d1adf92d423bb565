"""
Movement Controllers - Where player position updates come from.

Two implementations share one start/stop contract:
- DiscreteStepController: direction inputs, one cell per input
- ContinuousFeedController: absolute positions from an external source

Both funnel into a single apply_position(lat, lng) callback supplied by
the game loop. Controllers are passive subscriptions, not threads.

Contract:
- start() while started is a no-op
- stop() while stopped is a no-op
- start() on an unavailable source reports failure, subscribes nothing
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable
import logging

from ..engine_core.grid import Direction, GridMapper, LatLng
from .sources import PositionSource

logger = logging.getLogger(__name__)

ApplyPosition = Callable[[float, float], Any]


class MovementMode(Enum):
    """Which kind of controller drives the player."""
    STEP = "step"
    FEED = "feed"


@dataclass
class StartResult:
    """Outcome of start(). A failed start leaves the controller stopped."""
    success: bool
    error: str | None = None
    already_active: bool = False

    @classmethod
    def ok(cls, already_active: bool = False) -> StartResult:
        return cls(success=True, already_active=already_active)

    @classmethod
    def unavailable(cls, error: str) -> StartResult:
        return cls(success=False, error=error)


class MovementController(ABC):
    """
    Base class for movement controllers.

    Subclasses implement _activate/_deactivate; the base class handles
    the idempotency rules.
    """

    mode: MovementMode

    def __init__(self, apply_position: ApplyPosition):
        self._apply_position = apply_position
        self._active = False

    @property
    def is_active(self) -> bool:
        return self._active

    def start(self) -> StartResult:
        """Begin producing position updates."""
        if self._active:
            return StartResult.ok(already_active=True)
        result = self._activate()
        if result.success:
            self._active = True
            logger.debug("%s controller started", self.mode.value)
        return result

    def stop(self):
        """Cease producing position updates."""
        if not self._active:
            return
        self._deactivate()
        self._active = False
        logger.debug("%s controller stopped", self.mode.value)

    @abstractmethod
    def _activate(self) -> StartResult:
        ...

    @abstractmethod
    def _deactivate(self):
        ...


# Keys and button labels accepted by the step controller
KEY_BINDINGS: dict[str, Direction] = {
    "w": Direction.NORTH,
    "s": Direction.SOUTH,
    "d": Direction.EAST,
    "a": Direction.WEST,
    "arrowup": Direction.NORTH,
    "arrowdown": Direction.SOUTH,
    "arrowright": Direction.EAST,
    "arrowleft": Direction.WEST,
    "up": Direction.NORTH,
    "down": Direction.SOUTH,
    "right": Direction.EAST,
    "left": Direction.WEST,
    "north": Direction.NORTH,
    "south": Direction.SOUTH,
    "east": Direction.EAST,
    "west": Direction.WEST,
}


def parse_direction(key: str) -> Direction | None:
    """Map a key name or button label to a direction (case-insensitive)."""
    return KEY_BINDINGS.get(key.strip().lower())


class DiscreteStepController(MovementController):
    """
    Moves the player one cell per directional input.

    No diagonals, no acceleration. Inputs while stopped are dropped.
    """

    mode = MovementMode.STEP

    def __init__(
        self,
        mapper: GridMapper,
        current_position: Callable[[], LatLng],
        apply_position: ApplyPosition,
    ):
        super().__init__(apply_position)
        self.mapper = mapper
        self._current_position = current_position

    def _activate(self) -> StartResult:
        return StartResult.ok()

    def _deactivate(self):
        pass

    def press(self, direction: Direction) -> Any:
        """
        Handle one directional input.

        Returns whatever apply_position returns, or None if stopped.
        """
        if not self._active:
            logger.debug("Ignoring %s input, step controller is stopped", direction.value)
            return None
        target = self.mapper.step(self._current_position(), direction)
        return self._apply_position(target.lat, target.lng)

    def press_key(self, key: str) -> Any:
        """Handle a key/button by name. Unknown keys are ignored."""
        direction = parse_direction(key)
        if direction is None:
            return None
        return self.press(direction)


class ContinuousFeedController(MovementController):
    """
    Follows an external absolute-position stream.

    Each update replaces the player position outright.
    A stalled source simply produces no updates.
    """

    mode = MovementMode.FEED

    def __init__(self, source: PositionSource, apply_position: ApplyPosition):
        super().__init__(apply_position)
        self.source = source
        self._unsubscribe: Callable[[], None] | None = None

    def _activate(self) -> StartResult:
        if not self.source.is_available():
            logger.warning("Position source %s is unavailable", self.source.name)
            return StartResult.unavailable(f"Position source '{self.source.name}' is unavailable")
        self._unsubscribe = self.source.subscribe(self._on_position)
        return StartResult.ok()

    def _deactivate(self):
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_position(self, lat: float, lng: float):
        self._apply_position(lat, lng)
