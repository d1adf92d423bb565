"""
Movement Module - Pluggable sources of player position.

- Discrete steps (keys/buttons), one cell per input
- Continuous absolute positions from an external source
- A selector that keeps at most one of them subscribed
"""

from .controller import (
    MovementController,
    MovementMode,
    StartResult,
    DiscreteStepController,
    ContinuousFeedController,
    KEY_BINDINGS,
    parse_direction,
)
from .sources import (
    PositionSource,
    PushPositionSource,
    ReplayPositionSource,
    UnavailablePositionSource,
)
from .selector import MovementSelector

__all__ = [
    "MovementController",
    "MovementMode",
    "StartResult",
    "DiscreteStepController",
    "ContinuousFeedController",
    "KEY_BINDINGS",
    "parse_direction",
    "PositionSource",
    "PushPositionSource",
    "ReplayPositionSource",
    "UnavailablePositionSource",
    "MovementSelector",
]
