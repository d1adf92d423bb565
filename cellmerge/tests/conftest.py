"""
Pytest fixtures for Cellmerge tests.
"""

import pytest

from ..config import GameConfig
from ..engine_core.grid import CellCoordinate, GridConfig, GridMapper, LatLng, NULL_ISLAND
from ..engine_core.overlay import OverlayStore
from ..engine_core.state import GameState, PlayerState
from ..render import NullRenderer
from ..session.game_loop import GameLoop

CELL = 1e-4


class FixedGenerator:
    """Generator double: hand-placed values, everything else `default`."""

    def __init__(self, values: dict[tuple[int, int], int] | None = None, default: int = 0):
        self.values = values or {}
        self.default = default
        self.calls = 0

    def __call__(self, coord: CellCoordinate) -> int:
        self.calls += 1
        return self.values.get((coord.i, coord.j), self.default)


def center_of(i: int, j: int) -> LatLng:
    """Center of cell (i, j) on the null-island grid."""
    return LatLng((i + 0.5) * CELL, (j + 0.5) * CELL)


@pytest.fixture
def grid_config() -> GridConfig:
    """Global-origin grid with 1e-4 degree cells."""
    return GridConfig(origin=NULL_ISLAND, cell_size=CELL)


@pytest.fixture
def mapper(grid_config) -> GridMapper:
    return GridMapper(grid_config)


@pytest.fixture
def make_state(mapper):
    """Factory: GameState over a FixedGenerator, player in cell `at`."""

    def _make(values=None, at=(0, 0), default=0) -> GameState:
        return GameState(
            mapper=mapper,
            player=PlayerState(position=center_of(*at)),
            overlay=OverlayStore(generator=FixedGenerator(values, default=default)),
        )

    return _make


@pytest.fixture
def make_loop(grid_config, make_state):
    """Factory: started GameLoop with a NullRenderer and a recording notifier."""

    def _make(values=None, at=(0, 0), default=0, start=True, **config_overrides):
        config = GameConfig(grid=grid_config, **config_overrides)
        notifications: list[str] = []
        loop = GameLoop(
            make_state(values, at=at, default=default),
            config=config,
            renderer=NullRenderer(),
            notifier=notifications.append,
        )
        loop.notifications = notifications
        if start:
            loop.start()
        return loop

    return _make
