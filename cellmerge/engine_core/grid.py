"""
Grid - Quantizes the continuous lat/lng plane into integer cells.

A cell is addressed by (i, j):
- i counts cells along latitude (north is +i)
- j counts cells along longitude (east is +j)

The mapping depends only on GridConfig (origin + cell size), so two
instances with the same config always agree on cell identity.
Two origin schemes are supported:
- local: origin is a fixed anchor (a classroom, a park, ...)
- global: origin is (0, 0), so every instance on Earth shares one grid
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
import math

from ..errors import ConfigError


# Quotients this close to an integer are treated as that integer, so a
# position built by adding whole cell sizes lands in the intended cell.
_SNAP_TOLERANCE = 1e-9


class OriginScheme(Enum):
    """Which point the grid is anchored at."""
    LOCAL = "local"
    GLOBAL = "global"


class Direction(Enum):
    """Discrete movement directions, as (di, dj) cell deltas."""
    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"

    @property
    def delta(self) -> tuple[int, int]:
        return _DIRECTION_DELTAS[self]


_DIRECTION_DELTAS = {
    Direction.NORTH: (1, 0),
    Direction.SOUTH: (-1, 0),
    Direction.EAST: (0, 1),
    Direction.WEST: (0, -1),
}


@dataclass(frozen=True)
class LatLng:
    """A continuous position."""
    lat: float
    lng: float

    def is_finite(self) -> bool:
        return math.isfinite(self.lat) and math.isfinite(self.lng)


@dataclass(frozen=True)
class CellCoordinate:
    """Integer address of one grid cell. Unbounded in both directions."""
    i: int
    j: int

    def chebyshev(self, other: CellCoordinate) -> int:
        """max(|di|, |dj|) - square-shaped distance."""
        return max(abs(self.i - other.i), abs(self.j - other.j))

    def __str__(self) -> str:
        return f"({self.i},{self.j})"


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned rectangle in lat/lng space."""
    south_west: LatLng
    north_east: LatLng

    @property
    def south(self) -> float:
        return self.south_west.lat

    @property
    def west(self) -> float:
        return self.south_west.lng

    @property
    def north(self) -> float:
        return self.north_east.lat

    @property
    def east(self) -> float:
        return self.north_east.lng

    def contains(self, position: LatLng) -> bool:
        return (
            self.south <= position.lat <= self.north
            and self.west <= position.lng <= self.east
        )


# UCSC classroom - the default anchor for the local scheme
CLASSROOM = LatLng(36.997936938057016, -122.05703507501151)
NULL_ISLAND = LatLng(0.0, 0.0)

DEFAULT_CELL_SIZE = 1e-4


@dataclass(frozen=True)
class GridConfig:
    """
    Origin and cell size for the coordinate mapper.

    These are explicit values rather than module constants so that
    both origin schemes can coexist (and tests can pick their own).
    """
    origin: LatLng = CLASSROOM
    cell_size: float = DEFAULT_CELL_SIZE

    def __post_init__(self):
        if not (math.isfinite(self.cell_size) and self.cell_size > 0):
            raise ConfigError(f"cell_size must be a positive finite number, got {self.cell_size}")
        if not self.origin.is_finite():
            raise ConfigError(f"origin must be finite, got {self.origin}")

    @classmethod
    def for_scheme(
        cls,
        scheme: OriginScheme,
        cell_size: float = DEFAULT_CELL_SIZE,
        anchor: LatLng = CLASSROOM,
    ) -> GridConfig:
        """Build a config for an origin scheme."""
        if scheme == OriginScheme.GLOBAL:
            return cls(origin=NULL_ISLAND, cell_size=cell_size)
        return cls(origin=anchor, cell_size=cell_size)

    @property
    def scheme(self) -> OriginScheme:
        if self.origin == NULL_ISLAND:
            return OriginScheme.GLOBAL
        return OriginScheme.LOCAL


def _snap_floor(value: float) -> int:
    nearest = round(value)
    if abs(value - nearest) < _SNAP_TOLERANCE:
        return int(nearest)
    return math.floor(value)


def _snap_ceil(value: float) -> int:
    nearest = round(value)
    if abs(value - nearest) < _SNAP_TOLERANCE:
        return int(nearest)
    return math.ceil(value)


@dataclass(frozen=True)
class GridMapper:
    """
    Converts between continuous positions and cell indices.

    No error conditions: any finite input maps to a well-defined cell.
    """
    config: GridConfig = GridConfig()

    @property
    def cell_size(self) -> float:
        return self.config.cell_size

    @property
    def origin(self) -> LatLng:
        return self.config.origin

    def to_cell(self, position: LatLng) -> CellCoordinate:
        """Floor-divide the offset from origin by cell size on each axis."""
        return CellCoordinate(
            i=_snap_floor((position.lat - self.origin.lat) / self.cell_size),
            j=_snap_floor((position.lng - self.origin.lng) / self.cell_size),
        )

    def cell_bounds(self, coord: CellCoordinate) -> Bounds:
        """The rectangle covered by a cell."""
        size = self.cell_size
        return Bounds(
            south_west=LatLng(
                self.origin.lat + coord.i * size,
                self.origin.lng + coord.j * size,
            ),
            north_east=LatLng(
                self.origin.lat + (coord.i + 1) * size,
                self.origin.lng + (coord.j + 1) * size,
            ),
        )

    def cell_center(self, coord: CellCoordinate) -> LatLng:
        """Midpoint of the cell rectangle."""
        size = self.cell_size
        return LatLng(
            self.origin.lat + (coord.i + 0.5) * size,
            self.origin.lng + (coord.j + 0.5) * size,
        )

    def step(self, position: LatLng, direction: Direction) -> LatLng:
        """Move exactly one cell size along one axis."""
        di, dj = direction.delta
        return LatLng(
            position.lat + di * self.cell_size,
            position.lng + dj * self.cell_size,
        )

    def cell_range(self, bounds: Bounds) -> tuple[int, int, int, int]:
        """
        Inclusive (i_min, i_max, j_min, j_max) of cells intersecting bounds.

        The low edge uses floor; the high edge uses ceil - 1 so a cell
        that only touches the edge is not included.
        """
        lat0, lng0 = self.origin.lat, self.origin.lng
        size = self.cell_size
        i_min = _snap_floor((bounds.south - lat0) / size)
        j_min = _snap_floor((bounds.west - lng0) / size)
        i_max = max(i_min, _snap_ceil((bounds.north - lat0) / size) - 1)
        j_max = max(j_min, _snap_ceil((bounds.east - lng0) / size) - 1)
        return i_min, i_max, j_min, j_max
