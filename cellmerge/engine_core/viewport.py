"""
Viewport - Which cells are currently relevant for presentation.

The viewport is a rectangle around the player, padded by a margin so
cells just off-screen are already drawn when the player moves.
The resulting CellRange is used:
1. By the renderer to enumerate cells to draw
2. By the overlay store (when eviction is on) to decide what survives
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator

from .grid import Bounds, CellCoordinate, GridMapper, LatLng


@dataclass(frozen=True)
class CellRange:
    """Inclusive rectangle of cell indices."""
    i_min: int
    i_max: int
    j_min: int
    j_max: int

    def __contains__(self, coord: object) -> bool:
        if not isinstance(coord, CellCoordinate):
            return False
        return (
            self.i_min <= coord.i <= self.i_max
            and self.j_min <= coord.j <= self.j_max
        )

    def __iter__(self) -> Iterator[CellCoordinate]:
        """Row-major, north row first (the order a map is read)."""
        for i in range(self.i_max, self.i_min - 1, -1):
            for j in range(self.j_min, self.j_max + 1):
                yield CellCoordinate(i, j)

    def __len__(self) -> int:
        return self.rows * self.columns

    @property
    def rows(self) -> int:
        return self.i_max - self.i_min + 1

    @property
    def columns(self) -> int:
        return self.j_max - self.j_min + 1


def visible_cells(mapper: GridMapper, bounds: Bounds) -> CellRange:
    """Every cell whose bounds intersect the (already padded) region."""
    i_min, i_max, j_min, j_max = mapper.cell_range(bounds)
    return CellRange(i_min=i_min, i_max=i_max, j_min=j_min, j_max=j_max)


@dataclass
class Viewport:
    """
    A square window centered on a position.

    radius_cells: half-width of the visible area, in cells
    padding_cells: extra margin added on every side
    """
    mapper: GridMapper
    center: LatLng
    radius_cells: int = 12
    padding_cells: int = 1

    def recenter(self, position: LatLng):
        self.center = position

    def bounds(self, padded: bool = True) -> Bounds:
        cells = self.radius_cells + (self.padding_cells if padded else 0)
        half = cells * self.mapper.cell_size
        return Bounds(
            south_west=LatLng(self.center.lat - half, self.center.lng - half),
            north_east=LatLng(self.center.lat + half, self.center.lng + half),
        )

    def visible_cells(self) -> CellRange:
        return visible_cells(self.mapper, self.bounds(padded=True))
