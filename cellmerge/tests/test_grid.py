"""
Tests for the grid mapper and viewport query.

Tests:
- Position -> cell quantization
- Cell bounds and centers
- Visible cell ranges
"""

import pytest

from ..engine_core.grid import (
    CLASSROOM,
    CellCoordinate,
    Direction,
    GridConfig,
    GridMapper,
    LatLng,
    NULL_ISLAND,
    OriginScheme,
    Bounds,
)
from ..engine_core.viewport import CellRange, Viewport, visible_cells
from ..errors import ConfigError


class TestToCell:
    """Tests for quantization."""

    def test_scenario_player_cell(self, mapper):
        """(0.00005, 0.00005) on a 1e-4 grid at (0, 0) is cell (0, 0)."""
        assert mapper.to_cell(LatLng(0.00005, 0.00005)) == CellCoordinate(0, 0)

    def test_negative_positions_floor(self, mapper):
        """Negative offsets floor toward -infinity, not toward zero."""
        assert mapper.to_cell(LatLng(-0.00005, -0.00015)) == CellCoordinate(-1, -2)

    def test_lat_is_i_lng_is_j(self, mapper):
        """i follows latitude, j follows longitude."""
        assert mapper.to_cell(LatLng(0.00035, 0.00005)) == CellCoordinate(3, 0)
        assert mapper.to_cell(LatLng(0.00005, 0.00035)) == CellCoordinate(0, 3)

    def test_step_from_local_origin_lands_in_next_cell(self):
        """A whole-cell step from the classroom anchor crosses exactly one cell."""
        mapper = GridMapper(GridConfig(origin=CLASSROOM))
        moved = mapper.step(CLASSROOM, Direction.NORTH)
        assert mapper.to_cell(CLASSROOM) == CellCoordinate(0, 0)
        assert mapper.to_cell(moved) == CellCoordinate(1, 0)

    def test_schemes_disagree_on_identity(self):
        """Local and global origins give different cells for the same point."""
        local = GridMapper(GridConfig.for_scheme(OriginScheme.LOCAL))
        global_ = GridMapper(GridConfig.for_scheme(OriginScheme.GLOBAL))
        assert local.to_cell(CLASSROOM) == CellCoordinate(0, 0)
        assert global_.to_cell(CLASSROOM) != CellCoordinate(0, 0)

    def test_global_instances_agree(self):
        """Two independent global mappers agree on every cell."""
        a = GridMapper(GridConfig.for_scheme(OriginScheme.GLOBAL))
        b = GridMapper(GridConfig(origin=NULL_ISLAND))
        point = LatLng(48.8584, 2.2945)
        assert a.to_cell(point) == b.to_cell(point)


class TestCellGeometry:
    """Tests for bounds, centers and steps."""

    def test_bounds(self, mapper):
        """Bounds span exactly one cell size."""
        bounds = mapper.cell_bounds(CellCoordinate(2, -1))
        assert bounds.south == pytest.approx(0.0002)
        assert bounds.north == pytest.approx(0.0003)
        assert bounds.west == pytest.approx(-0.0001)
        assert bounds.east == pytest.approx(0.0)

    def test_center_maps_back_to_cell(self, mapper):
        """cell_center(c) lies in c for a spread of cells."""
        for i in range(-5, 6):
            for j in range(-5, 6):
                coord = CellCoordinate(i, j)
                assert mapper.to_cell(mapper.cell_center(coord)) == coord

    def test_center_inside_bounds(self, mapper):
        coord = CellCoordinate(-3, 7)
        assert mapper.cell_bounds(coord).contains(mapper.cell_center(coord))

    def test_steps_are_one_cell_on_one_axis(self, mapper):
        """Each direction moves exactly one cell along one axis."""
        start = mapper.cell_center(CellCoordinate(0, 0))
        expected = {
            Direction.NORTH: CellCoordinate(1, 0),
            Direction.SOUTH: CellCoordinate(-1, 0),
            Direction.EAST: CellCoordinate(0, 1),
            Direction.WEST: CellCoordinate(0, -1),
        }
        for direction, cell in expected.items():
            assert mapper.to_cell(mapper.step(start, direction)) == cell

    def test_chebyshev(self):
        assert CellCoordinate(0, 0).chebyshev(CellCoordinate(3, -2)) == 3
        assert CellCoordinate(-1, -1).chebyshev(CellCoordinate(-1, 4)) == 5

    def test_invalid_cell_size(self):
        """Non-positive cell sizes are rejected."""
        with pytest.raises(ConfigError):
            GridConfig(cell_size=0)
        with pytest.raises(ConfigError):
            GridConfig(cell_size=float("nan"))


class TestVisibleCells:
    """Tests for the viewport query."""

    def test_range_from_bounds(self, mapper):
        """Interior edges floor low and ceil high."""
        bounds = Bounds(LatLng(0.00005, 0.00005), LatLng(0.00035, 0.00025))
        cells = visible_cells(mapper, bounds)
        assert cells == CellRange(i_min=0, i_max=3, j_min=0, j_max=2)
        assert len(cells) == 12

    def test_touching_edge_excluded(self, mapper):
        """A cell that only touches the high edge is not visible."""
        bounds = Bounds(LatLng(0.0, 0.0), LatLng(0.0002, 0.0002))
        cells = visible_cells(mapper, bounds)
        assert cells.i_max == 1
        assert CellCoordinate(2, 0) not in cells

    def test_iteration_order(self):
        """North row first, west to east."""
        cells = list(CellRange(i_min=0, i_max=1, j_min=0, j_max=1))
        assert cells == [
            CellCoordinate(1, 0),
            CellCoordinate(1, 1),
            CellCoordinate(0, 0),
            CellCoordinate(0, 1),
        ]

    def test_viewport_padding(self, mapper):
        """Padding widens the range by whole cells."""
        viewport = Viewport(
            mapper=mapper,
            center=LatLng(0.00005, 0.00005),
            radius_cells=2,
            padding_cells=1,
        )
        cells = viewport.visible_cells()
        assert (cells.i_min, cells.i_max) == (-3, 3)
        assert (cells.j_min, cells.j_max) == (-3, 3)
        assert len(cells) == 49

    def test_recenter(self, mapper):
        viewport = Viewport(mapper=mapper, center=LatLng(0.00005, 0.00005), radius_cells=1, padding_cells=0)
        viewport.recenter(LatLng(0.00105, 0.00005))
        assert CellCoordinate(10, 0) in viewport.visible_cells()
        assert CellCoordinate(0, 0) not in viewport.visible_cells()
