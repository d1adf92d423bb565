"""
Rendering - The presentation side of the engine.

The engine never draws. After every state change the game loop builds
a Frame (visible cells + player status) and hands it to a Renderer.
A map UI, a terminal, or the HTTP API can all consume the same Frame.

Included renderers:
- NullRenderer: draws nothing (headless sessions)
- TextRenderer: ASCII grid for the terminal
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
import sys

from .engine_core.grid import CellCoordinate, LatLng
from .engine_core.viewport import CellRange


@dataclass(frozen=True)
class CellView:
    """One visible cell and what to show in it."""
    coord: CellCoordinate
    value: int
    in_reach: bool
    overridden: bool


@dataclass
class Frame:
    """
    Everything a renderer needs for one redraw.

    cells are in CellRange order: north row first, west to east.
    """
    cell_range: CellRange
    cells: list[CellView]
    player_position: LatLng
    player_cell: CellCoordinate
    held_value: int | None
    has_won: bool
    win_target: int
    best_value: int = 0
    evicted: int = 0
    changes: list[str] = field(default_factory=list)

    def value_at(self, coord: CellCoordinate) -> int | None:
        """Effective value of a visible cell, None if off-screen."""
        if coord not in self.cell_range:
            return None
        row = self.cell_range.i_max - coord.i
        col = coord.j - self.cell_range.j_min
        return self.cells[row * self.cell_range.columns + col].value


def status_text(frame: Frame) -> str:
    """The one-line HUD."""
    if frame.held_value is None:
        text = "Empty-handed"
    else:
        text = f"Holding: {frame.held_value}"
    text += f" | Cell {frame.player_cell}"
    if frame.best_value:
        text += f" | Best: {frame.best_value}"
    if frame.has_won:
        text += f" | You win! (reached {frame.win_target})"
    return text


def win_message(value: int, target: int) -> str:
    return f"You made a {value}! Target was {target}. Keep merging."


class Renderer(ABC):
    """Interface the game loop redraws through. Must be cheap per call."""

    @abstractmethod
    def redraw(self, frame: Frame):
        ...


class NullRenderer(Renderer):
    """Keeps only the last frame."""

    def __init__(self):
        self.last_frame: Frame | None = None
        self.redraw_count = 0

    def redraw(self, frame: Frame):
        self.last_frame = frame
        self.redraw_count += 1


class TextRenderer(Renderer):
    """
    Draws the visible grid as text.

    @ marks the player cell. Empty cells in reach show as ".", empty
    cells out of reach are blank, so the reach square stands out.
    """

    def __init__(self, out=None, cell_width: int = 4):
        self.out = out or sys.stdout
        self.cell_width = cell_width

    def render(self, frame: Frame) -> str:
        lines = []
        width = self.cell_width
        for row in range(frame.cell_range.rows):
            start = row * frame.cell_range.columns
            cells = frame.cells[start:start + frame.cell_range.columns]
            line = []
            for cell in cells:
                if cell.coord == frame.player_cell:
                    token = "@" if cell.value == 0 else f"@{cell.value}"
                elif cell.value == 0:
                    token = "." if cell.in_reach else " "
                else:
                    token = str(cell.value)
                line.append(token.rjust(width))
            lines.append("".join(line))
        lines.append(status_text(frame))
        return "\n".join(lines)

    def redraw(self, frame: Frame):
        print(self.render(frame), file=self.out)
