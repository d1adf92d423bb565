"""
Overlay Store - Sparse record of cells that diverged from the generator.

Only cells the player has touched are stored:
- key present  -> use the stored value (0 means "emptied by pickup")
- key absent   -> use the generator

A stored 0 is NOT the same as absence: it overrides a possibly
nonzero generated value.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, Container, Iterator

from .grid import CellCoordinate
from .generator import TokenGenerator


@dataclass
class OverlayStore:
    """
    Mapping CellCoordinate -> token value, layered over a generator.

    effective_value() reads only this mapping and the pure generator;
    there is no other source of truth.
    """
    generator: Callable[[CellCoordinate], int] = field(default_factory=TokenGenerator)
    _overrides: dict[CellCoordinate, int] = field(default_factory=dict)

    def effective_value(self, coord: CellCoordinate) -> int:
        """Stored override if present, else the generated value."""
        if coord in self._overrides:
            return self._overrides[coord]
        return self.generator(coord)

    def set_value(self, coord: CellCoordinate, value: int):
        """Unconditional upsert."""
        self._overrides[coord] = value

    def get_override(self, coord: CellCoordinate) -> int | None:
        return self._overrides.get(coord)

    def evict_outside(self, visible: Container[CellCoordinate]) -> int:
        """
        Drop every override whose cell is not in `visible`.

        Returns how many entries were removed.
        """
        stale = [coord for coord in self._overrides if coord not in visible]
        for coord in stale:
            del self._overrides[coord]
        return len(stale)

    def items(self) -> Iterator[tuple[CellCoordinate, int]]:
        return iter(list(self._overrides.items()))

    def __contains__(self, coord: object) -> bool:
        return coord in self._overrides

    def __len__(self) -> int:
        return len(self._overrides)
