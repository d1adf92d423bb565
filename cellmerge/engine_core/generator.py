"""
Generator - Deterministic procedural token values per cell.

generate(i, j) is a pure function:
- No side effects
- Same input -> same output, across calls AND across processes
- Not true randomness: a seeded hash of "spawn:i,j" mapped into [0, 1)

The [0, 1) draw is partitioned by a SpawnTable into token values.
The default table gives 2 with p=0.15, 4 with p=0.05, 8 with p=0.02,
and an empty cell otherwise.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import hashlib

from ..errors import ConfigError
from .grid import CellCoordinate

EMPTY = 0

# 2**64, the size of the integer space luck() draws from
_HASH_SPACE = float(1 << 64)

# Probability sums this close to 1.0 count as exactly 1.0
_SUM_TOLERANCE = 1e-9


def luck(key: str) -> float:
    """
    Map a string to a float in [0, 1).

    Uses the first 8 bytes of SHA-256, so the result is stable across
    interpreter runs (unlike hash(), which is salted per process).
    """
    digest = hashlib.sha256(key.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big") / _HASH_SPACE


def is_token_value(value: int) -> bool:
    """True for 0 (empty) and positive powers of two >= 2."""
    if value == EMPTY:
        return True
    return value >= 2 and (value & (value - 1)) == 0


@dataclass(frozen=True)
class SpawnBand:
    """Draws below `upper` (and above the previous band) spawn `value`."""
    upper: float
    value: int


DEFAULT_BANDS = (
    SpawnBand(upper=0.15, value=2),
    SpawnBand(upper=0.20, value=4),
    SpawnBand(upper=0.22, value=8),
    SpawnBand(upper=1.0, value=EMPTY),
)


@dataclass(frozen=True)
class SpawnTable:
    """
    Cumulative thresholds partitioning [0, 1) into token values.

    The last band must end at exactly 1.0 so there are no gaps.
    """
    bands: tuple[SpawnBand, ...] = DEFAULT_BANDS

    def __post_init__(self):
        if not self.bands:
            raise ConfigError("Spawn table needs at least one band")
        previous = 0.0
        for band in self.bands:
            if not previous < band.upper <= 1.0:
                raise ConfigError(
                    f"Spawn thresholds must be strictly ascending in (0, 1], got {band.upper} after {previous}"
                )
            if not is_token_value(band.value):
                raise ConfigError(f"Spawn value must be 0 or a power of two, got {band.value}")
            previous = band.upper
        if self.bands[-1].upper != 1.0:
            raise ConfigError("Last spawn band must end at 1.0")

    @classmethod
    def from_probabilities(cls, probabilities: dict[int, float]) -> SpawnTable:
        """
        Build a table from {value: probability}.

        Whatever probability is left over becomes the empty band.
        """
        bands = []
        upper = 0.0
        for value, probability in sorted(probabilities.items()):
            if probability <= 0:
                continue
            upper += probability
            bands.append(SpawnBand(upper=upper, value=value))
        if upper > 1.0 + _SUM_TOLERANCE:
            raise ConfigError(f"Spawn probabilities sum to {upper}, more than 1")
        if upper < 1.0 - _SUM_TOLERANCE:
            bands.append(SpawnBand(upper=1.0, value=EMPTY))
        else:
            bands[-1] = SpawnBand(upper=1.0, value=bands[-1].value)
        return cls(bands=tuple(bands))

    def pick(self, r: float) -> int:
        """Value for a draw r in [0, 1)."""
        for band in self.bands:
            if r < band.upper:
                return band.value
        return self.bands[-1].value

    def probability(self, value: int) -> float:
        """Total probability mass the table assigns to a value."""
        total = 0.0
        previous = 0.0
        for band in self.bands:
            if band.value == value:
                total += band.upper - previous
            previous = band.upper
        return total


@dataclass(frozen=True)
class TokenGenerator:
    """
    Seeded, deterministic cell -> base token value.

    The seed is folded into the hash key, so different seeds give
    different worlds while a fixed seed is fully reproducible.
    """
    table: SpawnTable = field(default_factory=SpawnTable)
    seed: str = ""

    def draw(self, i: int, j: int) -> float:
        """The raw [0, 1) draw for a cell."""
        key = f"spawn:{i},{j}"
        if self.seed:
            key = f"{self.seed}:{key}"
        return luck(key)

    def generate(self, i: int, j: int) -> int:
        """Base token value for cell (i, j)."""
        return self.table.pick(self.draw(i, j))

    def __call__(self, coord: CellCoordinate) -> int:
        return self.generate(coord.i, coord.j)
