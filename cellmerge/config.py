"""
Configuration - Game tuning and environment settings.

Everything tunable lives in one GameConfig:
- Grid: origin scheme + cell size
- Generation: spawn table + seed
- Rules: interact range, win target, position jump limit
- Viewport: radius, padding, off-screen eviction

GameConfig.from_env() reads CELLMERGE_* environment variables,
falling back to the defaults below.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import os

from .errors import ConfigError
from .engine_core.grid import GridConfig, OriginScheme, DEFAULT_CELL_SIZE
from .engine_core.generator import SpawnTable
from .engine_core.reducer import DEFAULT_INTERACT_STEPS, DEFAULT_WIN_TARGET

# Environment configuration
CELLMERGE_LOG_LEVEL = os.getenv("CELLMERGE_LOG_LEVEL", "INFO")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class GameConfig:
    """All per-session tuning, fixed at session creation."""
    grid: GridConfig = field(default_factory=GridConfig)
    spawn_table: SpawnTable = field(default_factory=SpawnTable)
    seed: str = ""

    interact_steps: int = DEFAULT_INTERACT_STEPS
    win_target: int = DEFAULT_WIN_TARGET
    max_jump_cells: int | None = None

    viewport_radius: int = 12
    viewport_padding: int = 1
    evict_offscreen: bool = False

    def __post_init__(self):
        if self.interact_steps < 0:
            raise ConfigError(f"interact_steps must be >= 0, got {self.interact_steps}")
        if self.win_target < 2:
            raise ConfigError(f"win_target must be >= 2, got {self.win_target}")
        if self.viewport_radius < 0 or self.viewport_padding < 0:
            raise ConfigError("viewport radius and padding must be >= 0")
        if self.max_jump_cells is not None and self.max_jump_cells < 0:
            raise ConfigError(f"max_jump_cells must be >= 0, got {self.max_jump_cells}")
        if self.evict_offscreen and self.viewport_radius + self.viewport_padding <= self.interact_steps:
            # Every cell in reach must stay inside the evicted-against range
            raise ConfigError(
                "evict_offscreen needs viewport_radius + viewport_padding > interact_steps, "
                f"got {self.viewport_radius} + {self.viewport_padding} <= {self.interact_steps}"
            )

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> GameConfig:
        """
        Build a config from CELLMERGE_* variables.

        Args:
            environ: Mapping to read (defaults to os.environ)
        """
        env = os.environ if environ is None else environ

        scheme_name = env.get("CELLMERGE_ORIGIN_SCHEME", OriginScheme.LOCAL.value)
        try:
            scheme = OriginScheme(scheme_name.lower())
        except ValueError:
            raise ConfigError(f"Unknown origin scheme: {scheme_name}") from None

        return cls(
            grid=GridConfig.for_scheme(
                scheme,
                cell_size=_read_number(env, "CELLMERGE_CELL_SIZE", DEFAULT_CELL_SIZE, float),
            ),
            seed=env.get("CELLMERGE_SEED", ""),
            interact_steps=_read_number(env, "CELLMERGE_INTERACT_STEPS", DEFAULT_INTERACT_STEPS, int),
            win_target=_read_number(env, "CELLMERGE_WIN_TARGET", DEFAULT_WIN_TARGET, int),
            max_jump_cells=_read_number(env, "CELLMERGE_MAX_JUMP_CELLS", None, int),
            viewport_radius=_read_number(env, "CELLMERGE_VIEWPORT_RADIUS", 12, int),
            viewport_padding=_read_number(env, "CELLMERGE_VIEWPORT_PADDING", 1, int),
            evict_offscreen=_read_flag(env, "CELLMERGE_EVICT_OFFSCREEN"),
        )


def _read_number(env, name: str, default, cast):
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None


def _read_flag(env, name: str) -> bool:
    return env.get(name, "").strip().lower() in {"1", "true", "yes", "on"}


def configure_logging(level: str | int | None = None):
    """Set up root logging for the CLI and the API server."""
    logging.basicConfig(
        level=level or CELLMERGE_LOG_LEVEL,
        format=LOG_FORMAT,
    )
