from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from tileswap.constants import (
    BOARD_ORIGIN,
    CELL_SIZE,
    DEFAULT_KIND_COLORS,
    FALL_DURATION,
    GRID_HEIGHT,
    GRID_WIDTH,
    KIND_COUNT,
    MAX_CASCADE_ITERATIONS,
    SCORE_PER_TILE,
    SPAWN_OFFSET_CELLS,
    STEP_DELAY,
    SWAP_DURATION,
)
from tileswap.errors import ConfigurationError

Color = Tuple[int, int, int]


@dataclass(frozen=True, slots=True)
class BoardConfig:
    """Recognised board options.

    Durations and delays are in seconds, ``cell_size`` and ``origin`` in world
    units. ``origin`` is the world position of the centre of cell (0, 0).
    """

    width: int = GRID_WIDTH
    height: int = GRID_HEIGHT
    kind_colors: Tuple[Color, ...] = DEFAULT_KIND_COLORS
    cell_size: float = CELL_SIZE
    origin: Tuple[float, float] = BOARD_ORIGIN
    swap_duration: float = SWAP_DURATION
    fall_duration: float = FALL_DURATION
    step_delay: float = STEP_DELAY
    score_per_tile: int = SCORE_PER_TILE
    max_cascade_iterations: int = MAX_CASCADE_ITERATIONS
    spawn_offset_cells: float = SPAWN_OFFSET_CELLS

    @property
    def kind_count(self) -> int:
        return KIND_COUNT

    def color_for(self, kind) -> Color:
        return tuple(self.kind_colors[kind.index])

    def validate(self) -> "BoardConfig":
        if self.kind_colors is None or len(self.kind_colors) != KIND_COUNT:
            count = 0 if self.kind_colors is None else len(self.kind_colors)
            raise ConfigurationError(
                f"Kind colors must have exactly {KIND_COUNT} elements (got {count})."
            )
        for color in self.kind_colors:
            if len(color) not in (3, 4):
                raise ConfigurationError(f"Kind color {color!r} is not an RGB(A) tuple.")
        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError(
                f"Board dimensions must be positive (got {self.width}x{self.height})."
            )
        if self.cell_size <= 0:
            raise ConfigurationError(f"Cell size must be positive (got {self.cell_size}).")
        for name in ("swap_duration", "fall_duration", "step_delay"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must not be negative.")
        if self.score_per_tile <= 0:
            raise ConfigurationError("score_per_tile must be positive.")
        if self.max_cascade_iterations <= 0:
            raise ConfigurationError("max_cascade_iterations must be positive.")
        return self
