from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from tileswap.config import BoardConfig

Cell = Tuple[int, int]
Point = Tuple[float, float]


@dataclass(frozen=True, slots=True)
class BoardLayout:
    """Maps cells to world points and back for a given board configuration."""

    width: int
    height: int
    cell_size: float
    origin: Point
    spawn_offset_cells: float = 2.0

    @classmethod
    def from_config(cls, config: BoardConfig) -> "BoardLayout":
        return cls(
            width=config.width,
            height=config.height,
            cell_size=float(config.cell_size),
            origin=(float(config.origin[0]), float(config.origin[1])),
            spawn_offset_cells=float(config.spawn_offset_cells),
        )

    def cell_to_world(self, cell: Cell) -> Point:
        x, y = cell
        return (self.origin[0] + x * self.cell_size, self.origin[1] + y * self.cell_size)

    def spawn_point(self, cell: Cell) -> Point:
        """Where a freshly spawned tile appears before falling into ``cell``."""
        wx, wy = self.cell_to_world(cell)
        return (wx, wy + self.cell_size * self.spawn_offset_cells)

    def world_to_cell(self, point: Point) -> Cell:
        """Nearest cell to ``point``, clamped into the board."""
        x = round((point[0] - self.origin[0]) / self.cell_size)
        y = round((point[1] - self.origin[1]) / self.cell_size)
        x = min(max(x, 0), self.width - 1)
        y = min(max(y, 0), self.height - 1)
        return (x, y)

    def hit_test(self, point: Point) -> Optional[Cell]:
        """Cell whose square contains ``point``; None outside the board."""
        fx = (point[0] - self.origin[0]) / self.cell_size + 0.5
        fy = (point[1] - self.origin[1]) / self.cell_size + 0.5
        x = math.floor(fx)
        y = math.floor(fy)
        if 0 <= x < self.width and 0 <= y < self.height:
            return (x, y)
        return None

    def bounds(self) -> Tuple[float, float, float, float]:
        """Board rectangle as (left, right, bottom, top)."""
        half = self.cell_size / 2
        left = self.origin[0] - half
        bottom = self.origin[1] - half
        return (left, left + self.width * self.cell_size, bottom, bottom + self.height * self.cell_size)
