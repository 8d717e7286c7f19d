from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator, List, Optional, Tuple

from tileswap.errors import GridBoundsError, GridInvariantError

logger = logging.getLogger(__name__)

Cell = Tuple[int, int]


@dataclass(slots=True)
class Grid:
    """Cell -> tile entity mapping; the single source of truth for placement.

    Cells are ``(x, y)`` with ``y == 0`` as the bottom row. ``None`` marks an
    empty cell. Storage is column-major (``cells[x][y]``) since gravity works
    column by column.
    """

    width: int
    height: int
    cells: List[List[Optional[int]]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.cells:
            self.cells = [[None] * self.height for _ in range(self.width)]

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def _check(self, x: int, y: int) -> None:
        if not self.in_bounds(x, y):
            raise GridBoundsError(f"Cell {(x, y)} outside {self.width}x{self.height} grid")

    def at(self, x: int, y: int) -> Optional[int]:
        self._check(x, y)
        return self.cells[x][y]

    def put(self, x: int, y: int, tile: int) -> None:
        self._check(x, y)
        current = self.cells[x][y]
        if current is not None:
            raise GridInvariantError(f"Cell {(x, y)} already holds tile {current}")
        self.cells[x][y] = tile

    def take(self, x: int, y: int) -> int:
        self._check(x, y)
        tile = self.cells[x][y]
        if tile is None:
            raise GridInvariantError(f"Cell {(x, y)} is empty")
        self.cells[x][y] = None
        return tile

    def swap(self, a: Cell, b: Cell) -> None:
        self._check(*a)
        self._check(*b)
        (ax, ay), (bx, by) = a, b
        self.cells[ax][ay], self.cells[bx][by] = self.cells[bx][by], self.cells[ax][ay]

    def find(self, tile: int) -> Optional[Cell]:
        for x in range(self.width):
            for y in range(self.height):
                if self.cells[x][y] == tile:
                    return (x, y)
        return None

    def positions(self) -> Iterator[Cell]:
        for x in range(self.width):
            for y in range(self.height):
                yield (x, y)

    def occupied(self) -> Iterator[Tuple[Cell, int]]:
        for x in range(self.width):
            for y in range(self.height):
                tile = self.cells[x][y]
                if tile is not None:
                    yield (x, y), tile

    def tiles(self) -> List[int]:
        return [tile for _, tile in self.occupied()]

    def empty_cells(self) -> List[Cell]:
        return [(x, y) for x, y in self.positions() if self.cells[x][y] is None]

    def is_dense(self) -> bool:
        return all(tile is not None for column in self.cells for tile in column)

    def clear(self) -> List[int]:
        """Empty every cell and return the tiles that were held."""
        held = self.tiles()
        self.cells = [[None] * self.height for _ in range(self.width)]
        return held

    def rebuild_from_world(
        self, tiles: Iterable[int], position_of: Callable[[int], Cell]
    ) -> List[int]:
        """Reconstruct placement from each tile's snapped visual cell.

        Recovery path for a grid suspected out of sync with the scene. When two
        tiles land on one cell the later one wins; displaced tiles are returned.
        """
        self.cells = [[None] * self.height for _ in range(self.width)]
        lost: List[int] = []
        for tile in tiles:
            x, y = position_of(tile)
            x = min(max(x, 0), self.width - 1)
            y = min(max(y, 0), self.height - 1)
            previous = self.cells[x][y]
            if previous is not None and previous != tile:
                logger.warning("Grid collision at %s between tile %s and tile %s", (x, y), previous, tile)
                lost.append(previous)
            self.cells[x][y] = tile
        return lost
