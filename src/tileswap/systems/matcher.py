from __future__ import annotations

from typing import Callable, List, Optional, Set, Tuple

from tileswap.components.grid import Cell, Grid
from tileswap.components.tile import TileKind

KindOf = Callable[[int], TileKind]

MIN_MATCH = 3


def _scan_line(cells: List[Cell], kinds: List[Optional[TileKind]]) -> List[List[Cell]]:
    runs: List[List[Cell]] = []
    run_start = 0
    length = len(cells)
    while run_start < length:
        kind = kinds[run_start]
        if kind is None:
            run_start += 1
            continue
        run_end = run_start + 1
        while run_end < length and kinds[run_end] is not None and kinds[run_end] == kind:
            run_end += 1
        if run_end - run_start >= MIN_MATCH:
            runs.append(cells[run_start:run_end])
        run_start = run_end
    return runs


def find_match_runs(grid: Grid, kind_of: KindOf) -> List[List[Cell]]:
    """Every maximal horizontal or vertical same-kind run of length >= 3.

    Rows are scanned left to right first, then columns bottom to top. Empty
    cells break runs. The grid is not mutated.
    """
    runs: List[List[Cell]] = []
    for y in range(grid.height):
        cells = [(x, y) for x in range(grid.width)]
        runs.extend(_scan_line(cells, [_kind(grid, kind_of, c) for c in cells]))
    for x in range(grid.width):
        cells = [(x, y) for y in range(grid.height)]
        runs.extend(_scan_line(cells, [_kind(grid, kind_of, c) for c in cells]))
    return runs


def find_all_matches(grid: Grid, kind_of: KindOf) -> Set[Cell]:
    """Set of matched cells; crossings (L, T, +) count each cell once."""
    result: Set[Cell] = set()
    for run in find_match_runs(grid, kind_of):
        result.update(run)
    return result


def _kind(grid: Grid, kind_of: KindOf, cell: Cell) -> Optional[TileKind]:
    tile = grid.at(*cell)
    if tile is None:
        return None
    return kind_of(tile)


def manhattan(a: Cell, b: Cell) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def is_adjacent(a: Cell, b: Cell) -> bool:
    return manhattan(a, b) == 1


def run_lengths(runs: List[List[Cell]]) -> List[Tuple[int, Cell]]:
    """(length, first cell) per run; handy for logging."""
    return [(len(run), run[0]) for run in runs]
