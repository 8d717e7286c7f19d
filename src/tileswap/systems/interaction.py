from __future__ import annotations

import logging
from typing import Optional, Tuple

from esper import World

from tileswap.components.grid import Cell, Grid
from tileswap.events.bus import (
    EventBus,
    EVENT_GAME_RESET,
    EVENT_GRID_REBUILT,
    EVENT_MOUSE_PRESS,
    EVENT_TILE_CLICK,
    EVENT_TILE_DESELECTED,
    EVENT_TILE_DESTROYED,
    EVENT_TILE_MOVE,
    EVENT_TILE_SELECTED,
    EVENT_TILE_SWAP_INVALID,
    EVENT_TILE_SWAP_VALID,
)
from tileswap.systems.board_ops import announce_spawns, kind_lookup, rebuild_grid_from_scene, repair_after_rebuild
from tileswap.systems.matcher import find_all_matches, manhattan
from tileswap.world import get_grid, get_resolver_state

logger = logging.getLogger(__name__)

# Arcade reports the right mouse button as 4.
RIGHT_BUTTON = 4


class InteractionSystem:
    """Tile selection and the trial-swap protocol.

    A swap between adjacent cells is applied to the grid, kept when it makes a
    match (the cascade takes over through ``EVENT_TILE_SWAP_VALID``) and rolled
    back otherwise. Input is ignored while the cascade holds ``busy``.
    """

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        self.selected: Optional[Cell] = None
        self._selected_tile: Optional[int] = None
        self.event_bus.subscribe(EVENT_TILE_CLICK, self.on_tile_click)
        self.event_bus.subscribe(EVENT_MOUSE_PRESS, self.on_mouse_press)
        self.event_bus.subscribe(EVENT_GAME_RESET, self.on_game_reset)

    def on_tile_click(self, sender, **kwargs):
        cell = kwargs.get('cell')
        if cell is None:
            return
        self.tap(tuple(cell))

    def on_mouse_press(self, sender, **kwargs):
        # Right-click always clears the current selection.
        if kwargs.get('button') != RIGHT_BUTTON:
            return
        if self.selected is not None:
            self._deselect('right_click')

    def on_game_reset(self, sender, **kwargs):
        self.selected = None
        self._selected_tile = None

    def tap(self, cell: Cell) -> None:
        if get_resolver_state(self.world).busy:
            return
        grid = get_grid(self.world)
        if not grid.in_bounds(*cell):
            return
        if self.selected is None:
            self._select(cell)
            return
        if self.selected == cell:
            self._deselect('toggle')
            return

        resolved = self._resolve_pair(grid, cell)
        if resolved is None:
            logger.warning("Clicked tile position could not be resolved in grid.")
            self._deselect('unresolved')
            return
        a, b = resolved
        if manhattan(a, b) == 1:
            self.trial_swap(a, b)
        else:
            self._deselect('reselect')
            self._select(cell)

    def trial_swap(self, a: Cell, b: Cell) -> bool:
        """Swap ``a`` and ``b``; keep it if it produces a match, roll back otherwise."""
        grid = get_grid(self.world)
        self._swap_and_animate(grid, a, b)
        matches = find_all_matches(grid, kind_lookup(self.world))
        self._deselect('swap')
        if matches:
            self.event_bus.emit(EVENT_TILE_SWAP_VALID, src=a, dst=b, positions=sorted(matches))
            return True
        self._swap_and_animate(grid, a, b)
        logger.debug("Swap %s <-> %s rejected: no match", a, b)
        self.event_bus.emit(EVENT_TILE_SWAP_INVALID, src=a, dst=b)
        return False

    def _swap_and_animate(self, grid: Grid, a: Cell, b: Cell) -> None:
        grid.swap(a, b)
        layout = self.world.layout
        duration = self.world.config.swap_duration
        for cell in (a, b):
            tile = grid.at(*cell)
            if tile is not None:
                self.event_bus.emit(EVENT_TILE_MOVE, tile=tile, target=layout.cell_to_world(cell), duration=duration)

    def _resolve_pair(self, grid: Grid, cell: Cell) -> Optional[Tuple[Cell, Cell]]:
        a = self._locate(grid)
        if a is None or grid.at(*cell) is None:
            logger.warning("Grid out of sync with scene; rebuilding from tile positions")
            layout = self.world.layout
            lost = rebuild_grid_from_scene(self.world, grid, layout)
            for tile in lost:
                self.event_bus.emit(EVENT_TILE_DESTROYED, tile=tile, cell=None)
            spawned = repair_after_rebuild(self.world, grid, layout, self.world.random, lost)
            announce_spawns(self.event_bus, self.world.config, layout, spawned)
            # A refill hands the board to the cascade, which may take busy.
            self.event_bus.emit(
                EVENT_GRID_REBUILT, reason='interaction', lost=lost, refilled=[entry.cell for entry in spawned]
            )
            if lost or spawned:
                return None
            a = self._locate(grid)
            if a is None or grid.at(*cell) is None:
                return None
        return a, cell

    def _locate(self, grid: Grid) -> Optional[Cell]:
        if self._selected_tile is None:
            return None
        return grid.find(self._selected_tile)

    def _select(self, cell: Cell) -> None:
        tile = get_grid(self.world).at(*cell)
        self.selected = cell
        self._selected_tile = tile
        self.event_bus.emit(EVENT_TILE_SELECTED, tile=tile, cell=cell)

    def _deselect(self, reason: str) -> None:
        prev_cell, prev_tile = self.selected, self._selected_tile
        self.selected = None
        self._selected_tile = None
        if prev_cell is not None:
            self.event_bus.emit(EVENT_TILE_DESELECTED, tile=prev_tile, cell=prev_cell, reason=reason)
