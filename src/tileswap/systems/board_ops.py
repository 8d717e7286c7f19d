from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Tuple

from esper import World

from tileswap.components.grid import Cell, Grid
from tileswap.components.move_tween import MoveTween
from tileswap.components.tile import Tile, TileKind
from tileswap.components.world_position import WorldPosition
from tileswap.config import BoardConfig
from tileswap.constants import KIND_COUNT
from tileswap.events.bus import (
    EventBus,
    EVENT_TILE_DESTROYED,
    EVENT_TILE_MOVE,
    EVENT_TILE_SPAWNED,
)
from tileswap.ui.layout import BoardLayout

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


@dataclass(slots=True)
class ClearedTile:
    tile: int
    cell: Cell
    kind: TileKind


@dataclass(slots=True)
class FallMove:
    tile: int
    source: Cell
    target: Cell


@dataclass(slots=True)
class SpawnedTile:
    tile: int
    cell: Cell
    kind: TileKind
    spawn_position: Point


def kind_lookup(world: World) -> Callable[[int], TileKind]:
    def kind_of(tile: int) -> TileKind:
        return world.component_for_entity(tile, Tile).kind
    return kind_of


def random_kind(rng) -> TileKind:
    return TileKind.from_index(rng.randrange(KIND_COUNT))


def create_tile(world: World, kind: TileKind, position: Point) -> int:
    return world.create_entity(Tile(kind=kind), WorldPosition(*position))


def destroy_tile(world: World, tile: int) -> None:
    # Deleting the entity drops any MoveTween with it.
    if world.entity_exists(tile):
        world.delete_entity(tile, immediate=True)


def clear_cells(world: World, grid: Grid, cells: Iterable[Cell]) -> List[ClearedTile]:
    """Destroy the tiles at ``cells`` and empty them. Empty cells are skipped."""
    cleared: List[ClearedTile] = []
    for x, y in sorted(cells):
        if grid.at(x, y) is None:
            continue
        tile = grid.take(x, y)
        kind = world.component_for_entity(tile, Tile).kind
        destroy_tile(world, tile)
        cleared.append(ClearedTile(tile=tile, cell=(x, y), kind=kind))
    return cleared


def collapse_columns(grid: Grid) -> List[FallMove]:
    """Compact each column toward y == 0, keeping the tiles' vertical order."""
    moves: List[FallMove] = []
    for x in range(grid.width):
        write_y = 0
        for y in range(grid.height):
            tile = grid.at(x, y)
            if tile is None:
                continue
            if write_y != y:
                grid.take(x, y)
                grid.put(x, write_y, tile)
                moves.append(FallMove(tile=tile, source=(x, y), target=(x, write_y)))
            write_y += 1
    return moves


def refill_empty_cells(world: World, grid: Grid, layout: BoardLayout, rng) -> List[SpawnedTile]:
    """Spawn a random tile above every empty cell; column by column, bottom-up."""
    spawned: List[SpawnedTile] = []
    for x in range(grid.width):
        for y in range(grid.height):
            if grid.at(x, y) is None:
                spawned.append(_spawn_at(world, grid, layout, rng, (x, y)))
    return spawned


def generate_board(world: World, grid: Grid, layout: BoardLayout, rng) -> List[SpawnedTile]:
    """Fill every empty cell row by row; used for a fresh board."""
    spawned: List[SpawnedTile] = []
    for y in range(grid.height):
        for x in range(grid.width):
            if grid.at(x, y) is None:
                spawned.append(_spawn_at(world, grid, layout, rng, (x, y)))
    return spawned


def _spawn_at(world: World, grid: Grid, layout: BoardLayout, rng, cell: Cell) -> SpawnedTile:
    kind = random_kind(rng)
    spawn = layout.spawn_point(cell)
    tile = create_tile(world, kind, spawn)
    grid.put(cell[0], cell[1], tile)
    return SpawnedTile(tile=tile, cell=cell, kind=kind, spawn_position=spawn)


def discard_board(world: World, grid: Grid) -> List[int]:
    """Remove every tile entity, on the grid or not, and empty the grid."""
    grid.clear()
    stray = [entity for entity, _ in world.get_component(Tile)]
    for tile in stray:
        destroy_tile(world, tile)
    return stray


def rebuild_grid_from_scene(world: World, grid: Grid, layout: BoardLayout) -> List[int]:
    """Re-derive placement from tile views and snap the views onto their cells.

    Any in-flight motion is dropped since the view is re-aligned here.
    """
    live = [entity for entity, _ in world.get_component(Tile)]

    def position_of(tile: int) -> Cell:
        try:
            pos = world.component_for_entity(tile, WorldPosition)
        except KeyError:
            return (0, 0)
        return layout.world_to_cell(pos.as_tuple())

    lost = grid.rebuild_from_world(live, position_of)
    logger.debug("Rebuilt grid from %d scene tiles; %d displaced", len(live), len(lost))
    for cell, tile in grid.occupied():
        pos = world.component_for_entity(tile, WorldPosition)
        pos.x, pos.y = layout.cell_to_world(cell)
        if world.has_component(tile, MoveTween):
            world.remove_component(tile, MoveTween)
    return lost


def repair_after_rebuild(world: World, grid: Grid, layout: BoardLayout, rng, lost: Iterable[int]) -> List[SpawnedTile]:
    """Destroy tiles displaced by a rebuild and refill the holes they left."""
    for tile in lost:
        destroy_tile(world, tile)
    spawned = refill_empty_cells(world, grid, layout, rng)
    if spawned:
        logger.info("Refilled %d cell(s) left empty by a grid rebuild", len(spawned))
    return spawned


def announce_cleared(event_bus: EventBus, cleared: List[ClearedTile]) -> None:
    for entry in cleared:
        event_bus.emit(EVENT_TILE_DESTROYED, tile=entry.tile, cell=entry.cell)


def announce_moves(event_bus: EventBus, layout: BoardLayout, moves: List[FallMove], duration: float) -> None:
    for move in moves:
        event_bus.emit(EVENT_TILE_MOVE, tile=move.tile, target=layout.cell_to_world(move.target), duration=duration)


def announce_spawns(
    event_bus: EventBus, config: BoardConfig, layout: BoardLayout, spawned: List[SpawnedTile]
) -> None:
    for entry in spawned:
        event_bus.emit(
            EVENT_TILE_SPAWNED,
            tile=entry.tile,
            kind=entry.kind,
            color=config.color_for(entry.kind),
            position=entry.spawn_position,
        )
        event_bus.emit(
            EVENT_TILE_MOVE,
            tile=entry.tile,
            target=layout.cell_to_world(entry.cell),
            duration=config.fall_duration,
        )
