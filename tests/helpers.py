from __future__ import annotations

from itertools import cycle
from typing import Iterable, Sequence

from esper import World

from tileswap.components.tile import Tile, TileKind
from tileswap.config import BoardConfig
from tileswap.events.bus import EventBus
from tileswap.systems.board_ops import create_tile
from tileswap.world import create_world, get_grid, get_resolver_state

# Palette labels used in board sketches.
LETTER_TO_KIND = {
    'A': TileKind.RED,
    'B': TileKind.GREEN,
    'C': TileKind.BLUE,
    'D': TileKind.YELLOW,
    'E': TileKind.PURPLE,
    'F': TileKind.ORANGE,
}
KIND_TO_LETTER = {kind: letter for letter, kind in LETTER_TO_KIND.items()}


class ScriptedRandom:
    """Random source replaying a fixed sequence of palette indices."""

    def __init__(self, values: Iterable[int]):
        self._values = cycle(list(values))
        self.calls = 0

    def randrange(self, n: int) -> int:
        self.calls += 1
        return next(self._values) % n


def letters(*names: str) -> list[int]:
    """Palette indices for letters, e.g. letters('A', 'D') -> [0, 3]."""
    return [LETTER_TO_KIND[name].index for name in names]


def make_world(width: int, height: int, *, rng=None, **config) -> tuple[EventBus, World]:
    config.setdefault('step_delay', 0.0)
    bus = EventBus()
    world = create_world(bus, BoardConfig(width=width, height=height, **config), rng=rng)
    return bus, world


def load_board(world: World, rows: Sequence[str], *, at_rest: bool = True) -> dict[tuple[int, int], int]:
    """Place tiles from a sketch written top row first; '.' leaves a cell empty.

    Tiles are created sitting on their cells. With ``at_rest`` the resolver
    state is set to the post-seeding values so input is accepted.
    """
    grid = get_grid(world)
    layout = world.layout
    assert len(rows) == grid.height
    placed = {}
    for row_index, row in enumerate(rows):
        y = grid.height - 1 - row_index
        cells = row.split()
        assert len(cells) == grid.width
        for x, letter in enumerate(cells):
            if letter == '.':
                continue
            tile = create_tile(world, LETTER_TO_KIND[letter], layout.cell_to_world((x, y)))
            grid.put(x, y, tile)
            placed[(x, y)] = tile
    if at_rest:
        state = get_resolver_state(world)
        state.busy = False
        state.scoring_enabled = True
    return placed


def board_rows(world: World) -> list[str]:
    """Inverse of load_board: sketch of the current grid, top row first."""
    grid = get_grid(world)
    rows = []
    for y in reversed(range(grid.height)):
        cells = []
        for x in range(grid.width):
            tile = grid.at(x, y)
            cells.append('.' if tile is None else KIND_TO_LETTER[world.component_for_entity(tile, Tile).kind])
        rows.append(' '.join(cells))
    return rows


class Recorder:
    """Collects payloads of one event name."""

    def __init__(self, bus: EventBus, name: str):
        self.events: list[dict] = []
        bus.subscribe(name, self)

    def __call__(self, sender, **kwargs):
        self.events.append(kwargs)

    @property
    def last(self) -> dict | None:
        return self.events[-1] if self.events else None
