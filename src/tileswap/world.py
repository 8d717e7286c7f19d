import random

from esper import World
from .events.bus import EventBus
from tileswap.components.grid import Grid
from tileswap.components.resolver_state import ResolverState
from tileswap.config import BoardConfig
from tileswap.ui.layout import BoardLayout


def create_world(
    event_bus: EventBus,
    config: BoardConfig | None = None,
    *,
    rng: random.Random | None = None,
) -> World:
    """Build the esper world holding the board entity and shared resources.

    ``world.random`` is the tile random source; anything exposing
    ``randrange(n)`` works, which lets tests script the tile sequence.
    """
    config = config or BoardConfig()
    world = World()
    setattr(world, "random", rng or random.Random())
    setattr(world, "config", config)
    setattr(world, "layout", BoardLayout.from_config(config))

    # Single board entity carrying the grid and the cascade state.
    world.create_entity(
        Grid(width=config.width, height=config.height),
        ResolverState(),
    )
    return world


def get_grid(world: World) -> Grid:
    for _, grid in world.get_component(Grid):
        return grid
    raise RuntimeError("Grid not found")


def get_resolver_state(world: World) -> ResolverState:
    for _, state in world.get_component(ResolverState):
        return state
    raise RuntimeError("ResolverState not found")
