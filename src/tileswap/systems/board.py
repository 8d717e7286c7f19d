import logging
from typing import List

from esper import World

from tileswap.events.bus import (
    EventBus,
    EVENT_BOARD_GENERATED,
    EVENT_GAME_RESET,
    EVENT_KEY_PRESS,
    EVENT_SCORE_CHANGED,
    EVENT_TILE_DESTROYED,
)
from tileswap.constants import NEW_GAME_KEY
from tileswap.errors import ConfigurationError
from tileswap.systems.board_ops import SpawnedTile, announce_spawns, discard_board, generate_board
from tileswap.world import get_grid, get_resolver_state

logger = logging.getLogger(__name__)


class BoardSystem:
    """Owns board lifecycle: config check, generation, seeding hand-off and restarts."""

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        self.started = False
        self.event_bus.subscribe(EVENT_KEY_PRESS, self.on_key_press)

    def on_key_press(self, sender, **kwargs):
        if kwargs.get('symbol') == NEW_GAME_KEY:
            self.new_game()

    def start(self) -> None:
        """Generate a board and run the seeding cascade.

        Raises ConfigurationError (after logging it) when the configuration is
        unusable; nothing is spawned in that case.
        """
        try:
            self.world.config.validate()
        except ConfigurationError as exc:
            logger.error("Refusing to start: %s", exc)
            raise
        spawned = self.generate()
        self.started = True
        self.event_bus.emit(EVENT_SCORE_CHANGED, score=get_resolver_state(self.world).score, delta=0)
        # CascadeSystem begins the seeding pass on this event.
        self.event_bus.emit(EVENT_BOARD_GENERATED, tiles=[entry.cell for entry in spawned])

    def generate(self) -> List[SpawnedTile]:
        grid = get_grid(self.world)
        for tile in discard_board(self.world, grid):
            self.event_bus.emit(EVENT_TILE_DESTROYED, tile=tile, cell=None)
        spawned = generate_board(self.world, grid, self.world.layout, self.world.random)
        announce_spawns(self.event_bus, self.world.config, self.world.layout, spawned)
        return spawned

    def new_game(self) -> None:
        logger.info("Starting a new game")
        self.event_bus.emit(EVENT_GAME_RESET, reason='new_game')
        get_resolver_state(self.world).reset()
        self.start()
