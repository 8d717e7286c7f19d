from __future__ import annotations

import logging
from typing import Iterator, Optional

from esper import World

from tileswap.events.bus import (
    EventBus,
    EVENT_BOARD_GENERATED,
    EVENT_CASCADE_COMPLETE,
    EVENT_CASCADE_STEP,
    EVENT_GAME_RESET,
    EVENT_GRAVITY_APPLIED,
    EVENT_GRID_REBUILT,
    EVENT_MATCH_CLEARED,
    EVENT_MATCH_FOUND,
    EVENT_REFILL_COMPLETED,
    EVENT_SCORE_CHANGED,
    EVENT_TICK,
    EVENT_TILE_SWAP_VALID,
)
from tileswap.systems.board_ops import (
    announce_cleared,
    announce_moves,
    announce_spawns,
    clear_cells,
    collapse_columns,
    kind_lookup,
    refill_empty_cells,
)
from tileswap.systems.matcher import find_all_matches, find_match_runs, run_lengths
from tileswap.world import get_grid, get_resolver_state

logger = logging.getLogger(__name__)


class CascadeSystem:
    """Runs the clear -> collapse -> refill -> re-scan loop until the board is stable.

    The loop is a generator that yields the pause (``step_delay``) it wants
    before its next phase; ``EVENT_TICK`` resumes it once enough time has
    passed. The rule phases themselves are the synchronous functions in
    ``board_ops``. ``ResolverState.busy`` is held for the whole run.
    """

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        self._runner: Optional[Iterator[float]] = None
        self._wait = 0.0
        self.depth = 0
        self.event_bus.subscribe(EVENT_TICK, self.on_tick)
        self.event_bus.subscribe(EVENT_TILE_SWAP_VALID, self.on_swap_valid)
        self.event_bus.subscribe(EVENT_BOARD_GENERATED, self.on_board_generated)
        self.event_bus.subscribe(EVENT_GAME_RESET, self.on_game_reset)
        self.event_bus.subscribe(EVENT_GRID_REBUILT, self.on_grid_rebuilt)

    @property
    def running(self) -> bool:
        return self._runner is not None

    def begin(self, *, initial: bool = False) -> None:
        if self._runner is not None:
            # Already resolving; the running loop re-scans before it stops.
            return
        state = get_resolver_state(self.world)
        state.busy = True
        state.scoring_enabled = not initial
        self.depth = 0
        self._wait = 0.0
        self._runner = self._resolve(initial)
        self._advance()

    def cancel(self) -> None:
        if self._runner is not None:
            self._runner.close()
        self._runner = None
        self._wait = 0.0

    def run_until_idle(self) -> None:
        """Drain the cascade immediately, ignoring the pacing delays."""
        while self._runner is not None:
            try:
                next(self._runner)
            except StopIteration:
                self._runner = None
        self._wait = 0.0

    def on_swap_valid(self, sender, **kwargs):
        self.begin()

    def on_board_generated(self, sender, **kwargs):
        self.begin(initial=True)

    def on_game_reset(self, sender, **kwargs):
        self.cancel()

    def on_grid_rebuilt(self, sender, **kwargs):
        # Cells refilled by a repair may have formed matches.
        if kwargs.get('refilled'):
            self.begin()

    def on_tick(self, sender, **kwargs):
        if self._runner is None:
            return
        dt = kwargs.get('dt', 1/60)
        self._wait -= dt
        if self._wait > 0.0:
            return
        # At most one paused phase per tick, however long the tick was.
        self._step()
        self._advance()

    def _step(self) -> None:
        try:
            self._wait = next(self._runner)
        except StopIteration:
            self._runner = None
            self._wait = 0.0

    def _advance(self) -> None:
        # Only zero-length pauses chain within one call.
        while self._runner is not None and self._wait <= 0.0:
            self._step()

    def _resolve(self, initial: bool) -> Iterator[float]:
        world = self.world
        bus = self.event_bus
        config = world.config
        layout = world.layout
        grid = get_grid(world)
        state = get_resolver_state(world)
        kind_of = kind_lookup(world)
        delay = config.step_delay
        aborted = False

        while True:
            matches = find_all_matches(grid, kind_of)
            if not matches:
                break
            if self.depth >= config.max_cascade_iterations:
                logger.warning(
                    "Cascade stopped after %d iterations with %d cells still matched",
                    self.depth, len(matches),
                )
                aborted = True
                break
            self.depth += 1
            positions = sorted(matches)
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("Cascade step %d: runs %s", self.depth, run_lengths(find_match_runs(grid, kind_of)))
            bus.emit(EVENT_CASCADE_STEP, depth=self.depth, positions=positions, initial=initial)
            bus.emit(EVENT_MATCH_FOUND, positions=positions, size=len(positions), depth=self.depth)

            yield delay

            cleared = clear_cells(world, grid, matches)
            announce_cleared(bus, cleared)
            bus.emit(
                EVENT_MATCH_CLEARED,
                positions=[entry.cell for entry in cleared],
                count=len(cleared),
                depth=self.depth,
            )

            yield delay

            moves = collapse_columns(grid)
            announce_moves(bus, layout, moves, config.fall_duration)
            bus.emit(
                EVENT_GRAVITY_APPLIED,
                moves=[{'tile': m.tile, 'from': m.source, 'to': m.target} for m in moves],
            )

            yield delay

            spawned = refill_empty_cells(world, grid, layout, world.random)
            announce_spawns(bus, config, layout, spawned)
            bus.emit(EVENT_REFILL_COMPLETED, new_tiles=[entry.cell for entry in spawned])

            yield delay

        if initial:
            state.score = 0
            state.scoring_enabled = True
            bus.emit(EVENT_SCORE_CHANGED, score=0, delta=0)
        state.busy = False
        logger.debug("Cascade complete after %d step(s)", self.depth)
        bus.emit(EVENT_CASCADE_COMPLETE, depth=self.depth, initial=initial, aborted=aborted)
