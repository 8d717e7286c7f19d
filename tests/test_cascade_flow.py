import logging

from tileswap.events.bus import (
    EVENT_CASCADE_COMPLETE,
    EVENT_CASCADE_STEP,
    EVENT_GRAVITY_APPLIED,
    EVENT_GRID_REBUILT,
    EVENT_MATCH_CLEARED,
    EVENT_MATCH_FOUND,
    EVENT_REFILL_COMPLETED,
    EVENT_SCORE_CHANGED,
    EVENT_TICK,
    EVENT_TILE_DESTROYED,
    EVENT_TILE_MOVE,
    EVENT_TILE_SPAWNED,
)
from tileswap.systems import cascade as cascade_module
from tileswap.systems.board_ops import kind_lookup
from tileswap.systems.cascade import CascadeSystem
from tileswap.systems.matcher import find_all_matches
from tileswap.systems.score import ScoreSystem
from tileswap.world import get_grid, get_resolver_state
from tests.helpers import Recorder, ScriptedRandom, board_rows, letters, load_board, make_world

CHAIN_BOARD = [
    'B F E F C',
    'E C D B F',
    'D C E F B',
    'A A A B D',
    'B C D E F',
]
CHAIN_REFILLS = letters('A', 'D', 'B', 'A', 'C', 'E')


def setup(width, height, rows, refills, **config):
    bus, world = make_world(width, height, rng=ScriptedRandom(refills), **config)
    load_board(world, rows)
    cascade = CascadeSystem(world, bus)
    ScoreSystem(world, bus)
    return bus, world, cascade


def test_trivial_row_match_clears_and_refills():
    bus, world, cascade = setup(3, 1, ['A A A'], letters('B', 'C', 'D'))
    destroyed = Recorder(bus, EVENT_TILE_DESTROYED)
    spawned = Recorder(bus, EVENT_TILE_SPAWNED)
    cascade.begin()
    assert board_rows(world) == ['B C D']
    assert len(destroyed.events) == 3
    assert [e['kind'].index for e in spawned.events] == letters('B', 'C', 'D')
    state = get_resolver_state(world)
    assert state.score == 30
    assert not state.busy


def test_cross_match_scores_five_tiles():
    rows = [
        'B A C',
        'A A A',
        'D A E',
    ]
    bus, world, cascade = setup(3, 3, rows, letters('E', 'F', 'A', 'D', 'B'))
    cleared = Recorder(bus, EVENT_MATCH_CLEARED)
    cascade.begin()
    assert cleared.events[0]['count'] == 5
    assert get_resolver_state(world).score == 50
    assert board_rows(world) == ['E D B', 'B A C', 'D F E']


def test_chain_cascade_runs_two_iterations():
    bus, world, cascade = setup(5, 5, CHAIN_BOARD, CHAIN_REFILLS)
    steps = Recorder(bus, EVENT_CASCADE_STEP)
    cleared = Recorder(bus, EVENT_MATCH_CLEARED)
    complete = Recorder(bus, EVENT_CASCADE_COMPLETE)
    cascade.begin()
    assert [e['depth'] for e in steps.events] == [1, 2]
    assert steps.events[0]['positions'] == [(0, 1), (1, 1), (2, 1)]
    assert steps.events[1]['positions'] == [(1, 0), (1, 1), (1, 2)]
    assert sum(e['count'] for e in cleared.events) == 6
    assert get_resolver_state(world).score == 60
    assert complete.last == {'depth': 2, 'initial': False, 'aborted': False}
    assert board_rows(world) == [
        'A E B F C',
        'B C E B F',
        'E A D F B',
        'D D E B D',
        'B F D E F',
    ]


def test_board_is_stable_after_cascade():
    bus, world, cascade = setup(5, 5, CHAIN_BOARD, CHAIN_REFILLS)
    cascade.begin()
    grid = get_grid(world)
    assert grid.is_dense()
    assert find_all_matches(grid, kind_lookup(world)) == set()
    tiles = grid.tiles()
    assert len(tiles) == len(set(tiles))


def test_iteration_guard_stops_cascade(caplog):
    bus, world, cascade = setup(5, 5, CHAIN_BOARD, CHAIN_REFILLS, max_cascade_iterations=1)
    complete = Recorder(bus, EVENT_CASCADE_COMPLETE)
    with caplog.at_level(logging.WARNING):
        cascade.begin()
    state = get_resolver_state(world)
    assert not state.busy
    assert state.score == 30
    assert complete.last['aborted'] is True
    assert not cascade.running
    assert "Cascade stopped after 1 iterations" in caplog.text


def test_phases_run_in_order():
    bus, world, cascade = setup(3, 1, ['A A A'], letters('B', 'C', 'D'))
    order = []
    for name in (EVENT_CASCADE_STEP, EVENT_MATCH_FOUND, EVENT_MATCH_CLEARED,
                 EVENT_GRAVITY_APPLIED, EVENT_REFILL_COMPLETED, EVENT_CASCADE_COMPLETE):
        bus.subscribe(name, lambda sender, _name=name, **kwargs: order.append(_name))
    cascade.begin()
    assert order == [
        EVENT_CASCADE_STEP,
        EVENT_MATCH_FOUND,
        EVENT_MATCH_CLEARED,
        EVENT_GRAVITY_APPLIED,
        EVENT_REFILL_COMPLETED,
        EVENT_CASCADE_COMPLETE,
    ]


def test_step_delay_paces_phases_on_tick():
    bus, world, cascade = setup(3, 1, ['A A A'], letters('B', 'C', 'D'), step_delay=0.06)
    grid = get_grid(world)
    state = get_resolver_state(world)
    cascade.begin()
    assert state.busy and cascade.running
    assert grid.at(0, 0) is not None, 'clear must wait for the first pause'
    bus.emit(EVENT_TICK, dt=0.05)
    assert grid.at(0, 0) is not None
    bus.emit(EVENT_TICK, dt=0.02)
    assert grid.empty_cells() == [(0, 0), (1, 0), (2, 0)]
    bus.emit(EVENT_TICK, dt=0.06)  # collapse
    bus.emit(EVENT_TICK, dt=0.06)  # refill
    assert grid.is_dense()
    assert state.busy
    bus.emit(EVENT_TICK, dt=0.06)  # final scan
    assert not state.busy and not cascade.running
    assert state.score == 30


def test_run_until_idle_ignores_pacing():
    bus, world, cascade = setup(5, 5, CHAIN_BOARD, CHAIN_REFILLS, step_delay=0.5)
    cascade.begin()
    assert cascade.running
    cascade.run_until_idle()
    assert not cascade.running
    assert get_resolver_state(world).score == 60


def test_begin_while_running_is_ignored():
    bus, world, cascade = setup(3, 1, ['A A A'], letters('B', 'C', 'D'), step_delay=0.06)
    steps = Recorder(bus, EVENT_CASCADE_STEP)
    cascade.begin()
    cascade.begin()
    cascade.run_until_idle()
    assert len(steps.events) == 1


def test_collapse_and_refill_emit_motion_events():
    bus, world, cascade = setup(1, 4, ['D', 'A', 'A', 'A'], letters('B', 'C', 'E'))
    moves = Recorder(bus, EVENT_TILE_MOVE)
    cascade.begin()
    layout = world.layout
    targets = [e['target'] for e in moves.events]
    # D falls from y=3 to y=0, then three spawns fall into y=1..3.
    assert targets == [layout.cell_to_world((0, y)) for y in range(4)]
    assert all(e['duration'] == world.config.fall_duration for e in moves.events)


def test_score_updates_once_per_cleared_set():
    bus, world, cascade = setup(5, 5, CHAIN_BOARD, CHAIN_REFILLS)
    scores = Recorder(bus, EVENT_SCORE_CHANGED)
    cascade.begin()
    assert [e['score'] for e in scores.events] == [30, 60]
    assert [e['delta'] for e in scores.events] == [30, 30]


def test_long_tick_resumes_only_one_phase():
    bus, world, cascade = setup(3, 1, ['A A A'], letters('B', 'C', 'D'), step_delay=0.06)
    cleared = Recorder(bus, EVENT_MATCH_CLEARED)
    gravity = Recorder(bus, EVENT_GRAVITY_APPLIED)
    refilled = Recorder(bus, EVENT_REFILL_COMPLETED)
    cascade.begin()
    bus.emit(EVENT_TICK, dt=0.3)
    assert len(cleared.events) == 1
    assert gravity.events == [] and refilled.events == []
    assert get_resolver_state(world).busy
    bus.emit(EVENT_TICK, dt=0.3)
    assert len(gravity.events) == 1 and refilled.events == []
    bus.emit(EVENT_TICK, dt=0.3)
    bus.emit(EVENT_TICK, dt=0.3)
    assert not get_resolver_state(world).busy


def test_refilled_rebuild_hands_matches_to_cascade():
    bus, world, cascade = setup(3, 1, ['A A A'], letters('B', 'C', 'D'))
    bus.emit(EVENT_GRID_REBUILT, reason='interaction', lost=[], refilled=[(0, 0)])
    assert board_rows(world) == ['B C D']
    assert not cascade.running


def test_rebuild_without_refill_leaves_board_alone():
    bus, world, cascade = setup(3, 1, ['A A A'], letters('B', 'C', 'D'))
    bus.emit(EVENT_GRID_REBUILT, reason='interaction', lost=[], refilled=[])
    assert board_rows(world) == ['A A A']


def test_run_breakdown_only_computed_for_debug_logging(monkeypatch, caplog):
    calls = []
    real = cascade_module.find_match_runs

    def counting(grid, kind_of):
        calls.append(grid)
        return real(grid, kind_of)

    monkeypatch.setattr(cascade_module, 'find_match_runs', counting)
    caplog.set_level(logging.INFO, logger='tileswap.systems.cascade')
    bus, world, cascade = setup(3, 1, ['A A A'], letters('B', 'C', 'D'))
    cascade.begin()
    assert calls == []
    caplog.set_level(logging.DEBUG, logger='tileswap.systems.cascade')
    bus, world, cascade = setup(3, 1, ['A A A'], letters('B', 'C', 'D'))
    cascade.begin()
    assert len(calls) == 1
    assert "Cascade step 1" in caplog.text
