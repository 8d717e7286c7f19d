from esper import World

from tileswap.events.bus import EventBus, EVENT_MATCH_CLEARED, EVENT_SCORE_CHANGED
from tileswap.world import get_resolver_state


class ScoreSystem:
    """Awards ``score_per_tile`` for each cleared tile while scoring is enabled."""

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        self.event_bus.subscribe(EVENT_MATCH_CLEARED, self.on_match_cleared)

    @property
    def score(self) -> int:
        return get_resolver_state(self.world).score

    def on_match_cleared(self, sender, **kwargs):
        count = kwargs.get('count')
        if count is None:
            count = len(kwargs.get('positions') or [])
        state = get_resolver_state(self.world)
        delta = 0
        if state.scoring_enabled and count > 0:
            delta = count * self.world.config.score_per_tile
            state.score += delta
        # One update per cleared set, even while seeding keeps scoring off.
        self.event_bus.emit(EVENT_SCORE_CHANGED, score=state.score, delta=delta)
