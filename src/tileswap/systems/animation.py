from esper import World

from tileswap.components.move_tween import MoveTween
from tileswap.components.world_position import WorldPosition
from tileswap.events.bus import EventBus, EVENT_ANIMATION_COMPLETE, EVENT_TICK, EVENT_TILE_MOVE


class AnimationSystem:
    """Drives tile view tweens. Each moving tile carries one MoveTween component.

    Tweens only touch WorldPosition, never the grid.
    """
    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        event_bus.subscribe(EVENT_TICK, self.on_tick)
        event_bus.subscribe(EVENT_TILE_MOVE, self.on_tile_move)

    def on_tile_move(self, sender, **kwargs):
        tile = kwargs.get('tile'); target = kwargs.get('target')
        if tile is None or target is None:
            return
        try:
            pos = self.world.component_for_entity(tile, WorldPosition)
        except KeyError:
            # Tile already destroyed.
            return
        duration = float(kwargs.get('duration', 0.0))
        # Adding a component of the same type replaces the in-flight tween.
        self.world.add_component(tile, MoveTween(start=pos.as_tuple(), target=tuple(target), duration=duration))

    def on_tick(self, sender, **kwargs):
        dt = kwargs.get('dt', 1/60)
        finished = []
        for ent, (tween, pos) in list(self.world.get_components(MoveTween, WorldPosition)):
            tween.elapsed += dt
            p = tween.progress
            pos.x = tween.start[0] + (tween.target[0] - tween.start[0]) * p
            pos.y = tween.start[1] + (tween.target[1] - tween.start[1]) * p
            if p >= 1.0:
                pos.x, pos.y = tween.target
                finished.append(ent)
        for ent in finished:
            self.world.remove_component(ent, MoveTween)
        if finished:
            self.event_bus.emit(EVENT_ANIMATION_COMPLETE, kind='move', tiles=finished)
