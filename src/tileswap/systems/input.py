from tileswap.events.bus import EventBus, EVENT_MOUSE_PRESS, EVENT_TILE_CLICK

# Arcade uses 1 for the left mouse button.
LEFT_BUTTON = 1


class InputSystem:
    """Turns left clicks on the board into EVENT_TILE_CLICK with the hit cell."""
    def __init__(self, event_bus: EventBus, world):
        self.event_bus = event_bus
        self.world = world
        self.event_bus.subscribe(EVENT_MOUSE_PRESS, self.on_mouse_press)

    def on_mouse_press(self, sender, **kwargs):
        x = kwargs.get('x')
        y = kwargs.get('y')
        button = kwargs.get('button')
        if x is None or y is None:
            return
        # Other buttons fall through; InteractionSystem listens for right-click directly.
        if button != LEFT_BUTTON:
            return
        cell = self.hit_test(x, y)
        if cell is not None:
            self.event_bus.emit(EVENT_TILE_CLICK, cell=cell)

    def hit_test(self, x: float, y: float):
        return self.world.layout.hit_test((x, y))
