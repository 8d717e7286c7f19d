"""Entry point for the tileswap match-three board.

Sets up ECS world, event bus, systems, and Arcade window.
"""
import logging

from arcade import Window, run, color
from tileswap.world import create_world
from tileswap.config import BoardConfig
from tileswap.constants import WINDOW_WIDTH, WINDOW_HEIGHT
from tileswap.events.bus import EVENT_TICK, EventBus, EVENT_MOUSE_PRESS, EVENT_KEY_PRESS
from tileswap.systems.animation import AnimationSystem
from tileswap.systems.board import BoardSystem
from tileswap.systems.cascade import CascadeSystem
from tileswap.systems.input import InputSystem
from tileswap.systems.interaction import InteractionSystem
from tileswap.systems.render import RenderSystem
from tileswap.systems.score import ScoreSystem

class TileswapWindow(Window):
    def __init__(self, config: BoardConfig | None = None):
        super().__init__(WINDOW_WIDTH, WINDOW_HEIGHT, "Tileswap")
        self.set_update_rate(1/60)
        self.event_bus = EventBus()
        self.world = create_world(self.event_bus, config)

        # Board and rule systems
        self.cascade_system = CascadeSystem(self.world, self.event_bus)
        self.score_system = ScoreSystem(self.world, self.event_bus)
        self.interaction_system = InteractionSystem(self.world, self.event_bus)
        self.board_system = BoardSystem(self.world, self.event_bus)

        # Presentation systems
        self.animation_system = AnimationSystem(self.world, self.event_bus)
        self.render_system = RenderSystem(self.world, self.event_bus, self)
        self.input_system = InputSystem(self.event_bus, self.world)

        self.background_color = color.BLACK
        self.board_system.start()

    def on_draw(self):
        self.clear()
        self.render_system.process()

    def on_update(self, delta_time: float):
        self.event_bus.emit(EVENT_TICK, dt=delta_time)

    def on_mouse_press(self, x: float, y: float, button: int, modifiers: int):
        self.event_bus.emit(EVENT_MOUSE_PRESS, x=x, y=y, button=button)

    def on_key_press(self, symbol: int, modifiers: int):
        self.event_bus.emit(EVENT_KEY_PRESS, symbol=symbol, modifiers=modifiers)


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    window = TileswapWindow()
    run()

if __name__ == "__main__":
    main()
