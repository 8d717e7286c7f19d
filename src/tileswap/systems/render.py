from typing import Any, Dict, Optional, Tuple

from esper import World

from tileswap.components.tile import Tile
from tileswap.components.world_position import WorldPosition
from tileswap.constants import HIGHLIGHT_SCALE, TILE_RADIUS_FRACTION
from tileswap.events.bus import (
    EventBus,
    EVENT_SCORE_CHANGED,
    EVENT_TILE_DESELECTED,
    EVENT_TILE_DESTROYED,
    EVENT_TILE_SELECTED,
)

BOARD_BACKGROUND = (30, 30, 40)
SCORE_COLOR = (255, 255, 255)
SCORE_FONT_SIZE = 18


class RenderSystem:
    """Draws tile views at their WorldPosition plus the score text.

    Arcade is imported lazily so the rest of the engine stays headless.
    """

    def __init__(self, world: World, event_bus: EventBus, window):
        self.world = world
        self.event_bus = event_bus
        self.window = window
        self.event_bus.subscribe(EVENT_TILE_SELECTED, self.on_tile_selected)
        self.event_bus.subscribe(EVENT_TILE_DESELECTED, self.on_tile_deselected)
        self.event_bus.subscribe(EVENT_TILE_DESTROYED, self.on_tile_destroyed)
        self.event_bus.subscribe(EVENT_SCORE_CHANGED, self.on_score_changed)
        self.highlighted: Optional[int] = None
        self.score_text = "Score: 0"
        self._last_tile_layout: Dict[int, Dict[str, Any]] = {}

    def on_tile_selected(self, sender, **kwargs):
        self.highlighted = kwargs.get('tile')

    def on_tile_deselected(self, sender, **kwargs):
        if kwargs.get('tile') == self.highlighted:
            self.highlighted = None

    def on_tile_destroyed(self, sender, **kwargs):
        if kwargs.get('tile') == self.highlighted:
            self.highlighted = None

    def on_score_changed(self, sender, **kwargs):
        score = kwargs.get('score')
        if score is None:
            return
        self.score_text = f"Score: {score}"

    def tile_layout(self) -> Dict[int, Dict[str, Any]]:
        """Draw parameters per tile entity: centre, radius and colour."""
        config = self.world.config
        base_radius = config.cell_size * TILE_RADIUS_FRACTION
        layout: Dict[int, Dict[str, Any]] = {}
        for ent, (tile, pos) in self.world.get_components(Tile, WorldPosition):
            radius = base_radius * HIGHLIGHT_SCALE if ent == self.highlighted else base_radius
            layout[ent] = {
                "center": (pos.x, pos.y),
                "radius": radius,
                "color": config.color_for(tile.kind),
                "highlighted": ent == self.highlighted,
            }
        return layout

    def process(self):
        # Local import keeps tests headless without creating a window.
        import arcade
        headless = False
        try:
            arcade.get_window()
        except Exception:
            headless = True
        self._last_tile_layout = self.tile_layout()
        if headless:
            return

        left, right, bottom, top = self.world.layout.bounds()
        arcade.draw_lrbt_rectangle_filled(left, right, bottom, top, BOARD_BACKGROUND)
        for entry in self._last_tile_layout.values():
            cx, cy = entry["center"]
            arcade.draw_circle_filled(cx, cy, entry["radius"], entry["color"])
            if entry["highlighted"]:
                arcade.draw_circle_outline(cx, cy, entry["radius"], SCORE_COLOR, 2)
        text_x, text_y = self.score_anchor()
        arcade.draw_text(self.score_text, text_x, text_y, SCORE_COLOR, SCORE_FONT_SIZE)

    def score_anchor(self) -> Tuple[float, float]:
        left, _, _, top = self.world.layout.bounds()
        return (left, top + 12)
