from blinker import Signal
from typing import Dict

class EventBus:
    """Simple event bus leveraging blinker Signal objects."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # Use weak=False to retain strong reference to bound methods so systems not kept in a variable still receive events.
        sig.connect(fn, weak=False)

    def unsubscribe(self, name: str, fn):
        sig = self._signals.get(name)
        if sig:
            sig.disconnect(fn)

    def emit(self, name: str, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# SYSTEM & TIMING
# ============================================================================
EVENT_TICK = "tick"                                # payload: dt=float


# ============================================================================
# INPUT & INTERACTION
# ============================================================================
EVENT_MOUSE_PRESS = "mouse_press"                  # payload: x, y, button
EVENT_KEY_PRESS = "key_press"                      # payload: symbol, modifiers
EVENT_TILE_CLICK = "tile_click"                    # payload: cell=(x,y)


# ============================================================================
# SELECTION & SWAPS
# ============================================================================
EVENT_TILE_SELECTED = "tile_selected"              # payload: tile=int, cell=(x,y)
EVENT_TILE_DESELECTED = "tile_deselected"          # payload: tile=int|None, cell=(x,y), reason=str
EVENT_TILE_SWAP_VALID = "tile_swap_valid"          # payload: src=(x,y), dst=(x,y), positions=[(x,y),...]
EVENT_TILE_SWAP_INVALID = "tile_swap_invalid"      # payload: src=(x,y), dst=(x,y)


# ============================================================================
# BOARD & CASCADE
# ============================================================================
EVENT_BOARD_GENERATED = "board_generated"          # payload: tiles=[(x,y),...]
EVENT_GAME_RESET = "game_reset"                    # payload: reason=str
EVENT_GRID_REBUILT = "grid_rebuilt"                # payload: reason=str, lost=[int,...], refilled=[(x,y),...]
EVENT_MATCH_FOUND = "match_found"                  # payload: positions=[(x,y),...], size=int, depth=int
EVENT_MATCH_CLEARED = "match_cleared"              # payload: positions=[(x,y),...], count=int, depth=int
EVENT_GRAVITY_APPLIED = "gravity_applied"          # payload: moves=[{'tile','from','to'},...]
EVENT_REFILL_COMPLETED = "refill_completed"        # payload: new_tiles=[(x,y),...]
EVENT_CASCADE_STEP = "cascade_step"                # payload: depth=int, positions=[(x,y),...], initial=bool
EVENT_CASCADE_COMPLETE = "cascade_complete"        # payload: depth=int, initial=bool, aborted=bool


# ============================================================================
# TILE VIEWS & ANIMATION
# ============================================================================
EVENT_TILE_SPAWNED = "tile_spawned"                # payload: tile=int, kind=TileKind, color=(r,g,b), position=(wx,wy)
EVENT_TILE_MOVE = "tile_move"                      # payload: tile=int, target=(wx,wy), duration=float
EVENT_TILE_DESTROYED = "tile_destroyed"            # payload: tile=int, cell=(x,y)|None
EVENT_ANIMATION_COMPLETE = "animation_complete"    # payload: kind=str, tiles=[int,...]


# ============================================================================
# SCORE
# ============================================================================
EVENT_SCORE_CHANGED = "score_changed"              # payload: score=int, delta=int
