GRID_WIDTH = 8
GRID_HEIGHT = 8
CELL_SIZE = 64.0

WINDOW_WIDTH = 800
WINDOW_HEIGHT = 600

# World coordinate of the centre of cell (0, 0). With the defaults above the
# 8x8 board sits centred horizontally with a 44px bottom margin.
BOARD_ORIGIN = (176.0, 76.0)

# Palette size is fixed; kind colours must provide exactly this many entries.
KIND_COUNT = 6
DEFAULT_KIND_COLORS = (
    (214, 69, 65),    # red
    (88, 178, 92),    # green
    (66, 133, 214),   # blue
    (236, 201, 75),   # yellow
    (155, 89, 182),   # purple
    (235, 137, 52),   # orange
)

# Timings (seconds)
SWAP_DURATION = 0.12
FALL_DURATION = 0.10
STEP_DELAY = 0.06

SCORE_PER_TILE = 10
MAX_CASCADE_ITERATIONS = 64

# New tiles appear this many cells above their destination before falling in.
SPAWN_OFFSET_CELLS = 2.0

# Selected tiles render slightly enlarged.
HIGHLIGHT_SCALE = 1.12
TILE_RADIUS_FRACTION = 0.42

# Arcade key symbol for 'R' (arcade.key.R); starts a new game.
NEW_GAME_KEY = 114
