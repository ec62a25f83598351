import os

# Window settings for the pygame host
SCREEN_WIDTH = 1000
SCREEN_HEIGHT = 900
FPS = 60
GAME_TITLE = "Hex Beacons"

# Constants for hex grid
HEX_SIZE = 36  # Radius from center to vertex, in board-logical pixels
GRID_RADIUS = 7  # Cells with max(|q|,|r|,|s|) < GRID_RADIUS are on the board

# Pointer gesture thresholds
CLICK_THRESHOLD_MS = 200  # Max press duration for a click
CLICK_DISTANCE_THRESHOLD = 5  # Max pointer travel (px) for a click; beyond it a drag starts
HIT_RADIUS_FACTOR = 1.2  # Hit test reaches this multiple of the piece radius

# Stacking
DRAG_Z_INDEX = 10 ** 9  # Transient z-index of a piece while it is dragged
DOMINANT_Z_OFFSET = 1000

# Beacon chains
BEACON_SELECTION_TIMEOUT_MS = 30000
BEACON_CHAIN_OWNER_AWARE = True

ASSET_PATH: str = os.path.abspath(os.path.join(os.path.dirname(__file__), 'assets'))
