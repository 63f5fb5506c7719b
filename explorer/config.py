from __future__ import annotations

# Window
WINDOW_WIDTH = 1280
WINDOW_HEIGHT = 720
WINDOW_TITLE = "Procedural Forest Explorer"
FPS_CAP = 0  # 0 = uncapped

# App
APP_VERSION = "0.4.0"

# Seeds (terrain and placement must differ)
DEFAULT_SEED = 12345
DEFAULT_TREE_SEED = 54321

# Terrain / chunks
DEFAULT_CHUNK_SIZE = 32.0
DEFAULT_RENDER_DISTANCE = 3  # Chebyshev radius in chunks
DEFAULT_HEIGHT_SCALE = 5.0
DEFAULT_NOISE_SCALE = 0.1
DEFAULT_CHUNK_RESOLUTION = 32  # grid cells per chunk edge
DEFAULT_NOISE = "simplex"

# Player
DEFAULT_MOVE_SPEED = 5.0
DEFAULT_SPRINT_MULTIPLIER = 2.0
DEFAULT_MOUSE_SENSITIVITY = 0.002
DEFAULT_EYE_HEIGHT = 2.5  # minimal clearance above terrain
DEFAULT_GRAVITY = 9.8
DEFAULT_MOVE_ACCEL = 20.0
DEFAULT_MOVE_DAMPING = 0.9
PITCH_LIMIT = 1.4  # radians
START_POSITION = (0.0, 5.0, 0.0)

# Trees
DEFAULT_TREES = True
DEFAULT_TREE_DENSITY = 0.3
DEFAULT_TREE_SPAWN_DISTANCE = 50.0
DEFAULT_TREE_MIN_HEIGHT = 2.0
DEFAULT_TREE_MAX_HEIGHT = 4.0

# Rendering
FOV_DEG = 75.0
NEAR = 0.1
FAR = 400.0
CLEAR_COLOR = (0.5, 0.7, 1.0)
FOG_COLOR = (0.7, 0.8, 0.9)
DEFAULT_FOG_START = 30.0
DEFAULT_FOG_END = 100.0
LIGHT_DIR = (0.35, 0.9, 0.2)  # will be normalized in shader
