"""
Single place for runtime/deployment configuration.
Game rules are fixed constants in conquest.engine; only how the game is served and started lives here.
"""
import os

# Map id from conquest/data/maps/<id>.json or <id>.svg. Default for new games when no map_id is given.
DEFAULT_MAP_ID = os.environ.get("CONQUEST_DEFAULT_MAP", "grid_20")

# Debug mode: every die roll shows 6 (handy for exercising the capture phase by hand)
DEBUG_DICE = os.environ.get("CONQUEST_DEBUG", "").lower() in ("1", "true", "yes")

LOG_LEVEL = os.environ.get("CONQUEST_LOG_LEVEL", "INFO")

API_HOST = os.environ.get("CONQUEST_HOST", "127.0.0.1")
API_PORT = int(os.environ.get("CONQUEST_PORT", "8000"))

# Comma-separated list of allowed frontend origins
CORS_ORIGINS = [
    o.strip()
    for o in os.environ.get(
        "CONQUEST_CORS_ORIGINS", "http://localhost:5173,http://localhost:3000"
    ).split(",")
    if o.strip()
]

# Used until the frontend reports the real size of the map element
DEFAULT_VIEWPORT_WIDTH = 800.0
DEFAULT_VIEWPORT_HEIGHT = 600.0
