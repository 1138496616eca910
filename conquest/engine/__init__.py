"""
Dice Conquest Territory Control Engine
Core engine without web framework or UI: adjacency graph, turn/capture rules, viewport math.
"""

TOTAL_PLAYERS = 4
WIN_THRESHOLD = 15  # captured regions
STARTING_TERRITORIES_PER_PLAYER = 1

DICE_SIDES = 6
CAPTURE_ROLL = 6  # only this face opens the capture phase

NEUTRAL = 0  # owner id of an uncaptured region

# Viewport
MIN_SCALE = 0.5
MAX_SCALE = 10.0
ZOOM_SPEED = 1.1
DEFAULT_FOCUS_SCALE = 3.0

# Bounding boxes closer than this (content units) count as touching
ADJACENCY_TOLERANCE = 1.0
