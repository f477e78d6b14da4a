"""
TOWERRISK DEFINITIONS
=====================
Central constants and type definitions for the tower-avoidance planner.

This file is the SINGLE SOURCE OF TRUTH for:
- Tower weapon and vision defaults
- Cell content categories reported by the host's vision input
- Movement deltas and compass directions
- Persistence format identifiers

Import from here instead of duplicating constants across modules.

"""

from enum import Enum, IntEnum
from typing import Dict, List, Tuple

# ==========================================
# TOWER MODEL DEFAULTS
# ==========================================

TOWER_RANGE: int = 4                  # Circular weapon range (Euclidean, cells)
TOWER_ACCURACY: float = 0.75          # Per-shot hit chance of a real tower
INITIAL_TOWER_DENSITY: float = 0.01   # Uniform prior for every cell
VISION_RANGE: int = 2                 # Half-width of a unit's square view
MIN_STEP_RISK: float = 0.01           # Heuristic scale, per Chebyshev step
RANDOM_WALK_PROB: float = 0.75        # Chance of a random step after a hit

# Coordinate type used across the package: (x, y), y grows southward
GridCoord = Tuple[int, int]


# ==========================================
# VISION INPUT
# ==========================================

class CellContent(IntEnum):
    """What the host reports occupying a cell inside a unit's view."""
    EMPTY = 0           # Nothing there
    RESOURCE = 1        # Harvestable resource (gold mine etc.), walkable around
    OBSTACLE = 2        # Terrain blocking movement (trees)
    TOWER = 3           # Hostile tower, certain death to path through
    UNIT = 4            # Any other unit
    STRUCTURE = 5       # Friendly structure (town hall), impassable rally point


# ==========================================
# MOVEMENT
# ==========================================

class Direction(Enum):
    """Compass directions for a one-cell move (north is -y)."""
    NORTH = (0, -1)
    NORTHEAST = (1, -1)
    EAST = (1, 0)
    SOUTHEAST = (1, 1)
    SOUTH = (0, 1)
    SOUTHWEST = (-1, 1)
    WEST = (-1, 0)
    NORTHWEST = (-1, -1)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dy(self) -> int:
        return self.value[1]


DELTA_TO_DIRECTION: Dict[GridCoord, Direction] = {d.value: d for d in Direction}

# 8-connected neighbour offsets in a fixed scan order (x-major, like the grid scans)
NEIGHBOR_DELTAS: List[GridCoord] = [
    (dx, dy)
    for dx in (-1, 0, 1)
    for dy in (-1, 0, 1)
    if not (dx == 0 and dy == 0)
]


def direction_from_delta(dx: int, dy: int) -> Direction:
    """
    Map a single-cell move to its compass direction.

    Raises:
        ValueError: if (dx, dy) is not one of the 8 unit moves
    """
    try:
        return DELTA_TO_DIRECTION[(dx, dy)]
    except KeyError:
        raise ValueError(f"No direction for move delta ({dx}, {dy})") from None


# ==========================================
# PERSISTENCE
# ==========================================

BOARD_FORMAT_VERSION: int = 1
BOARD_FILE_SUFFIX: str = ".board"
