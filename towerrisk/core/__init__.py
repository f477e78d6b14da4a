"""
TOWERRISK Core Module
=====================

Constants, enums and configuration shared by every other subpackage.

Usage:
    from towerrisk.core import TowerModelConfig, CellContent, Direction
"""

from towerrisk.core.definitions import (
    TOWER_RANGE,
    TOWER_ACCURACY,
    INITIAL_TOWER_DENSITY,
    VISION_RANGE,
    MIN_STEP_RISK,
    RANDOM_WALK_PROB,
    GridCoord,
    CellContent,
    Direction,
    NEIGHBOR_DELTAS,
    direction_from_delta,
    BOARD_FORMAT_VERSION,
    BOARD_FILE_SUFFIX,
)
from towerrisk.core.config import TowerModelConfig

__all__ = [
    'TOWER_RANGE',
    'TOWER_ACCURACY',
    'INITIAL_TOWER_DENSITY',
    'VISION_RANGE',
    'MIN_STEP_RISK',
    'RANDOM_WALK_PROB',
    'GridCoord',
    'CellContent',
    'Direction',
    'NEIGHBOR_DELTAS',
    'direction_from_delta',
    'BOARD_FORMAT_VERSION',
    'BOARD_FILE_SUFFIX',
    'TowerModelConfig',
]
