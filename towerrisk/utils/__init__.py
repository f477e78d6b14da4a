"""
Utility Module for TOWERRISK
============================

Components:
    - Persistence: byte-blob and file round-trip of belief grids
"""

from .persistence import (
    serialize_grid,
    deserialize_grid,
    board_save_name,
    save_grid,
    load_grid,
)

__all__ = [
    'serialize_grid',
    'deserialize_grid',
    'board_save_name',
    'save_grid',
    'load_grid',
]
