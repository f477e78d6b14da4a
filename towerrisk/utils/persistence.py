"""
Belief Grid Persistence
=======================

Carries a ProbabilityGrid across episodes.

Format: a compressed numpy ``.npz`` container holding one array per grid
field (``probabilities`` float64, ``seen`` / ``obstacles`` bool, ``visits`` /
``hits`` int64) and a JSON ``metadata`` string with the format version and
shape. float64 values round-trip bit-exactly.

Boards are keyed by board size and unit configuration:

    >>> board_save_name(32, 32, {1: (2, 3), 4: (0, 1)})
    '32x32_9.board'
"""

import io
import json
import logging
import zipfile
from pathlib import Path
from typing import Mapping, Optional, Union

import numpy as np

from towerrisk.core.definitions import BOARD_FILE_SUFFIX, BOARD_FORMAT_VERSION, GridCoord
from towerrisk.simulation.grid import ProbabilityGrid

logger = logging.getLogger(__name__)

_ARRAYS = {
    'probabilities': np.float64,
    'seen': np.bool_,
    'obstacles': np.bool_,
    'visits': np.int64,
    'hits': np.int64,
}


def serialize_grid(grid: ProbabilityGrid) -> bytes:
    """Encode every field of ``grid`` into a byte blob."""
    metadata = {
        'format_version': BOARD_FORMAT_VERSION,
        'width': grid.width,
        'height': grid.height,
    }
    buffer = io.BytesIO()
    np.savez_compressed(
        buffer,
        probabilities=grid.probabilities,
        seen=grid.seen,
        obstacles=grid.obstacles,
        visits=grid.visits,
        hits=grid.hits,
        metadata=json.dumps(metadata),
    )
    return buffer.getvalue()


def deserialize_grid(blob: bytes) -> ProbabilityGrid:
    """
    Decode a blob produced by ``serialize_grid``.

    Raises:
        ValueError: if the blob is not a board, has another format version,
                    or its arrays disagree with the recorded shape
    """
    try:
        data = np.load(io.BytesIO(blob), allow_pickle=False)
        arrays = {name: data[name] for name in list(_ARRAYS) + ['metadata']}
    except (OSError, EOFError, ValueError, KeyError, zipfile.BadZipFile) as e:
        raise ValueError(f"Not a serialized probability grid: {e}") from e

    metadata = json.loads(str(arrays['metadata']))
    if not isinstance(metadata, dict):
        raise ValueError(f"Board metadata must be a JSON object, got {type(metadata).__name__}")
    version = metadata.get('format_version')
    if version != BOARD_FORMAT_VERSION:
        raise ValueError(f"Unsupported board format version: {version}")

    try:
        width, height = int(metadata['width']), int(metadata['height'])
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Board metadata has no valid shape: {e}") from e
    grid = ProbabilityGrid(width, height)
    for name, dtype in _ARRAYS.items():
        array = arrays[name]
        if array.shape != (height, width):
            raise ValueError(f"Field '{name}' has shape {array.shape}, "
                             f"expected {(height, width)}")
        setattr(grid, name, array.astype(dtype, copy=True))

    probabilities = grid.probabilities
    if (not np.isfinite(probabilities).all()
            or probabilities.min() < 0.0 or probabilities.max() > 1.0):
        raise ValueError("Stored tower probabilities are not finite values in [0, 1]")
    return grid


def board_save_name(width: int, height: int, unit_positions: Mapping[int, GridCoord]) -> str:
    """
    File name identifying a board size and starting unit configuration.

    The id is ``sum(unit_id * (x + y))`` over the starting units.
    """
    config_id = sum(uid * (pos[0] + pos[1]) for uid, pos in unit_positions.items())
    return f"{width}x{height}_{config_id}{BOARD_FILE_SUFFIX}"


def save_grid(grid: ProbabilityGrid, path: Union[str, Path]) -> Path:
    """Write ``grid`` to ``path``, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(serialize_grid(grid))
    logger.info(f"Saved board to: {path}")
    return path


def load_grid(path: Union[str, Path]) -> Optional[ProbabilityGrid]:
    """
    Read a grid saved by ``save_grid``.

    Returns:
        The grid, or None when no file exists at ``path``
    """
    path = Path(path)
    if not path.exists():
        logger.info(f"No saved board at {path}")
        return None
    grid = deserialize_grid(path.read_bytes())
    logger.info(f"Loaded board {grid.width}x{grid.height} from: {path}")
    return grid
