"""
Probability Grid - Belief Map of Tower Locations
================================================

Per-cell belief about where hostile towers stand, plus the bookkeeping the
planner needs about each cell (seen, visited, blocked, hit here).

Storage is one numpy array per field, indexed ``[y, x]``; the public API
always takes ``(x, y)``. A ``Cell`` is an immutable view of one position.

Lifecycle:
    grid = ProbabilityGrid(width, height, prior=0.01)   # episode start
    ... BayesianUpdater / vision writes mutate it ...
    blob = grid.serialize()                              # episode end
    grid = ProbabilityGrid.deserialize(blob)             # next episode
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Tuple

import numpy as np

from towerrisk.core.definitions import INITIAL_TOWER_DENSITY, GridCoord

logger = logging.getLogger(__name__)


class GridBoundsError(IndexError):
    """Raised when a coordinate lies outside the grid."""

    def __init__(self, x: int, y: int, width: int, height: int):
        super().__init__(f"Cell ({x}, {y}) is outside the {width}x{height} grid")
        self.x = x
        self.y = y


@dataclass(frozen=True)
class Cell:
    """
    Snapshot of one grid position.

    Attributes:
        tower_probability: Belief that a tower occupies this cell [0, 1]
        seen: Whether any unit ever had this cell in view
        visit_count: Times a unit physically stood here
        has_obstacle: Terrain blocking movement (not a tower)
        hit_count: Times a unit standing here was damaged
    """
    tower_probability: float
    seen: bool = False
    visit_count: int = 0
    has_obstacle: bool = False
    hit_count: int = 0


class ProbabilityGrid:
    """
    Fixed ``width x height`` belief map.

    Every accessor rejects out-of-bounds coordinates with ``GridBoundsError``;
    nothing is ever clamped onto a neighbouring cell.
    """

    def __init__(self, width: int, height: int, prior: float = INITIAL_TOWER_DENSITY):
        """
        Args:
            width: Number of columns (x extent)
            height: Number of rows (y extent)
            prior: Initial tower probability for every cell
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {width}x{height}")
        if not 0.0 <= prior <= 1.0:
            raise ValueError(f"Prior must be in [0, 1], got {prior}")

        self.width = width
        self.height = height
        self.probabilities = np.full((height, width), prior, dtype=np.float64)
        self.seen = np.zeros((height, width), dtype=bool)
        self.obstacles = np.zeros((height, width), dtype=bool)
        self.visits = np.zeros((height, width), dtype=np.int64)
        self.hits = np.zeros((height, width), dtype=np.int64)

    @property
    def shape(self) -> Tuple[int, int]:
        """(height, width) of the underlying arrays."""
        return (self.height, self.width)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def _check(self, x: int, y: int) -> None:
        if not self.in_bounds(x, y):
            raise GridBoundsError(x, y, self.width, self.height)

    # ------------------------------------------------------------------
    # Tower probability
    # ------------------------------------------------------------------

    def get_probability(self, x: int, y: int) -> float:
        self._check(x, y)
        return float(self.probabilities[y, x])

    def set_probability(self, x: int, y: int, probability: float) -> None:
        self._check(x, y)
        if not 0.0 <= probability <= 1.0:
            raise ValueError(f"Tower probability must be in [0, 1], got {probability}")
        self.probabilities[y, x] = probability

    # ------------------------------------------------------------------
    # Flags and counters
    # ------------------------------------------------------------------

    def get_seen(self, x: int, y: int) -> bool:
        self._check(x, y)
        return bool(self.seen[y, x])

    def set_seen(self, x: int, y: int, seen: bool = True) -> None:
        self._check(x, y)
        self.seen[y, x] = seen

    def get_obstacle(self, x: int, y: int) -> bool:
        self._check(x, y)
        return bool(self.obstacles[y, x])

    def set_obstacle(self, x: int, y: int, has_obstacle: bool = True) -> None:
        self._check(x, y)
        self.obstacles[y, x] = has_obstacle

    def increment_visit(self, x: int, y: int) -> int:
        """Count one more visit to (x, y); returns the new count."""
        self._check(x, y)
        self.visits[y, x] += 1
        return int(self.visits[y, x])

    def get_visits(self, x: int, y: int) -> int:
        self._check(x, y)
        return int(self.visits[y, x])

    def increment_hits(self, x: int, y: int) -> int:
        """Count one more hit taken at (x, y); returns the new count."""
        self._check(x, y)
        self.hits[y, x] += 1
        return int(self.hits[y, x])

    def get_hits(self, x: int, y: int) -> int:
        self._check(x, y)
        return int(self.hits[y, x])

    # ------------------------------------------------------------------
    # Whole-grid views
    # ------------------------------------------------------------------

    def cell(self, x: int, y: int) -> Cell:
        """Immutable view of everything known about (x, y)."""
        self._check(x, y)
        return Cell(
            tower_probability=float(self.probabilities[y, x]),
            seen=bool(self.seen[y, x]),
            visit_count=int(self.visits[y, x]),
            has_obstacle=bool(self.obstacles[y, x]),
            hit_count=int(self.hits[y, x]),
        )

    def coords(self) -> Iterator[GridCoord]:
        """All (x, y) positions, x-major."""
        for x in range(self.width):
            for y in range(self.height):
                yield (x, y)

    def snapshot(self) -> np.ndarray:
        """
        Read-only copy of the probability field, indexed ``[y, x]``.

        The updater reads priors from this while writing posteriors to the
        live grid, so one evidence step never sees its own writes.
        """
        frozen = self.probabilities.copy()
        frozen.setflags(write=False)
        return frozen

    def copy(self) -> 'ProbabilityGrid':
        """Deep copy of every field."""
        clone = ProbabilityGrid(self.width, self.height)
        clone.probabilities = self.probabilities.copy()
        clone.seen = self.seen.copy()
        clone.obstacles = self.obstacles.copy()
        clone.visits = self.visits.copy()
        clone.hits = self.hits.copy()
        return clone

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def serialize(self) -> bytes:
        """Encode the grid as a byte blob (see ``towerrisk.utils.persistence``)."""
        from towerrisk.utils.persistence import serialize_grid
        return serialize_grid(self)

    @classmethod
    def deserialize(cls, blob: bytes) -> 'ProbabilityGrid':
        """Decode a blob produced by ``serialize``."""
        from towerrisk.utils.persistence import deserialize_grid
        return deserialize_grid(blob)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ProbabilityGrid):
            return NotImplemented
        return (
            self.shape == other.shape
            and np.array_equal(self.probabilities, other.probabilities)
            and np.array_equal(self.seen, other.seen)
            and np.array_equal(self.obstacles, other.obstacles)
            and np.array_equal(self.visits, other.visits)
            and np.array_equal(self.hits, other.hits)
        )

    __hash__ = None

    def __repr__(self) -> str:
        return (f"ProbabilityGrid({self.width}x{self.height}, "
                f"seen={int(self.seen.sum())}, "
                f"max_p={float(self.probabilities.max()):.3f})")
