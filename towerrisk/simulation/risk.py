"""
Risk Aggregation - Noisy-OR Hit Probability
===========================================

Prices a cell by the probability that a unit standing on it is damaged this
tick. Every cell within the weapon's circular range is an independent
"tower present" Bernoulli event; the unit is hit if at least one of them is
a real tower and that tower's shot lands:

    P(hit at x,y) = accuracy * (1 - prod_{c in range} (1 - q_c))

computed incrementally as ``p <- p + q - p*q``. The result always lies in
``[0, accuracy]``.

Two entry points:
- ``hit_probability(x, y)``: one cell, direct loop over the range disk
- ``risk_field()``: every cell at once, via a disk convolution in log space
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional

import numpy as np
from scipy.signal import convolve2d

from towerrisk.core.config import TowerModelConfig
from towerrisk.core.definitions import GridCoord
from towerrisk.simulation.grid import GridBoundsError, ProbabilityGrid

logger = logging.getLogger(__name__)


def euclidean_distance(x1: int, y1: int, x2: int, y2: int) -> float:
    return math.sqrt((x1 - x2) * (x1 - x2) + (y1 - y2) * (y1 - y2))


class RiskAggregator:
    """
    Computes per-cell damage probability from the tower belief grid.

    Attributes:
        grid: Belief grid read on every call (never written)
        tower_range: Weapon radius (Euclidean, inclusive)
        tower_accuracy: Per-shot hit chance of a real tower
    """

    def __init__(self, grid: ProbabilityGrid, config: Optional[TowerModelConfig] = None):
        self.grid = grid
        self.config = config or TowerModelConfig()
        self.tower_range = self.config.tower_range
        self.tower_accuracy = self.config.tower_accuracy

        # Precompute range offsets once; the disk never changes
        self._range_offsets = self._compute_range_offsets()
        self._kernel = self._compute_kernel()

    def _compute_range_offsets(self) -> List[GridCoord]:
        """All (dx, dy) offsets within weapon range, including (0, 0)."""
        r = self.tower_range
        offsets = []
        for dx in range(-r, r + 1):
            for dy in range(-r, r + 1):
                if euclidean_distance(0, 0, dx, dy) <= r:
                    offsets.append((dx, dy))
        return offsets

    def _compute_kernel(self) -> np.ndarray:
        r = self.tower_range
        kernel = np.zeros((2 * r + 1, 2 * r + 1), dtype=np.float64)
        for dx, dy in self._range_offsets:
            kernel[dy + r, dx + r] = 1.0
        return kernel

    def in_range(self, x1: int, y1: int, x2: int, y2: int) -> bool:
        """Whether a tower at one cell can shoot a unit at the other."""
        return euclidean_distance(x1, y1, x2, y2) <= self.tower_range

    def hit_probability(self, x: int, y: int) -> float:
        """
        Probability that a unit standing at (x, y) is damaged this tick.

        Raises:
            GridBoundsError: if (x, y) is outside the grid
        """
        if not self.grid.in_bounds(x, y):
            raise GridBoundsError(x, y, self.grid.width, self.grid.height)

        probability = 0.0
        for dx, dy in self._range_offsets:
            cx, cy = x + dx, y + dy
            if not self.grid.in_bounds(cx, cy):
                continue
            q = float(self.grid.probabilities[cy, cx])
            probability = (probability + q) - (probability * q)

        return probability * self.tower_accuracy

    def risk_field(self) -> np.ndarray:
        """
        Hit probability for every cell, indexed ``[y, x]``.

        Noisy-OR is ``1 - exp(sum log(1 - q))`` over the range disk, so the
        sum is a 2D convolution. Cells with ``q == 1`` have no finite log and
        are counted separately: any of them in range makes the combined
        probability exactly 1.
        """
        q = self.grid.probabilities
        certain = q >= 1.0
        log_miss = np.log1p(-np.where(certain, 0.0, q))

        log_sum = convolve2d(log_miss, self._kernel, mode='same', boundary='fill', fillvalue=0.0)
        n_certain = convolve2d(certain.astype(np.float64), self._kernel,
                               mode='same', boundary='fill', fillvalue=0.0)

        combined = np.where(n_certain > 0.5, 1.0, -np.expm1(log_sum))
        combined = np.clip(combined, 0.0, 1.0)
        return combined * self.tower_accuracy
