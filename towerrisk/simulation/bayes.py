"""
Bayesian Evidence Update - Hit / No-Hit Observations
====================================================

Revises tower beliefs after a unit at (x, y) was (or was not) damaged.

Model (independence approximation):
    Every cell in the evidence window is an independent tower candidate with
    prior q. A candidate "stays safe" for the unit if it is empty or is a
    tower that missed:

        P(S_c) = (1 - q) + q * (1 - accuracy)

    For a revised cell (r, c) with prior P(T):

        P(S|N) = prod_{other window cells} P(S_c)
        hit:   P(H|N) = 1 - P(S|N)      P(H|T) = 1 - (1 - P(H|N)) * (1 - accuracy)
        miss:  P(H|N) = P(S|N)          P(H|T) = P(H|N) * (1 - accuracy)

        P(T|e) = P(H|T) P(T) / (P(H|T) P(T) + P(H|N) (1 - P(T)))

Which cells are revised:
    The window is ``[x - R, x + R) x [y - R, y + R)`` with R = tower_range,
    clipped to the grid. It is half-open, so column x + R and row y + R are
    never part of it. Only unseen cells OUTSIDE the circular weapon range
    of (x, y) are revised; cells inside the circle are left to direct local
    observation. Seen cells are ground truth and never revised.

All posteriors of one call are computed from the same pre-update snapshot.
A zero denominator leaves the prior unchanged.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

import numpy as np

from towerrisk.core.config import TowerModelConfig
from towerrisk.simulation.grid import GridBoundsError, ProbabilityGrid
from towerrisk.simulation.risk import euclidean_distance

logger = logging.getLogger(__name__)


class BayesianUpdater:
    """
    Applies hit/miss evidence to a ProbabilityGrid.

    Usage:
        updater = BayesianUpdater(grid, config)
        updater.apply_evidence(5, 7, was_hit=True)
    """

    def __init__(self, grid: ProbabilityGrid, config: Optional[TowerModelConfig] = None):
        self.grid = grid
        self.config = config or TowerModelConfig()
        self.tower_range = self.config.tower_range
        self.tower_accuracy = self.config.tower_accuracy

    def _window(self, x: int, y: int) -> Tuple[int, int, int, int]:
        """Half-open bounds (x0, x1, y0, y1) of the evidence window."""
        r = self.tower_range
        x0 = max(x - r, 0)
        x1 = min(self.grid.width, x + r)
        y0 = max(y - r, 0)
        y1 = min(self.grid.height, y + r)
        return x0, x1, y0, y1

    def posterior(self, prior: float, p_safe_given_none: float, was_hit: bool) -> float:
        """
        Bayes' rule for one cell given P(S|N) of the rest of the window.

        Returns the prior unchanged when both likelihood terms vanish.
        """
        miss = 1.0 - self.tower_accuracy
        if was_hit:
            phn = 1.0 - p_safe_given_none
            pht = 1.0 - (1.0 - phn) * miss
        else:
            phn = p_safe_given_none
            pht = phn * miss

        numerator = pht * prior
        denominator = numerator + phn * (1.0 - prior)
        if denominator <= 0.0:
            return prior
        return min(1.0, max(0.0, numerator / denominator))

    def apply_evidence(self, x: int, y: int, was_hit: bool) -> int:
        """
        Revise beliefs around (x, y) after a hit (``was_hit=True``) or a miss.

        Args:
            x, y: Position of the unit when the outcome was observed
            was_hit: Whether the unit lost health this tick

        Returns:
            Number of cells whose probability was revised

        Raises:
            GridBoundsError: if (x, y) is outside the grid
        """
        if not self.grid.in_bounds(x, y):
            raise GridBoundsError(x, y, self.grid.width, self.grid.height)

        old = self.grid.snapshot()
        x0, x1, y0, y1 = self._window(x, y)

        window = old[y0:y1, x0:x1]
        safe_factors = (1.0 - window) + window * (1.0 - self.tower_accuracy)

        updates: List[Tuple[int, int, float]] = []
        for r in range(x0, x1):
            for c in range(y0, y1):
                if self.grid.seen[c, r] or euclidean_distance(x, y, r, c) <= self.tower_range:
                    continue

                others = np.ones(safe_factors.shape, dtype=bool)
                others[c - y0, r - x0] = False
                p_safe = float(np.prod(safe_factors[others]))

                prior = float(old[c, r])
                updates.append((r, c, self.posterior(prior, p_safe, was_hit)))

        for r, c, value in updates:
            self.grid.probabilities[c, r] = value

        logger.debug(f"Evidence {'hit' if was_hit else 'miss'} at ({x}, {y}): "
                     f"revised {len(updates)} cells")
        return len(updates)
