"""
Tower Belief Tracker - Per-Tick Evidence Intake
===============================================

Single owner of one episode's ProbabilityGrid. The host control loop feeds it
what its units saw and whether they lost health; the tracker turns that into
grid writes, Bayesian updates and path requests.

Per tick, for every friendly unit:
    1. apply_vision(...)   cells in view are marked seen and pinned to 0 or 1
    2. report_unit(...)    visit counted; hit/miss evidence applied
    3. choose_step(...)    planned step, or a random one after a hit

All randomness comes from the ``random.Random`` passed in by the caller.
"""

from __future__ import annotations

import logging
import random
from typing import Dict, Iterable, List, Mapping, Optional, Set

from towerrisk.core.config import TowerModelConfig
from towerrisk.core.definitions import NEIGHBOR_DELTAS, CellContent, GridCoord
from towerrisk.simulation.bayes import BayesianUpdater
from towerrisk.simulation.grid import ProbabilityGrid
from towerrisk.simulation.risk import RiskAggregator
from towerrisk.simulation.search import RiskAwareSearch, SearchResult

logger = logging.getLogger(__name__)


class TowerBeliefTracker:
    """
    Evidence bookkeeping for a team of units sharing one belief grid.

    Attributes:
        grid: The episode's belief grid (owned, mutated in place)
        config: Model parameters
        unit_positions: Last reported position per unit id
        unit_health: Last reported hit points per unit id
    """

    def __init__(self, grid: ProbabilityGrid, config: Optional[TowerModelConfig] = None):
        self.grid = grid
        self.config = config or TowerModelConfig()
        self.aggregator = RiskAggregator(grid, self.config)
        self.updater = BayesianUpdater(grid, self.config)
        self.planner = RiskAwareSearch(grid, self.config, aggregator=self.aggregator)

        self.unit_positions: Dict[int, GridCoord] = {}
        self.unit_health: Dict[int, int] = {}
        self.towers_found: Set[GridCoord] = set()

    # ------------------------------------------------------------------
    # Vision
    # ------------------------------------------------------------------

    def vision_window(self, x: int, y: int) -> List[GridCoord]:
        """In-bounds cells of the square view centred on (x, y)."""
        r = self.config.vision_range
        return [
            (x + i, y + j)
            for i in range(-r, r + 1)
            for j in range(-r, r + 1)
            if self.grid.in_bounds(x + i, y + j)
        ]

    def apply_vision(self, observations: Mapping[GridCoord, CellContent]) -> int:
        """
        Write direct observations into the grid.

        Every observed cell becomes seen. A tower pins its probability to 1;
        anything else pins it to 0, and obstacles also block movement.
        Out-of-bounds cells are skipped.

        Returns:
            Number of towers discovered by this call
        """
        discovered = 0
        for (x, y), content in observations.items():
            if not self.grid.in_bounds(x, y):
                continue

            self.grid.set_seen(x, y, True)
            if content == CellContent.TOWER:
                self.grid.set_probability(x, y, 1.0)
                if (x, y) not in self.towers_found:
                    self.towers_found.add((x, y))
                    discovered += 1
                    logger.info(f"Found tower at ({x}, {y})")
            else:
                if content == CellContent.OBSTACLE:
                    self.grid.set_obstacle(x, y, True)
                self.grid.set_probability(x, y, 0.0)
        return discovered

    # ------------------------------------------------------------------
    # Unit reports
    # ------------------------------------------------------------------

    def report_unit(self, unit_id: int, position: GridCoord, hp: int) -> bool:
        """
        Record a unit's state for this tick and apply hit/miss evidence.

        A unit is hit when its hit points dropped since its previous report;
        the first report for a unit is never a hit.

        Returns:
            True if the unit was hit this tick
        """
        x, y = position
        self.grid.increment_visit(x, y)

        previous = self.unit_health.get(unit_id)
        was_hit = previous is not None and hp < previous

        if was_hit:
            logger.info(f"Unit {unit_id} has been hit at ({x}, {y})")
            self.grid.increment_hits(x, y)
        self.updater.apply_evidence(x, y, was_hit)

        self.unit_positions[unit_id] = position
        self.unit_health[unit_id] = hp
        return was_hit

    def forget_unit(self, unit_id: int) -> None:
        """Stop tracking a unit (e.g. it died)."""
        self.unit_positions.pop(unit_id, None)
        self.unit_health.pop(unit_id, None)

    def occupied_cells(self, exclude: Optional[int] = None) -> Set[GridCoord]:
        """Positions of tracked units, optionally leaving one out."""
        return {pos for uid, pos in self.unit_positions.items() if uid != exclude}

    # ------------------------------------------------------------------
    # Movement
    # ------------------------------------------------------------------

    def plan_path(
        self,
        unit_id: int,
        target: GridCoord,
        structures: Iterable[GridCoord] = (),
    ) -> SearchResult:
        """Lowest-risk path for a tracked unit, avoiding the other units."""
        origin = self.unit_positions[unit_id]
        return self.planner.search(
            origin,
            target,
            occupied=self.occupied_cells(exclude=unit_id),
            structures=structures,
        )

    def random_adjacent_cell(
        self,
        position: GridCoord,
        rng: random.Random,
        structures: Iterable[GridCoord] = (),
        target: Optional[GridCoord] = None,
    ) -> Optional[GridCoord]:
        """
        Uniformly random passable neighbour of ``position``.

        Passable means in bounds, no obstacle, no tracked unit, not a certain
        tower, and not a structure (unless it is ``target``).

        Returns:
            A neighbour, or None if every neighbour is blocked
        """
        occupied = self.occupied_cells()
        structure_set = set(structures)
        candidates = []
        for dx, dy in NEIGHBOR_DELTAS:
            x, y = position[0] + dx, position[1] + dy
            pos = (x, y)
            if (not self.grid.in_bounds(x, y)
                    or self.grid.obstacles[y, x]
                    or pos in occupied
                    or self.grid.probabilities[y, x] >= 1.0
                    or (pos in structure_set and pos != target)):
                continue
            candidates.append(pos)

        if not candidates:
            return None
        return candidates[rng.randrange(len(candidates))]

    def choose_step(
        self,
        unit_id: int,
        target: GridCoord,
        was_hit: bool,
        rng: random.Random,
        structures: Iterable[GridCoord] = (),
    ) -> Optional[GridCoord]:
        """
        Next cell for a unit heading to ``target``.

        Follows the lowest-risk path. A unit that was just hit takes a random
        step instead with probability ``random_walk_prob``, if any neighbour
        is free. With no path, a random neighbour is used. Returns the unit's
        own position when it is already at the target, and None when it
        cannot move.

        The chosen cell becomes the unit's tracked position, so units that
        choose later in the same tick route around it.
        """
        structures = list(structures)
        position = self.unit_positions[unit_id]

        step = None
        if was_hit and rng.random() < self.config.random_walk_prob:
            step = self.random_adjacent_cell(position, rng, structures, target)

        if step is None:
            result = self.plan_path(unit_id, target, structures)
            if result.success:
                step = result.next_step if result.path else position
            else:
                logger.info(f"Unit {unit_id}: no path to {target}, stepping randomly")
                step = self.random_adjacent_cell(position, rng, structures, target)

        if step is not None:
            self.unit_positions[unit_id] = step
        return step
