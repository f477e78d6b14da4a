"""
Risk-Aware A* Search
====================

Finds the route between two cells with the lowest cumulative chance of being
shot, rather than the fewest steps.

Cost of a node:
    f(n) = h(n) + g(n)
    g(n) = sum of per-cell hit probability along the path (origin included)
    h(n) = chebyshev(n, target) * min_step_risk

``min_step_risk`` is small, so h never overestimates the remaining risk but
still breaks ties between equally risky frontiers by proximity.

Nodes live in a per-call arena (a list). A node's parent is an index into
that arena, so the whole search state is dropped when ``search`` returns.

Usage:
    search = RiskAwareSearch(grid, config)
    result = search.search(origin=(0, 0), target=(4, 4))
    if result.success:
        next_cell = result.path[0]
"""

from __future__ import annotations

import heapq
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple

import numpy as np

from towerrisk.core.config import TowerModelConfig
from towerrisk.core.definitions import NEIGHBOR_DELTAS, GridCoord
from towerrisk.simulation.grid import GridBoundsError, ProbabilityGrid
from towerrisk.simulation.risk import RiskAggregator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchNode:
    """
    Candidate position in one search call.

    Equality and hashing use coordinates only, so open/closed membership
    tests match any node at the same cell regardless of how it was reached.

    Attributes:
        x, y: Grid position
        local_risk: Hit probability of standing on this cell
        accumulated_cost: Parent's accumulated cost plus local_risk
                          (the origin's is its own local_risk)
        parent: Arena index of the predecessor, None for the origin
    """
    x: int
    y: int
    local_risk: float = field(default=0.0, compare=False)
    accumulated_cost: float = field(default=0.0, compare=False)
    parent: Optional[int] = field(default=None, compare=False)

    @property
    def position(self) -> GridCoord:
        return (self.x, self.y)


@dataclass
class SearchResult:
    """
    Outcome of one search call.

    ``success=False`` means the target is unreachable; ``path`` is then empty
    and must not be read as "already there". With ``success=True`` the path
    runs from the first step to the target inclusive (empty only when the
    origin is the target).
    """
    success: bool
    path: List[GridCoord] = field(default_factory=list)
    nodes_expanded: int = 0

    @property
    def next_step(self) -> Optional[GridCoord]:
        """First cell to move to, or None if there is nowhere to go."""
        if self.success and self.path:
            return self.path[0]
        return None


class RiskAwareSearch:
    """
    A* over the belief grid using noisy-OR hit probability as step cost.

    Features:
    - 8-connected moves
    - Certain towers (p == 1), obstacles and occupied cells are never entered
    - Structures are impassable unless they are the target
    - Deterministic: ties are expanded in insertion order
    """

    def __init__(
        self,
        grid: ProbabilityGrid,
        config: Optional[TowerModelConfig] = None,
        aggregator: Optional[RiskAggregator] = None,
    ):
        """
        Args:
            grid: Belief grid to plan over (read-only here)
            config: Model parameters (min_step_risk scales the heuristic)
            aggregator: Risk source; built from grid/config if omitted
        """
        self.grid = grid
        self.config = config or TowerModelConfig()
        self.aggregator = aggregator or RiskAggregator(grid, self.config)
        self.min_step_risk = self.config.min_step_risk

    def heuristic(self, node: SearchNode, target: GridCoord) -> float:
        """Chebyshev distance to the target scaled by the minimum step risk."""
        steps = max(abs(node.x - target[0]), abs(node.y - target[1]))
        return steps * self.min_step_risk

    def cost(self, node: SearchNode, target: GridCoord) -> float:
        return self.heuristic(node, target) + node.accumulated_cost

    def _successors(
        self,
        arena: List[SearchNode],
        index: int,
        target: GridCoord,
        risk: np.ndarray,
        closed: Set[GridCoord],
        occupied: Set[GridCoord],
        structures: Set[GridCoord],
    ) -> List[SearchNode]:
        """Passable, unexpanded neighbours of ``arena[index]``."""
        current = arena[index]
        successors = []
        for dx, dy in NEIGHBOR_DELTAS:
            x, y = current.x + dx, current.y + dy
            pos = (x, y)
            if (not self.grid.in_bounds(x, y)
                    or self.grid.obstacles[y, x]
                    or pos in occupied
                    or self.grid.probabilities[y, x] >= 1.0
                    or (pos in structures and pos != target)):
                continue
            if pos in closed:
                continue
            local = float(risk[y, x])
            successors.append(SearchNode(
                x=x,
                y=y,
                local_risk=local,
                accumulated_cost=current.accumulated_cost + local,
                parent=index,
            ))
        return successors

    def search(
        self,
        origin: GridCoord,
        target: GridCoord,
        occupied: Iterable[GridCoord] = (),
        structures: Iterable[GridCoord] = (),
        max_expansions: Optional[int] = None,
    ) -> SearchResult:
        """
        Find the lowest-risk path from origin to target.

        Args:
            origin: Starting (x, y), never part of the returned path
            target: Destination (x, y)
            occupied: Cells held by other tracked units
            structures: Impassable rally points (e.g. a friendly town hall);
                        the target itself may be one
            max_expansions: Give up after this many expansions
                            (default: width * height)

        Returns:
            SearchResult with success flag, path and expansion count

        Raises:
            GridBoundsError: if origin or target is outside the grid
        """
        for x, y in (origin, target):
            if not self.grid.in_bounds(x, y):
                raise GridBoundsError(x, y, self.grid.width, self.grid.height)

        if origin == target:
            return SearchResult(success=True, path=[], nodes_expanded=0)

        occupied_set = set(occupied)
        structure_set = set(structures)
        limit = max_expansions if max_expansions is not None else self.grid.width * self.grid.height

        # One risk evaluation per call; identical to per-cell hit_probability
        risk = self.aggregator.risk_field()

        origin_risk = float(risk[origin[1], origin[0]])
        arena: List[SearchNode] = [
            SearchNode(origin[0], origin[1], origin_risk, origin_risk, None)
        ]

        # Open set: heap of (f, insertion counter, arena index) plus the live
        # arena index per coordinate; replaced entries are skipped lazily.
        open_heap: List[Tuple[float, int, int]] = [(self.cost(arena[0], target), 0, 0)]
        open_index: Dict[GridCoord, int] = {origin: 0}
        closed: Set[GridCoord] = set()
        counter = 1
        expanded = 0

        while open_heap:
            _, _, index = heapq.heappop(open_heap)
            current = arena[index]
            if open_index.get(current.position) != index:
                continue
            del open_index[current.position]

            if current.position == target:
                path = self._reconstruct(arena, index)
                logger.debug(f"Path {origin} -> {target}: {len(path)} steps, "
                             f"risk {current.accumulated_cost:.4f}, {expanded} expansions")
                return SearchResult(success=True, path=path, nodes_expanded=expanded)

            closed.add(current.position)
            expanded += 1
            if expanded > limit:
                logger.warning(f"Search {origin} -> {target} exceeded {limit} expansions")
                return SearchResult(success=False, path=[], nodes_expanded=expanded)

            for node in self._successors(arena, index, target, risk,
                                         closed, occupied_set, structure_set):
                existing = open_index.get(node.position)
                if existing is not None and node.accumulated_cost >= arena[existing].accumulated_cost:
                    continue
                arena.append(node)
                new_index = len(arena) - 1
                open_index[node.position] = new_index
                heapq.heappush(open_heap, (self.cost(node, target), counter, new_index))
                counter += 1

        logger.warning(f"Target {target} is unreachable from position {origin}")
        return SearchResult(success=False, path=[], nodes_expanded=expanded)

    @staticmethod
    def _reconstruct(arena: List[SearchNode], index: int) -> List[GridCoord]:
        """Follow parent indices back to the origin; origin excluded."""
        path = []
        node = arena[index]
        while node.parent is not None:
            path.append(node.position)
            node = arena[node.parent]
        path.reverse()
        return path
