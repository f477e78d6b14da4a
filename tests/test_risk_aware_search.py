"""
Tests for the risk-weighted A* search.

Run with: pytest tests/test_risk_aware_search.py -v
"""

import numpy as np
import pytest

from towerrisk.simulation.grid import GridBoundsError, ProbabilityGrid
from towerrisk.simulation.risk import RiskAggregator
from towerrisk.simulation.search import RiskAwareSearch, SearchNode, SearchResult


class FixedRisk:
    """Risk source returning a prepared field."""

    def __init__(self, field):
        self.field = field

    def risk_field(self):
        return self.field


def is_connected(origin, path):
    steps = [origin] + list(path)
    return all(max(abs(a[0] - b[0]), abs(a[1] - b[1])) == 1
               for a, b in zip(steps, steps[1:]))


# ==============================================================================
# FIXTURES
# ==============================================================================

@pytest.fixture
def empty_grid():
    """5x5 grid with no tower belief anywhere."""
    return ProbabilityGrid(5, 5, prior=0.0)


# ==============================================================================
# SEARCH NODE
# ==============================================================================

class TestSearchNode:

    def test_equality_uses_coordinates_only(self):
        a = SearchNode(1, 2, local_risk=0.5, accumulated_cost=0.5, parent=None)
        b = SearchNode(1, 2, local_risk=0.1, accumulated_cost=0.9, parent=3)
        assert a == b
        assert hash(a) == hash(b)
        assert len({a, b}) == 1
        assert a != SearchNode(2, 1)

    def test_position(self):
        assert SearchNode(3, 4).position == (3, 4)


# ==============================================================================
# BASIC PATHS
# ==============================================================================

class TestBasicPaths:

    def test_diagonal_on_empty_grid(self, empty_grid):
        result = RiskAwareSearch(empty_grid).search((0, 0), (4, 4))
        assert result.success
        assert result.path == [(1, 1), (2, 2), (3, 3), (4, 4)]

    def test_origin_excluded_target_included(self, empty_grid):
        result = RiskAwareSearch(empty_grid).search((0, 2), (3, 2))
        assert result.success
        assert (0, 2) not in result.path
        assert result.path[-1] == (3, 2)
        assert len(result.path) == 3
        assert is_connected((0, 2), result.path)
        assert result.next_step == result.path[0]

    def test_origin_is_target(self, empty_grid):
        result = RiskAwareSearch(empty_grid).search((2, 2), (2, 2))
        assert result.success
        assert result.path == []
        assert result.next_step is None

    def test_deterministic(self):
        grid = ProbabilityGrid(10, 10)
        grid.probabilities = np.random.default_rng(5).random((10, 10)) * 0.3
        search = RiskAwareSearch(grid)
        first = search.search((0, 0), (9, 7))
        second = search.search((0, 0), (9, 7))
        assert first.path == second.path

    @pytest.mark.parametrize("origin,target", [((-1, 0), (2, 2)), ((0, 0), (5, 0))])
    def test_out_of_bounds(self, empty_grid, origin, target):
        with pytest.raises(GridBoundsError):
            RiskAwareSearch(empty_grid).search(origin, target)


# ==============================================================================
# BLOCKED CELLS
# ==============================================================================

class TestBlockedCells:

    def test_enclosed_target_is_unreachable(self, empty_grid):
        for x, y in [(3, 3), (3, 4), (4, 3)]:
            empty_grid.set_obstacle(x, y)
        result = RiskAwareSearch(empty_grid).search((0, 0), (4, 4))
        assert isinstance(result, SearchResult)
        assert result.success is False
        assert result.path == []
        assert result.next_step is None

    def test_certain_towers_are_walls(self, empty_grid):
        for y in range(5):
            empty_grid.set_probability(2, y, 1.0)
        result = RiskAwareSearch(empty_grid).search((0, 0), (4, 4))
        assert not result.success

    def test_certain_tower_never_entered(self, empty_grid):
        empty_grid.set_probability(2, 2, 1.0)
        result = RiskAwareSearch(empty_grid).search((0, 0), (4, 4))
        assert result.success
        assert (2, 2) not in result.path
        assert result.path[-1] == (4, 4)

    def test_obstacle_target_is_unreachable(self, empty_grid):
        empty_grid.set_obstacle(4, 4)
        assert not RiskAwareSearch(empty_grid).search((0, 0), (4, 4)).success

    def test_occupied_cells_avoided(self):
        grid = ProbabilityGrid(3, 3, prior=0.0)
        result = RiskAwareSearch(grid).search((0, 0), (2, 2), occupied=[(1, 1)])
        assert result.success
        assert (1, 1) not in result.path
        assert len(result.path) == 3
        assert is_connected((0, 0), result.path)

    def test_structure_avoided_unless_target(self):
        grid = ProbabilityGrid(3, 3, prior=0.0)
        search = RiskAwareSearch(grid)

        around = search.search((0, 0), (2, 2), structures=[(1, 1)])
        assert (1, 1) not in around.path

        onto = search.search((0, 0), (1, 1), structures=[(1, 1)])
        assert onto.success
        assert onto.path == [(1, 1)]

    def test_expansion_limit(self, empty_grid):
        result = RiskAwareSearch(empty_grid).search((0, 0), (4, 4), max_expansions=1)
        assert not result.success
        assert result.path == []


# ==============================================================================
# RISK WEIGHTING
# ==============================================================================

class TestRiskWeighting:

    def test_prefers_lower_accumulated_risk(self):
        # Straight corridor through row 1 is risky; rows 0 and 2 are free
        grid = ProbabilityGrid(5, 3, prior=0.0)
        field = np.zeros((3, 5))
        field[1, 1:4] = 0.5
        search = RiskAwareSearch(grid, aggregator=FixedRisk(field))

        result = search.search((0, 1), (4, 1))
        assert result.success
        assert len(result.path) == 4
        assert all(field[y, x] == 0.0 for x, y in result.path)

    def test_accumulated_cost_outweighs_heuristic(self):
        # Top and middle rows are risky; only the bottom row is free
        grid = ProbabilityGrid(6, 3, prior=0.0)
        field = np.zeros((3, 6))
        field[0, 1:5] = 0.3
        field[1, 2:4] = 0.9
        search = RiskAwareSearch(grid, aggregator=FixedRisk(field))

        result = search.search((0, 1), (5, 1))
        assert result.success
        total = sum(field[y, x] for x, y in result.path)
        assert total == pytest.approx(0.0)

    def test_detours_around_likely_tower(self):
        grid = ProbabilityGrid(15, 9, prior=0.0)
        grid.set_probability(7, 2, 0.9)
        aggregator = RiskAggregator(grid)
        search = RiskAwareSearch(grid, aggregator=aggregator)

        result = search.search((0, 4), (14, 4))
        assert result.success
        assert result.path[-1] == (14, 4)
        assert is_connected((0, 4), result.path)
        exposure = sum(aggregator.hit_probability(x, y) for x, y in result.path)
        assert exposure == pytest.approx(0.0)
        assert aggregator.hit_probability(7, 4) > 0.6
