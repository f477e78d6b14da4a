"""
Tests for the ProbabilityGrid belief map.

Run with: pytest tests/test_probability_grid.py -v
"""

import numpy as np
import pytest

from towerrisk.simulation.grid import Cell, GridBoundsError, ProbabilityGrid


# ==============================================================================
# FIXTURES
# ==============================================================================

@pytest.fixture
def grid():
    """8 wide x 5 high grid with the default prior."""
    return ProbabilityGrid(8, 5)


# ==============================================================================
# CONSTRUCTION
# ==============================================================================

class TestConstruction:

    def test_uniform_prior(self, grid):
        assert grid.shape == (5, 8)
        assert np.all(grid.probabilities == 0.01)
        assert not grid.seen.any()
        assert not grid.obstacles.any()
        assert grid.visits.sum() == 0

    def test_custom_prior(self):
        grid = ProbabilityGrid(3, 3, prior=0.2)
        assert grid.get_probability(2, 2) == 0.2

    @pytest.mark.parametrize("width,height,prior", [(0, 3, 0.1), (3, -1, 0.1), (3, 3, 1.5)])
    def test_invalid_arguments(self, width, height, prior):
        with pytest.raises(ValueError):
            ProbabilityGrid(width, height, prior=prior)


# ==============================================================================
# ACCESSORS
# ==============================================================================

class TestAccessors:

    def test_probability_roundtrip(self, grid):
        grid.set_probability(7, 4, 0.42)
        assert grid.get_probability(7, 4) == 0.42
        # Stored [y, x]
        assert grid.probabilities[4, 7] == 0.42

    def test_probability_must_be_valid(self, grid):
        with pytest.raises(ValueError):
            grid.set_probability(1, 1, -0.1)
        with pytest.raises(ValueError):
            grid.set_probability(1, 1, 1.01)

    def test_flags(self, grid):
        grid.set_seen(2, 3)
        grid.set_obstacle(4, 1)
        assert grid.get_seen(2, 3) is True
        assert grid.get_seen(3, 2) is False
        assert grid.get_obstacle(4, 1) is True
        grid.set_obstacle(4, 1, False)
        assert grid.get_obstacle(4, 1) is False

    def test_counters(self, grid):
        assert grid.increment_visit(1, 1) == 1
        assert grid.increment_visit(1, 1) == 2
        assert grid.get_visits(1, 1) == 2
        assert grid.increment_hits(1, 1) == 1
        assert grid.get_hits(1, 1) == 1
        assert grid.get_hits(0, 0) == 0

    def test_cell_view(self, grid):
        grid.set_probability(3, 2, 1.0)
        grid.set_seen(3, 2)
        grid.increment_visit(3, 2)
        cell = grid.cell(3, 2)
        assert cell == Cell(tower_probability=1.0, seen=True, visit_count=1,
                            has_obstacle=False, hit_count=0)

    @pytest.mark.parametrize("x,y", [(-1, 0), (0, -1), (8, 0), (0, 5), (100, 100)])
    def test_out_of_bounds_rejected(self, grid, x, y):
        calls = [
            lambda: grid.get_probability(x, y),
            lambda: grid.set_probability(x, y, 0.5),
            lambda: grid.get_seen(x, y),
            lambda: grid.set_seen(x, y),
            lambda: grid.get_obstacle(x, y),
            lambda: grid.set_obstacle(x, y),
            lambda: grid.increment_visit(x, y),
            lambda: grid.increment_hits(x, y),
            lambda: grid.cell(x, y),
        ]
        for call in calls:
            with pytest.raises(GridBoundsError):
                call()

    def test_bounds_error_is_index_error(self, grid):
        with pytest.raises(IndexError):
            grid.get_probability(8, 0)

    def test_negative_index_not_wrapped(self, grid):
        grid.set_probability(7, 4, 0.9)
        with pytest.raises(GridBoundsError):
            grid.get_probability(-1, -1)
        assert grid.get_probability(7, 4) == 0.9


# ==============================================================================
# SNAPSHOT AND COPY
# ==============================================================================

class TestSnapshot:

    def test_snapshot_is_frozen(self, grid):
        snap = grid.snapshot()
        with pytest.raises(ValueError):
            snap[0, 0] = 0.5

    def test_snapshot_independent_of_later_writes(self, grid):
        snap = grid.snapshot()
        grid.set_probability(0, 0, 0.5)
        assert snap[0, 0] == 0.01
        assert grid.get_probability(0, 0) == 0.5

    def test_copy_is_deep(self, grid):
        grid.set_seen(1, 1)
        clone = grid.copy()
        assert clone == grid
        clone.set_probability(1, 1, 0.0)
        clone.set_obstacle(2, 2)
        assert grid.get_probability(1, 1) == 0.01
        assert grid.get_obstacle(2, 2) is False
        assert clone != grid

    def test_coords_cover_grid(self, grid):
        coords = list(grid.coords())
        assert len(coords) == 40
        assert len(set(coords)) == 40
        assert all(grid.in_bounds(x, y) for x, y in coords)
