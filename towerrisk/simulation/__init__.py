"""
TOWERRISK Simulation Module
===========================
Belief maintenance and risk-aware planning over a tower probability grid.

This module contains:
- grid: ProbabilityGrid and Cell (the belief map)
- risk: RiskAggregator (noisy-OR hit probability)
- bayes: BayesianUpdater (hit / no-hit evidence)
- search: RiskAwareSearch (risk-weighted A*)
- tracker: TowerBeliefTracker (per-tick evidence intake and fallback steps)
"""

from .grid import Cell, GridBoundsError, ProbabilityGrid
from .risk import RiskAggregator, euclidean_distance
from .bayes import BayesianUpdater
from .search import RiskAwareSearch, SearchNode, SearchResult
from .tracker import TowerBeliefTracker

__all__ = [
    'Cell',
    'GridBoundsError',
    'ProbabilityGrid',
    'RiskAggregator',
    'euclidean_distance',
    'BayesianUpdater',
    'RiskAwareSearch',
    'SearchNode',
    'SearchResult',
    'TowerBeliefTracker',
]
