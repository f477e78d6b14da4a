"""
TOWERRISK - Tower Belief Maps and Risk-Aware Paths
==================================================

Tracks where hidden towers probably stand, from hit / no-hit outcomes and
direct vision, and plans routes that minimise cumulative exposure risk.

Submodules:
- core: Constants, enums and TowerModelConfig
- simulation: ProbabilityGrid, RiskAggregator, BayesianUpdater,
              RiskAwareSearch, TowerBeliefTracker
- utils: Board persistence
- visualization: ASCII and heatmap views
"""

__version__ = "1.0.0"

__all__ = ['core', 'simulation', 'utils', 'visualization']
