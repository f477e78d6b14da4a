"""
Tower Model Configuration
=========================

Tunable parameters of the tower belief model and the risk planner.

Usage:
    >>> config = TowerModelConfig(tower_range=3)
    >>> config.to_dict()['tower_range']
    3
    >>> TowerModelConfig.from_dict({'tower_accuracy': 0.5}).tower_accuracy
    0.5
"""

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict

from towerrisk.core.definitions import (
    INITIAL_TOWER_DENSITY,
    MIN_STEP_RISK,
    RANDOM_WALK_PROB,
    TOWER_ACCURACY,
    TOWER_RANGE,
    VISION_RANGE,
)


@dataclass
class TowerModelConfig:
    """
    Parameters shared by the aggregator, the updater, the search and the tracker.

    Attributes:
        tower_range: Euclidean weapon radius of a tower, in cells
        tower_accuracy: Probability a real tower in range damages a unit per tick
        initial_tower_density: Prior tower probability for an unseen cell
        vision_range: Half-width of the square a unit observes directly
        min_step_risk: Smallest risk a single step can cost; scales the
                       Chebyshev heuristic so it never overestimates
        random_walk_prob: Chance a hit unit takes a random step instead of
                          following its planned path
    """
    tower_range: int = TOWER_RANGE
    tower_accuracy: float = TOWER_ACCURACY
    initial_tower_density: float = INITIAL_TOWER_DENSITY
    vision_range: int = VISION_RANGE
    min_step_risk: float = MIN_STEP_RISK
    random_walk_prob: float = RANDOM_WALK_PROB

    def __post_init__(self):
        if self.tower_range < 0:
            raise ValueError(f"tower_range must be >= 0, got {self.tower_range}")
        if self.vision_range < 0:
            raise ValueError(f"vision_range must be >= 0, got {self.vision_range}")
        for name in ('tower_accuracy', 'initial_tower_density', 'random_walk_prob'):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be in [0, 1], got {value}")
        if self.min_step_risk < 0:
            raise ValueError(f"min_step_risk must be >= 0, got {self.min_step_risk}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TowerModelConfig':
        """Build a config from a dict, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        return cls(**data)
