"""
Walks/HBP projection produced by the blending engine.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict

from plate_discipline.projections.settings import DEFAULT_SETTINGS, EngineSettings


class ProjectionSource(Enum):
    """Which tier of the cascade produced a projection."""
    ADVANCED = "advanced"
    TRADITIONAL = "traditional"
    DEFAULT = "default"


@dataclass(frozen=True)
class ProjectionFactors:
    """Explanatory multipliers, 1.0 = neutral."""
    batter_walk_propensity: float = 1.0
    pitcher_control_factor: float = 1.0
    matchup_factor: float = 1.0
    platoon_factor: float = 1.0


@dataclass(frozen=True)
class WalksProjection:
    """Expected walks and HBP for one batter in one game."""
    expected_walks: float
    expected_hbp: float
    confidence_score: float
    factors: ProjectionFactors = field(default_factory=ProjectionFactors)
    source: ProjectionSource = ProjectionSource.TRADITIONAL

    @classmethod
    def default(cls, settings: EngineSettings = DEFAULT_SETTINGS) -> 'WalksProjection':
        """Conservative league-average projection used when the blend fails."""
        return cls(
            expected_walks=settings.league.walks_per_game,
            expected_hbp=settings.league.hbp_per_game,
            confidence_score=settings.confidence.default_score,
            factors=ProjectionFactors(),
            source=ProjectionSource.DEFAULT,
        )

    @property
    def is_default(self) -> bool:
        return self.source is ProjectionSource.DEFAULT

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['source'] = self.source.value
        return data
