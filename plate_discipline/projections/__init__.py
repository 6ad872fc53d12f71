# Projections Package
"""
Plate Discipline Projection Engine.

This package projects a batter's walks and hit-by-pitch events against a
specific pitcher by blending:
- Season and career plate discipline profiles
- Pitcher control profiles
- Head-to-head history and platoon splits
- Advanced swing-decision metrics, when available

Main classes:
- PlateDisciplineEngine: Main projection interface
- WalksProjection: Blended expected walks/HBP with confidence
- ControlProjection: Ranges and DFS points for walks/HBP

Usage:
    from plate_discipline.projections import create_engine

    engine = create_engine()
    projection = engine.calculate_plate_discipline_projection(592450, 543037)
"""

from .advanced_metrics import (
    AdvancedMatchupMetrics,
    AdvancedMetricsResult,
    MatchupAdvantage,
    MissingStatsError,
)
from .blending_engine import (
    BatterProfileUnavailableError,
    PlateDisciplineEngine,
    create_engine,
)
from .formatter import AdvancedDisciplineProjection, ControlProjection
from .profiles import (
    BatterDisciplineProfile,
    CareerDisciplineProfile,
    PitcherControlProfile,
    Propensity,
    Trend,
)
from .rates import SeasonRateRecord
from .results import ProjectionFactors, ProjectionSource, WalksProjection
from .settings import DEFAULT_SETTINGS, EngineSettings
from .signals import MatchupSignal, PlatoonSignal, SampleSize

__all__ = [
    'PlateDisciplineEngine',
    'create_engine',
    'BatterProfileUnavailableError',
    'MissingStatsError',
    'EngineSettings',
    'DEFAULT_SETTINGS',
    'SeasonRateRecord',
    'BatterDisciplineProfile',
    'CareerDisciplineProfile',
    'PitcherControlProfile',
    'Propensity',
    'Trend',
    'MatchupSignal',
    'PlatoonSignal',
    'SampleSize',
    'AdvancedMatchupMetrics',
    'AdvancedMetricsResult',
    'MatchupAdvantage',
    'WalksProjection',
    'ProjectionFactors',
    'ProjectionSource',
    'ControlProjection',
    'AdvancedDisciplineProjection',
]
