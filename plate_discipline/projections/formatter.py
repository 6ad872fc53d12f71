"""
Projection formatting: expected events to ranges, DFS points and insights.

Walks and hit-by-pitch are each worth 2 DFS points. Ranges are fixed
multiples of the expectation (walks +/-30%, HBP +/-50%), and HBP
confidence is held below walk confidence because HBP is far noisier.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List

from plate_discipline.projections.advanced_metrics import AdvancedMatchupMetrics, MatchupAdvantage
from plate_discipline.projections.results import WalksProjection
from plate_discipline.projections.settings import DEFAULT_SETTINGS, EngineSettings

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

# Conservative projection returned whenever the blend cannot be trusted
DEFAULT_WALKS = {'expected': 0.4, 'high': 0.6, 'low': 0.2, 'range': 0.4}
DEFAULT_HBP = {'expected': 0.04, 'high': 0.06, 'low': 0.02, 'range': 0.04}
DEFAULT_CONTROL_RATING = 5.0
DEFAULT_CONFIDENCE = 50.0


# =============================================================================
# Data Classes
# =============================================================================

@dataclass(frozen=True)
class ProjectionRange:
    """Expected count with bounds, DFS points and confidence."""
    expected: float
    high: float
    low: float
    range: float
    points: float
    confidence: float


@dataclass(frozen=True)
class OverallProjection:
    control_rating: float
    confidence_score: float
    total_points: float


@dataclass(frozen=True)
class ControlProjection:
    """Final walks/HBP projection for one batter in one game."""
    walks: ProjectionRange
    hbp: ProjectionRange
    overall: OverallProjection

    @classmethod
    def default(cls, settings: EngineSettings = DEFAULT_SETTINGS) -> 'ControlProjection':
        """The fixed conservative projection."""
        scoring = settings.scoring
        confidence = settings.confidence
        walk_points = DEFAULT_WALKS['expected'] * scoring.walk_points
        hbp_points = DEFAULT_HBP['expected'] * scoring.hbp_points

        return cls(
            walks=ProjectionRange(points=walk_points, confidence=DEFAULT_CONFIDENCE, **DEFAULT_WALKS),
            hbp=ProjectionRange(
                points=hbp_points,
                confidence=max(confidence.hbp_floor, DEFAULT_CONFIDENCE - confidence.hbp_penalty),
                **DEFAULT_HBP
            ),
            overall=OverallProjection(
                control_rating=DEFAULT_CONTROL_RATING,
                confidence_score=DEFAULT_CONFIDENCE,
                total_points=walk_points + hbp_points,
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PointsEstimate:
    expected: float
    points: float
    confidence: float


@dataclass(frozen=True)
class AdvancedDisciplineProjection:
    """DFS projection built straight from advanced matchup metrics."""
    walks: PointsEstimate
    hbp: PointsEstimate
    total: PointsEstimate
    insights: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# =============================================================================
# Formatting
# =============================================================================

def hbp_confidence(confidence_score: float, settings: EngineSettings = DEFAULT_SETTINGS) -> float:
    """Depress confidence for HBP relative to walks, never below the floor."""
    policy = settings.confidence
    return max(policy.hbp_floor, confidence_score - policy.hbp_penalty)


def format_control_projection(projection: WalksProjection,
                              settings: EngineSettings = DEFAULT_SETTINGS) -> ControlProjection:
    """
    Convert a walks projection into ranges and points.

    A projection that is itself the blend's fallback is replaced by the
    fixed default rather than formatted.
    """
    if projection.is_default:
        return ControlProjection.default(settings)

    scoring = settings.scoring
    walks = projection.expected_walks
    hbp = projection.expected_hbp

    walks_high = walks * scoring.walk_high_multiplier
    walks_low = walks * scoring.walk_low_multiplier
    hbp_high = hbp * scoring.hbp_high_multiplier
    hbp_low = hbp * scoring.hbp_low_multiplier

    walk_points = walks * scoring.walk_points
    hbp_points = hbp * scoring.hbp_points

    return ControlProjection(
        walks=ProjectionRange(
            expected=walks,
            high=walks_high,
            low=walks_low,
            range=walks_high - walks_low,
            points=walk_points,
            confidence=projection.confidence_score,
        ),
        hbp=ProjectionRange(
            expected=hbp,
            high=hbp_high,
            low=hbp_low,
            range=hbp_high - hbp_low,
            points=hbp_points,
            confidence=hbp_confidence(projection.confidence_score, settings),
        ),
        overall=OverallProjection(
            control_rating=settings.league.control_rating,
            confidence_score=projection.confidence_score,
            total_points=walk_points + hbp_points,
        ),
    )


def matchup_insights(metrics: AdvancedMatchupMetrics, settings: EngineSettings = DEFAULT_SETTINGS) -> List[str]:
    """Short human-readable notes on the matchup."""
    policy = settings.advanced
    batter = metrics.batter_metrics
    pitcher = metrics.pitcher_metrics
    insights = []

    if metrics.matchup_advantage is MatchupAdvantage.BATTER:
        insights.append("Batter has plate discipline advantage in this matchup")
        if batter.chase_rate < policy.patient_chase_rate and pitcher.zone_rate < policy.wild_zone_rate:
            insights.append("Patient batter vs. wild pitcher creates walk potential")
    elif metrics.matchup_advantage is MatchupAdvantage.PITCHER:
        insights.append("Pitcher has control advantage in this matchup")
        if batter.chase_rate > policy.free_swing_chase_rate and pitcher.zone_rate > policy.command_zone_rate:
            insights.append("Free-swinging batter vs. control pitcher reduces walk potential")

    if metrics.prediction_confidence < settings.confidence.low_sample_confidence:
        insights.append("Limited sample size - prediction has higher variance")
    elif metrics.prediction_confidence > settings.confidence.strong_sample_confidence:
        insights.append("Strong sample size with quality plate discipline metrics")

    return insights


def format_advanced_projection(metrics: AdvancedMatchupMetrics,
                               settings: EngineSettings = DEFAULT_SETTINGS) -> AdvancedDisciplineProjection:
    """Build the advanced DFS projection from matchup metrics."""
    plate_appearances = settings.weights.plate_appearances_per_game
    scoring = settings.scoring
    policy = settings.confidence

    expected_walks = metrics.expected_outcomes.walk_probability * plate_appearances
    expected_hbp = metrics.expected_outcomes.hit_by_pitch_probability * plate_appearances
    walk_points = expected_walks * scoring.walk_points
    hbp_points = expected_hbp * scoring.hbp_points
    confidence = metrics.prediction_confidence * (policy.maximum / policy.advanced_scale)

    return AdvancedDisciplineProjection(
        walks=PointsEstimate(expected=expected_walks, points=walk_points, confidence=confidence),
        hbp=PointsEstimate(
            expected=expected_hbp,
            points=hbp_points,
            confidence=confidence * policy.advanced_hbp_factor,
        ),
        total=PointsEstimate(
            expected=expected_walks + expected_hbp,
            points=walk_points + hbp_points,
            confidence=confidence,
        ),
        insights=matchup_insights(metrics, settings),
    )
