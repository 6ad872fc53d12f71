"""
Advanced plate discipline metrics for a single batter-vs-pitcher matchup.

Uses swing-decision data (chase, zone contact, whiff, zone rate) when the
provider supplies it, and league seeds nudged by walk and strikeout rates
when it does not. From those it scores who holds the plate discipline
advantage and derives per-PA outcome probabilities.

Both players' enhanced bundles are fetched concurrently on a two-worker
thread pool; the rest of the computation is pure.

Usage:
    result = resolve_advanced_metrics(provider, batter_id, pitcher_id, season=2024)
    if result.is_available:
        walk_probability = result.metrics.expected_outcomes.walk_probability
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from plate_discipline.projections.rates import safe_rate
from plate_discipline.projections.settings import DEFAULT_SETTINGS, EngineSettings

logger = logging.getLogger(__name__)


# =============================================================================
# Exceptions
# =============================================================================

class MissingStatsError(Exception):
    """Raised when either player's current-season stats are unavailable."""
    pass


# =============================================================================
# Data Classes
# =============================================================================

class MatchupAdvantage(Enum):
    """Which side holds the plate discipline edge."""
    BATTER = "batter"
    PITCHER = "pitcher"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class BatterAdvancedMetrics:
    chase_rate: float
    zone_contact_rate: float
    whiff_rate: float
    first_pitch_swing_rate: float
    zone_swing_rate: float
    walk_rate: float
    strikeout_rate: float


@dataclass(frozen=True)
class PitcherAdvancedMetrics:
    zone_rate: float
    chase_induced_rate: float
    contact_allowed_rate: float
    first_pitch_strike_rate: float
    walk_rate: float
    strikeout_rate: float


@dataclass(frozen=True)
class ExpectedOutcomes:
    """Per-plate-appearance outcome probabilities."""
    walk_probability: float
    strikeout_probability: float
    hit_by_pitch_probability: float
    in_play_probability: float


@dataclass(frozen=True)
class AdvancedMatchupMetrics:
    """Complete advanced-path analysis of one matchup."""
    batter_metrics: BatterAdvancedMetrics
    pitcher_metrics: PitcherAdvancedMetrics
    matchup_advantage: MatchupAdvantage
    prediction_confidence: float
    has_quality_data: bool
    expected_outcomes: ExpectedOutcomes
    at_bats: int = 0
    innings_pitched: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['matchup_advantage'] = self.matchup_advantage.value
        return data


@dataclass(frozen=True)
class AdvancedMetricsResult:
    """
    Outcome of the advanced path: either metrics, or the reason there are none.

    Build with ``available()`` or ``unavailable()``.
    """
    metrics: Optional[AdvancedMatchupMetrics] = None
    reason: Optional[str] = None

    @classmethod
    def available(cls, metrics: AdvancedMatchupMetrics) -> 'AdvancedMetricsResult':
        return cls(metrics=metrics)

    @classmethod
    def unavailable(cls, reason: str) -> 'AdvancedMetricsResult':
        return cls(reason=reason)

    @property
    def is_available(self) -> bool:
        return self.metrics is not None


# =============================================================================
# Fetching
# =============================================================================

def fetch_enhanced_pair(provider, batter_id: int, pitcher_id: int,
                        season: int) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """
    Fetch both enhanced bundles concurrently.

    Exceptions raised by either fetch propagate once both have finished.
    """
    with ThreadPoolExecutor(max_workers=2) as executor:
        batter_future = executor.submit(provider.fetch_enhanced_batter_data, batter_id, season)
        pitcher_future = executor.submit(provider.fetch_enhanced_pitcher_data, pitcher_id, season)
        return batter_future.result(), pitcher_future.result()


# =============================================================================
# Computation
# =============================================================================

def _number(raw: Dict[str, Any], key: str, default: float = 0.0) -> float:
    value = raw.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _batter_metrics(bundle: Dict[str, Any], settings: EngineSettings) -> Tuple[BatterAdvancedMetrics, int]:
    league = settings.league
    policy = settings.advanced
    stats = bundle['currentSeason']

    walks = _number(stats, 'walks')
    at_bats = _number(stats, 'atBats')
    strikeouts = _number(stats, 'strikeouts')
    hits = _number(stats, 'hits')
    denominator = at_bats + walks

    # Over AB + BB here, not full plate appearances
    if at_bats > 0:
        walk_rate = walks / denominator
        strikeout_rate = strikeouts / denominator
    else:
        walk_rate = league.walk_rate
        strikeout_rate = league.strikeout_rate

    if denominator > 0:
        obp = _number(stats, 'obp') or (hits + walks) / denominator
    else:
        obp = league.obp

    chase_rate = league.chase_rate
    zone_contact_rate = league.zone_contact_rate
    whiff_rate = league.advanced_whiff_rate
    first_pitch_swing_rate = league.first_pitch_swing_rate
    zone_swing_rate = league.advanced_zone_swing_rate

    discipline = bundle.get('disciplineMetrics')
    if discipline:
        chase_rate = _number(discipline, 'chaseRate', chase_rate)
        zone_contact_rate = _number(discipline, 'zoneContactRate', zone_contact_rate)
        whiff_rate = _number(discipline, 'whiffRate', whiff_rate)
        first_pitch_swing_rate = _number(discipline, 'firstPitchSwingRate', first_pitch_swing_rate)
        zone_swing_rate = _number(discipline, 'zoneSwingRate', zone_swing_rate)
    elif bundle.get('qualityMetrics'):
        if obp < policy.low_obp:
            chase_rate = policy.low_obp_chase_rate
        elif obp > policy.high_obp:
            chase_rate = policy.high_obp_chase_rate
        else:
            chase_rate = policy.mid_obp_chase_rate

    metrics = BatterAdvancedMetrics(
        chase_rate=chase_rate,
        zone_contact_rate=zone_contact_rate,
        whiff_rate=whiff_rate,
        first_pitch_swing_rate=first_pitch_swing_rate,
        zone_swing_rate=zone_swing_rate,
        walk_rate=walk_rate,
        strikeout_rate=strikeout_rate,
    )
    return metrics, int(at_bats)


def _pitcher_metrics(bundle: Dict[str, Any],
                     settings: EngineSettings) -> Tuple[PitcherAdvancedMetrics, float, float]:
    league = settings.league
    policy = settings.advanced
    stats = bundle['currentSeason']

    innings_pitched = _number(stats, 'inningsPitched')
    batters_faced = (
        _number(stats, 'battersFaced')
        or innings_pitched * league.batters_per_inning
        or 1.0
    )
    walk_rate = _number(stats, 'walks') / batters_faced
    strikeout_rate = _number(stats, 'strikeouts') / batters_faced

    zone_rate = league.zone_rate
    chase_induced_rate = league.chase_induced_rate
    contact_allowed_rate = league.contact_allowed_rate
    first_pitch_strike_rate = league.first_pitch_strike_percentage

    control = bundle.get('controlMetrics')
    if control:
        zone_rate = _number(control, 'zoneRate', zone_rate)
        chase_induced_rate = _number(control, 'chaseRate', chase_induced_rate)
        if control.get('whiffRate') is not None:
            # Whiff rate arrives as a percentage
            contact_allowed_rate = 1 - _number(control, 'whiffRate') / 100
        first_pitch_strike_rate = _number(control, 'firstPitchStrike', first_pitch_strike_rate)
    else:
        if strikeout_rate > policy.high_strikeout_rate:
            chase_induced_rate += policy.chase_induced_boost
        elif strikeout_rate < policy.low_strikeout_rate:
            chase_induced_rate -= policy.chase_induced_cut

        if walk_rate < policy.low_walk_rate:
            zone_rate += policy.zone_rate_nudge
        elif walk_rate > policy.high_walk_rate:
            zone_rate -= policy.zone_rate_nudge

    hit_batsmen = _number(stats, 'hitBatsmen')
    hbp_probability = hit_batsmen / batters_faced if hit_batsmen else league.hbp_probability

    metrics = PitcherAdvancedMetrics(
        zone_rate=zone_rate,
        chase_induced_rate=chase_induced_rate,
        contact_allowed_rate=contact_allowed_rate,
        first_pitch_strike_rate=first_pitch_strike_rate,
        walk_rate=walk_rate,
        strikeout_rate=strikeout_rate,
    )
    return metrics, innings_pitched, hbp_probability


def score_matchup_advantage(batter: BatterAdvancedMetrics, pitcher: PitcherAdvancedMetrics,
                            settings: EngineSettings = DEFAULT_SETTINGS) -> MatchupAdvantage:
    """Accumulate discipline and contact points and classify the edge."""
    policy = settings.advanced
    score = 0

    if batter.chase_rate < policy.patient_chase_rate and pitcher.zone_rate < policy.wild_zone_rate:
        score += policy.discipline_points
    if batter.chase_rate > policy.free_swing_chase_rate and pitcher.zone_rate > policy.command_zone_rate:
        score -= policy.discipline_points

    if (batter.zone_contact_rate > policy.strong_zone_contact
            and pitcher.contact_allowed_rate > policy.high_contact_allowed):
        score += policy.contact_points
    if (batter.zone_contact_rate < policy.weak_zone_contact
            and pitcher.contact_allowed_rate < policy.low_contact_allowed):
        score -= policy.contact_points

    if score >= policy.advantage_threshold:
        return MatchupAdvantage.BATTER
    if score <= -policy.advantage_threshold:
        return MatchupAdvantage.PITCHER
    return MatchupAdvantage.NEUTRAL


def expected_outcomes(batter: BatterAdvancedMetrics, pitcher: PitcherAdvancedMetrics,
                      hbp_probability: float,
                      settings: EngineSettings = DEFAULT_SETTINGS) -> ExpectedOutcomes:
    """
    Per-PA outcome probabilities from the averaged walk and strikeout rates.

    In-play is the remainder before the walk and strikeout bounds are
    applied, so the four values sum to about 1 rather than exactly.
    """
    policy = settings.advanced

    walk_probability = (batter.walk_rate + pitcher.walk_rate) / 2
    strikeout_probability = (batter.strikeout_rate + pitcher.strikeout_rate) / 2

    if batter.chase_rate < policy.walk_boost_chase_rate and pitcher.zone_rate < policy.walk_boost_zone_rate:
        walk_probability *= policy.walk_boost
    elif batter.chase_rate > policy.walk_cut_chase_rate and pitcher.zone_rate > policy.walk_cut_zone_rate:
        walk_probability *= policy.walk_cut

    if (batter.whiff_rate > policy.strikeout_boost_whiff_rate
            and pitcher.contact_allowed_rate < policy.strikeout_boost_contact_allowed):
        strikeout_probability *= policy.strikeout_boost
    elif (batter.whiff_rate < policy.strikeout_cut_whiff_rate
            and pitcher.contact_allowed_rate > policy.strikeout_cut_contact_allowed):
        strikeout_probability *= policy.strikeout_cut

    in_play_probability = max(0.0, 1 - (walk_probability + strikeout_probability + hbp_probability))

    walk_probability = min(policy.max_walk_probability, max(policy.min_walk_probability, walk_probability))
    strikeout_probability = min(
        policy.max_strikeout_probability,
        max(policy.min_strikeout_probability, strikeout_probability)
    )

    return ExpectedOutcomes(
        walk_probability=walk_probability,
        strikeout_probability=strikeout_probability,
        hit_by_pitch_probability=hbp_probability,
        in_play_probability=in_play_probability,
    )


def compute_advanced_metrics(batter_bundle: Optional[Dict[str, Any]],
                             pitcher_bundle: Optional[Dict[str, Any]],
                             settings: EngineSettings = DEFAULT_SETTINGS) -> AdvancedMatchupMetrics:
    """
    Compute advanced matchup metrics from two enhanced bundles.

    Raises:
        MissingStatsError: If either bundle lacks current-season stats
    """
    if not batter_bundle or not batter_bundle.get('currentSeason'):
        raise MissingStatsError("Missing current-season stats for batter")
    if not pitcher_bundle or not pitcher_bundle.get('currentSeason'):
        raise MissingStatsError("Missing current-season stats for pitcher")

    batter, at_bats = _batter_metrics(batter_bundle, settings)
    pitcher, innings_pitched, hbp_probability = _pitcher_metrics(pitcher_bundle, settings)

    policy = settings.confidence
    has_quality_data = bool(
        (batter_bundle.get('qualityMetrics') or batter_bundle.get('disciplineMetrics'))
        and pitcher_bundle.get('controlMetrics')
    )

    confidence = min(
        policy.advanced_scale,
        max(1.0, safe_rate(at_bats, policy.at_bats_per_point)
            + safe_rate(innings_pitched, policy.innings_per_point))
    )
    if has_quality_data:
        confidence = min(policy.advanced_scale, confidence + policy.quality_data_bonus)

    return AdvancedMatchupMetrics(
        batter_metrics=batter,
        pitcher_metrics=pitcher,
        matchup_advantage=score_matchup_advantage(batter, pitcher, settings),
        prediction_confidence=confidence,
        has_quality_data=has_quality_data,
        expected_outcomes=expected_outcomes(batter, pitcher, hbp_probability, settings),
        at_bats=at_bats,
        innings_pitched=innings_pitched,
    )


def resolve_advanced_metrics(provider, batter_id: int, pitcher_id: int, season: int,
                             settings: EngineSettings = DEFAULT_SETTINGS) -> AdvancedMetricsResult:
    """
    Run the advanced path, reporting failure as an unavailable result.

    Returns:
        AdvancedMetricsResult.available(metrics) or .unavailable(reason)
    """
    try:
        batter_bundle, pitcher_bundle = fetch_enhanced_pair(provider, batter_id, pitcher_id, season)
        metrics = compute_advanced_metrics(batter_bundle, pitcher_bundle, settings)
    except Exception as e:
        reason = f"{type(e).__name__}: {e}"
        logger.warning(f"Advanced metrics unavailable for {batter_id} vs {pitcher_id}: {reason}")
        return AdvancedMetricsResult.unavailable(reason)

    logger.debug(
        f"Advanced metrics for {batter_id} vs {pitcher_id}: "
        f"advantage={metrics.matchup_advantage.value}, confidence={metrics.prediction_confidence:.1f}"
    )
    return AdvancedMetricsResult.available(metrics)
