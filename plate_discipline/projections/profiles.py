"""
Baseline tendency profiles for batters and pitchers.

Builds three profiles from raw provider bundles:
- BatterDisciplineProfile: current-season walk/HBP/K rates plus estimated
  plate discipline (chase, contact, swing rates)
- CareerDisciplineProfile: career totals, best season, recent trend and
  season-to-season consistency
- PitcherControlProfile: per-nine rates, propensity classes and a 1-10
  control rating. Never absent; a league-average profile stands in when
  data is missing.

The builders here are pure: they take an already-fetched bundle and the
engine settings. Fetching and error handling live in the blending engine.
"""

import logging
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd

from plate_discipline.projections.rates import SeasonRateRecord, safe_rate
from plate_discipline.projections.settings import DEFAULT_SETTINGS, EngineSettings

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

# Position abbreviations treated as pitchers
PITCHER_ROLES = {'P', 'SP', 'RP', 'TWP'}

DEFAULT_HANDEDNESS = 'R'


class Propensity(Enum):
    """Three-level tendency classification."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Trend(Enum):
    """Direction of a batter's recent walk rate."""
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


def _serialize(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _serialize(v) for k, v in value.items()}
    return value


def _number(raw: Dict[str, Any], key: str) -> float:
    value = raw.get(key)
    if value is None:
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


# =============================================================================
# Batter Season Profile
# =============================================================================

@dataclass(frozen=True)
class DisciplineMetrics:
    """Estimated swing decisions (fractions of pitches or swings)."""
    chase_rate: float
    contact_rate: float
    zone_swing_rate: float
    whiff_rate: float
    first_pitch_swing_rate: float


@dataclass(frozen=True)
class PitchTypePerformance:
    """Performance scores by pitch family, 50 = league average."""
    vs_fastball: float
    vs_breaking_ball: float
    vs_offspeed: float


@dataclass(frozen=True)
class BatterDisciplineProfile:
    """A batter's current-season plate discipline."""
    player_id: int
    name: str
    bat_side: str
    walk_rate: float
    hbp_rate: float
    strikeout_rate: float
    bb_to_k: float
    plate_appearances: int
    discipline: DisciplineMetrics
    pitch_type_performance: PitchTypePerformance

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def estimate_discipline(bb_to_k: float, settings: EngineSettings = DEFAULT_SETTINGS) -> DisciplineMetrics:
    """
    Seed discipline at league averages and nudge by walk-to-strikeout ratio.

    A BB/K above the patient threshold lowers chase and raises contact;
    below the impatient threshold does the opposite.
    """
    league = settings.league
    thresholds = settings.thresholds
    nudge = thresholds.discipline_nudge

    chase_rate = league.chase_rate
    contact_rate = league.contact_rate

    if bb_to_k > thresholds.patient_bb_to_k:
        chase_rate -= nudge
        contact_rate += nudge
    elif bb_to_k < thresholds.impatient_bb_to_k:
        chase_rate += nudge
        contact_rate -= nudge

    return DisciplineMetrics(
        chase_rate=chase_rate,
        contact_rate=contact_rate,
        zone_swing_rate=league.zone_swing_rate,
        whiff_rate=league.whiff_rate,
        first_pitch_swing_rate=league.first_pitch_swing_rate,
    )


def build_batter_profile(
    batter_id: int,
    bundle: Optional[Dict[str, Any]],
    settings: EngineSettings = DEFAULT_SETTINGS
) -> Optional[BatterDisciplineProfile]:
    """
    Build a batter's season profile from a season stats bundle.

    Returns:
        The profile, or None for pitchers with too few at-bats and for
        season lines missing games played or at-bats
    """
    if not bundle:
        return None

    batting = bundle.get('currentSeason') or {}
    position = str(bundle.get('position') or '').upper()

    if position in PITCHER_ROLES and _number(batting, 'atBats') < settings.thresholds.pitcher_min_at_bats:
        logger.debug(f"Skipping pitcher {batter_id} with too few at-bats")
        return None

    if not batting or not _number(batting, 'gamesPlayed') or not _number(batting, 'atBats'):
        logger.info(f"No valid batting stats found for player {batter_id}")
        return None

    record = SeasonRateRecord.from_dict(batting)
    score = settings.league.pitch_type_score

    return BatterDisciplineProfile(
        player_id=batter_id,
        name=bundle.get('fullName') or f'Player {batter_id}',
        bat_side=bundle.get('batSide') or DEFAULT_HANDEDNESS,
        walk_rate=record.walk_rate,
        hbp_rate=record.hbp_rate,
        strikeout_rate=record.strikeout_rate,
        bb_to_k=record.bb_to_k,
        plate_appearances=record.plate_appearances,
        discipline=estimate_discipline(record.bb_to_k, settings),
        pitch_type_performance=PitchTypePerformance(
            vs_fastball=score,
            vs_breaking_ball=score,
            vs_offspeed=score,
        ),
    )


# =============================================================================
# Batter Career Profile
# =============================================================================

@dataclass(frozen=True)
class CareerDisciplineProfile:
    """Career walk tendencies built from qualifying seasons only."""
    career_walks: int
    career_hbp: int
    career_plate_appearances: int
    career_walk_rate: float
    career_hbp_rate: float
    best_season_walk_rate: float
    recent_trend: Trend
    walk_propensity: Propensity
    season_to_season_consistency: float
    age: int
    years_experience: int
    qualifying_seasons: int

    def to_dict(self) -> Dict[str, Any]:
        return {k: _serialize(v) for k, v in asdict(self).items()}


def _career_frame(career_by_year: Dict[str, Any], min_pa: int) -> pd.DataFrame:
    """One row per qualifying season, sorted chronologically."""
    rows = []
    for season, line in career_by_year.items():
        try:
            year = int(season)
        except (TypeError, ValueError):
            logger.debug(f"Ignoring career entry with unparseable season '{season}'")
            continue

        record = SeasonRateRecord.from_dict(line)
        if record.plate_appearances < min_pa:
            continue

        rows.append({
            'season': year,
            'walks': record.walks,
            'hbp': record.hit_by_pitches,
            'pa': record.plate_appearances,
            'walk_rate': record.walk_rate,
        })

    frame = pd.DataFrame(rows, columns=['season', 'walks', 'hbp', 'pa', 'walk_rate'])
    return frame.sort_values('season').reset_index(drop=True)


def season_consistency(walk_rates: np.ndarray, default: float = 0.5) -> float:
    """
    Score how stable walk rate is from one season to the next.

    Averages the absolute relative change between consecutive seasons and
    maps it to ``1 - mean`` clamped to [0, 1]. A change from a zero rate
    counts as a full (1.0) change when the new rate is positive.
    """
    if len(walk_rates) < 2:
        return default

    previous = walk_rates[:-1]
    current = walk_rates[1:]
    safe_previous = np.where(previous > 0, previous, 1.0)

    changes = np.where(
        previous > 0,
        np.abs(current - previous) / safe_previous,
        np.where(current > 0, 1.0, 0.0)
    )

    return float(np.clip(1.0 - changes.mean(), 0.0, 1.0))


def recent_trend(frame: pd.DataFrame, settings: EngineSettings = DEFAULT_SETTINGS) -> Trend:
    """
    Compare the most recent full season's walk rate to the one before it.

    Careers with fewer than ``trend_min_seasons`` qualifying seasons are
    always stable.
    """
    thresholds = settings.thresholds
    if len(frame) < thresholds.trend_min_seasons:
        return Trend.STABLE

    recent = (
        frame[frame['pa'] >= thresholds.trend_min_season_pa]
        .sort_values('season', ascending=False)
        .head(thresholds.trend_window)
    )

    if len(recent) < 2:
        return Trend.STABLE

    latest = recent.iloc[0]['walk_rate']
    prior = recent.iloc[1]['walk_rate']

    if prior <= 0:
        return Trend.IMPROVING if latest > 0 else Trend.STABLE

    pct_change = (latest - prior) / prior
    if pct_change >= thresholds.trend_change:
        return Trend.IMPROVING
    if pct_change <= -thresholds.trend_change:
        return Trend.DECLINING
    return Trend.STABLE


def classify_walk_propensity(walk_rate: float, settings: EngineSettings = DEFAULT_SETTINGS) -> Propensity:
    thresholds = settings.thresholds
    if walk_rate >= thresholds.high_walk_rate:
        return Propensity.HIGH
    if walk_rate <= thresholds.low_walk_rate:
        return Propensity.LOW
    return Propensity.MEDIUM


def build_career_profile(
    bundle: Optional[Dict[str, Any]],
    reference_year: int,
    settings: EngineSettings = DEFAULT_SETTINGS
) -> Optional[CareerDisciplineProfile]:
    """
    Build a career profile from a year-by-year bundle.

    Seasons under the minimum plate appearances are dropped before any
    aggregate is computed.

    Args:
        bundle: Career bundle with a ``careerByYear`` mapping
        reference_year: Year experience is measured up to
        settings: Engine settings

    Returns:
        The profile, or None when no season qualifies
    """
    if not bundle or not bundle.get('careerByYear'):
        return None

    thresholds = settings.thresholds
    frame = _career_frame(bundle['careerByYear'], thresholds.career_min_season_pa)
    if frame.empty:
        return None

    career_walks = int(frame['walks'].sum())
    career_hbp = int(frame['hbp'].sum())
    career_pa = int(frame['pa'].sum())
    career_walk_rate = safe_rate(career_walks, career_pa)

    full_seasons = frame[frame['pa'] >= thresholds.best_season_min_pa]
    best_season_walk_rate = float(full_seasons['walk_rate'].max()) if not full_seasons.empty else 0.0

    years_experience = max(0, reference_year - int(frame['season'].min()))
    age = int(min(thresholds.max_estimated_age, max(thresholds.debut_age, years_experience + thresholds.debut_age)))

    return CareerDisciplineProfile(
        career_walks=career_walks,
        career_hbp=career_hbp,
        career_plate_appearances=career_pa,
        career_walk_rate=career_walk_rate,
        career_hbp_rate=safe_rate(career_hbp, career_pa),
        best_season_walk_rate=best_season_walk_rate,
        recent_trend=recent_trend(frame, settings),
        walk_propensity=classify_walk_propensity(career_walk_rate, settings),
        season_to_season_consistency=season_consistency(
            frame['walk_rate'].to_numpy(dtype=float),
            default=thresholds.default_consistency
        ),
        age=age,
        years_experience=years_experience,
        qualifying_seasons=len(frame),
    )


# =============================================================================
# Pitcher Control Profile
# =============================================================================

@dataclass(frozen=True)
class ControlMetrics:
    """Propensity classes and estimated command for a pitcher."""
    walk_propensity: Propensity
    hits_propensity: Propensity
    hbp_propensity: Propensity
    zone_percentage: float
    first_pitch_strike_percentage: float
    pitch_efficiency: float


@dataclass(frozen=True)
class PitcherControlProfile:
    """A pitcher's current-season control. Always fully populated."""
    pitcher_id: int
    throws: str
    games_started: int
    innings_pitched: float
    walks: int
    strikeouts: int
    hits: int
    hit_batsmen: int
    walks_per_nine: float
    hits_per_nine: float
    hbp_per_nine: float
    whip: float
    strikeout_to_walk_ratio: float
    control: ControlMetrics
    control_rating: float
    is_default: bool = field(default=False, compare=False)

    @classmethod
    def default(cls, pitcher_id: int, throws: str = DEFAULT_HANDEDNESS,
                settings: EngineSettings = DEFAULT_SETTINGS) -> 'PitcherControlProfile':
        """League-average profile used whenever real data is unavailable."""
        league = settings.league
        return cls(
            pitcher_id=pitcher_id,
            throws=throws,
            games_started=0,
            innings_pitched=0.0,
            walks=0,
            strikeouts=0,
            hits=0,
            hit_batsmen=0,
            walks_per_nine=league.walks_per_nine,
            hits_per_nine=league.hits_per_nine,
            hbp_per_nine=league.hbp_per_nine,
            whip=league.whip,
            strikeout_to_walk_ratio=league.strikeout_to_walk_ratio,
            control=ControlMetrics(
                walk_propensity=Propensity.MEDIUM,
                hits_propensity=Propensity.MEDIUM,
                hbp_propensity=Propensity.MEDIUM,
                zone_percentage=league.zone_percentage,
                first_pitch_strike_percentage=league.first_pitch_strike_percentage,
                pitch_efficiency=league.pitch_efficiency,
            ),
            control_rating=league.control_rating,
            is_default=True,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {k: _serialize(v) for k, v in asdict(self).items()}


def per_nine(count: float, innings_pitched: float) -> float:
    """Scale a count to a per-nine-innings rate."""
    return safe_rate(count, innings_pitched) * 9


def hits_propensity(hits: float, innings_pitched: float,
                    settings: EngineSettings = DEFAULT_SETTINGS) -> Propensity:
    """Classify hits allowed per nine; missing innings counts as medium."""
    if not innings_pitched:
        return Propensity.MEDIUM

    hits_per_nine = per_nine(hits, innings_pitched)
    if hits_per_nine >= settings.thresholds.high_hits_per_nine:
        return Propensity.HIGH
    if hits_per_nine >= settings.thresholds.medium_hits_per_nine:
        return Propensity.MEDIUM
    return Propensity.LOW


def control_rating(walks_per_nine: float, settings: EngineSettings = DEFAULT_SETTINGS) -> float:
    """1-10 rating, 5 at league-average BB/9, higher is better control."""
    thresholds = settings.thresholds
    rating = thresholds.control_rating_scale * (
        settings.league.walks_per_nine / max(thresholds.min_walks_per_nine, walks_per_nine)
    )
    return max(1.0, min(10.0, rating))


def build_pitcher_profile(
    pitcher_id: int,
    bundle: Optional[Dict[str, Any]],
    settings: EngineSettings = DEFAULT_SETTINGS
) -> PitcherControlProfile:
    """
    Build a pitcher's control profile, falling back to the league default.

    The default is returned when the bundle is missing, the player is not
    a pitcher, or there are no innings pitched.
    """
    if not bundle:
        logger.warning(f"No pitcher data found for {pitcher_id}, using default profile")
        return PitcherControlProfile.default(pitcher_id, settings=settings)

    throws = bundle.get('throws') or DEFAULT_HANDEDNESS
    position = str(bundle.get('position') or '').upper()

    if position not in PITCHER_ROLES:
        logger.warning(f"Player {pitcher_id} is not a pitcher (position: {position or 'unknown'})")
        return PitcherControlProfile.default(pitcher_id, throws, settings)

    stats = bundle.get('currentSeason') or {}
    innings_pitched = _number(stats, 'inningsPitched')
    if innings_pitched <= 0:
        logger.warning(f"No innings pitched for pitcher {pitcher_id}, using default profile")
        return PitcherControlProfile.default(pitcher_id, throws, settings)

    walks = int(_number(stats, 'walks'))
    strikeouts = int(_number(stats, 'strikeouts'))
    hit_batsmen = int(_number(stats, 'hitBatsmen'))

    if stats.get('hits') is not None:
        hits = int(_number(stats, 'hits'))
    else:
        hits = max(0, int(round(_number(stats, 'whip') * innings_pitched - walks)))

    walks_per_nine = per_nine(walks, innings_pitched)
    hbp_per_nine = per_nine(hit_batsmen, innings_pitched)
    thresholds = settings.thresholds
    league = settings.league

    walk_propensity = Propensity.MEDIUM
    zone_percentage = league.zone_percentage
    first_pitch_strike = league.first_pitch_strike_percentage
    pitch_efficiency = league.pitch_efficiency

    if walks_per_nine >= thresholds.high_walks_per_nine:
        walk_propensity = Propensity.HIGH
        zone_percentage -= thresholds.control_zone_nudge
        first_pitch_strike -= thresholds.control_zone_nudge
        pitch_efficiency += thresholds.control_efficiency_nudge
    elif walks_per_nine <= thresholds.low_walks_per_nine:
        walk_propensity = Propensity.LOW
        zone_percentage += thresholds.control_zone_nudge
        first_pitch_strike += thresholds.control_zone_nudge
        pitch_efficiency -= thresholds.control_efficiency_nudge

    hbp_propensity = Propensity.MEDIUM
    if hbp_per_nine >= thresholds.high_hbp_per_nine:
        hbp_propensity = Propensity.HIGH
    elif hbp_per_nine <= thresholds.low_hbp_per_nine:
        hbp_propensity = Propensity.LOW

    return PitcherControlProfile(
        pitcher_id=pitcher_id,
        throws=throws,
        games_started=int(_number(stats, 'gamesStarted')),
        innings_pitched=innings_pitched,
        walks=walks,
        strikeouts=strikeouts,
        hits=hits,
        hit_batsmen=hit_batsmen,
        walks_per_nine=walks_per_nine,
        hits_per_nine=per_nine(hits, innings_pitched),
        hbp_per_nine=hbp_per_nine,
        whip=(walks + hits) / innings_pitched,
        strikeout_to_walk_ratio=strikeouts / walks if walks > 0 else float(strikeouts),
        control=ControlMetrics(
            walk_propensity=walk_propensity,
            hits_propensity=hits_propensity(hits, innings_pitched, settings),
            hbp_propensity=hbp_propensity,
            zone_percentage=zone_percentage,
            first_pitch_strike_percentage=first_pitch_strike,
            pitch_efficiency=pitch_efficiency,
        ),
        control_rating=control_rating(walks_per_nine, settings),
    )
