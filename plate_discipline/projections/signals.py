"""
Optional matchup signals: head-to-head history and platoon splits.

Both signals are optional inputs to the blend. Each builder returns None
when the bundle carries nothing usable, and the engine simply skips it.
"""

import logging
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional

from plate_discipline.projections.rates import SeasonRateRecord, safe_rate
from plate_discipline.projections.settings import DEFAULT_SETTINGS, EngineSettings

logger = logging.getLogger(__name__)


class SampleSize(Enum):
    """How much head-to-head history backs a matchup signal."""
    NONE = "none"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


def classify_sample_size(plate_appearances: int, settings: EngineSettings = DEFAULT_SETTINGS) -> SampleSize:
    """0 PA is none, 1-9 small, 10-19 medium, 20+ large (default thresholds)."""
    thresholds = settings.thresholds
    if plate_appearances >= thresholds.large_sample_pa:
        return SampleSize.LARGE
    if plate_appearances >= thresholds.medium_sample_pa:
        return SampleSize.MEDIUM
    if plate_appearances > 0:
        return SampleSize.SMALL
    return SampleSize.NONE


def is_same_side(bat_side: str, pitcher_throws: str) -> bool:
    """True for L-vs-L and R-vs-R matchups."""
    bats = str(bat_side or 'R').upper()
    throws = str(pitcher_throws or 'R').upper()
    return bats == throws and bats in ('L', 'R')


# =============================================================================
# Matchup Signal
# =============================================================================

@dataclass(frozen=True)
class MatchupSignal:
    """Career batter-vs-pitcher history normalized to rates."""
    plate_appearances: int
    at_bats: int
    hits: int
    walks: int
    hit_by_pitch: int
    strikeouts: int
    walk_rate: float
    hbp_rate: float
    strikeout_rate: float
    hit_rate: float
    relative_walk_rate: float
    relative_hit_rate: float
    sample_size: SampleSize

    @property
    def has_sample(self) -> bool:
        return self.sample_size is not SampleSize.NONE

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['sample_size'] = self.sample_size.value
        return data


def build_matchup_signal(
    bundle: Optional[Dict[str, Any]],
    baseline_walk_rate: float,
    settings: EngineSettings = DEFAULT_SETTINGS
) -> Optional[MatchupSignal]:
    """
    Normalize a head-to-head bundle.

    Args:
        bundle: ``{'stats': {...}}`` as returned by the provider
        baseline_walk_rate: The batter's usual walk rate for comparison
        settings: Engine settings

    Returns:
        MatchupSignal, or None when the bundle has no stats
    """
    if not bundle or not bundle.get('stats'):
        return None

    stats = dict(bundle['stats'])
    # Head-to-head lines name HBP in the singular
    if 'hitByPitches' not in stats and 'hitByPitch' in stats:
        stats['hitByPitches'] = stats['hitByPitch']

    record = SeasonRateRecord.from_dict(stats)
    hits = int(stats.get('hits') or 0)
    hit_rate = safe_rate(hits, record.at_bats)
    thresholds = settings.thresholds

    relative_walk_rate = record.walk_rate / baseline_walk_rate if baseline_walk_rate > 0 else 1.0
    relative_hit_rate = min(
        thresholds.max_relative_hit_rate,
        thresholds.reference_hit_rate / max(thresholds.min_hit_rate, hit_rate)
    )

    return MatchupSignal(
        plate_appearances=record.plate_appearances,
        at_bats=record.at_bats,
        hits=hits,
        walks=record.walks,
        hit_by_pitch=record.hit_by_pitches,
        strikeouts=record.strikeouts,
        walk_rate=record.walk_rate,
        hbp_rate=record.hbp_rate,
        strikeout_rate=record.strikeout_rate,
        hit_rate=hit_rate,
        relative_walk_rate=relative_walk_rate,
        relative_hit_rate=relative_hit_rate,
        sample_size=classify_sample_size(record.plate_appearances, settings),
    )


# =============================================================================
# Platoon Signal
# =============================================================================

@dataclass(frozen=True)
class PlatoonSplit:
    """Walk and strikeout rates against one pitcher hand."""
    walk_rate: float
    strikeout_rate: float
    plate_appearances: float

    @classmethod
    def from_dict(cls, raw: Dict[str, Any], settings: EngineSettings = DEFAULT_SETTINGS) -> 'PlatoonSplit':
        """
        Parse one split, estimating what the source left out.

        Walk rate falls back to (OBP - AVG) scaled by the walk share of
        on-base events; PA to at-bats scaled up; strikeout rate to league.
        """
        thresholds = settings.thresholds

        walk_rate = float(raw.get('walkRate') or 0.0)
        if not walk_rate:
            obp = float(raw.get('obp') or 0.0)
            avg = float(raw.get('avg') or 0.0)
            walk_rate = max(0.0, (obp - avg) * thresholds.obp_walk_share)

        plate_appearances = float(raw.get('plateAppearances') or 0.0)
        if not plate_appearances:
            plate_appearances = float(raw.get('atBats') or 0.0) * thresholds.pa_per_at_bat

        strikeout_rate = float(raw.get('strikeoutRate') or 0.0) or settings.league.platoon_strikeout_rate

        return cls(
            walk_rate=walk_rate,
            strikeout_rate=strikeout_rate,
            plate_appearances=plate_appearances,
        )


@dataclass(frozen=True)
class PlatoonSignal:
    """A batter's splits against left- and right-handed pitching."""
    vs_left: PlatoonSplit
    vs_right: PlatoonSplit
    platoon_difference: float

    def split_for(self, bat_side: str, pitcher_throws: str) -> PlatoonSplit:
        """
        The split blended for a batter facing a pitcher.

        Same-side matchups (L vs L, R vs R) use the vs-left split and every
        other pairing, switch hitters included, uses the vs-right split.
        """
        return self.vs_left if is_same_side(bat_side, pitcher_throws) else self.vs_right

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def build_platoon_signal(
    bundle: Optional[Dict[str, Any]],
    settings: EngineSettings = DEFAULT_SETTINGS
) -> Optional[PlatoonSignal]:
    """Build the platoon signal; None unless both splits are present."""
    if not bundle or not bundle.get('vsLeft') or not bundle.get('vsRight'):
        return None

    vs_left = PlatoonSplit.from_dict(bundle['vsLeft'], settings)
    vs_right = PlatoonSplit.from_dict(bundle['vsRight'], settings)

    return PlatoonSignal(
        vs_left=vs_left,
        vs_right=vs_right,
        platoon_difference=abs(vs_left.walk_rate - vs_right.walk_rate),
    )
