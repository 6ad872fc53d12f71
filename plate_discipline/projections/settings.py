"""
Tuning constants for the plate discipline projection engine.

Every league average, threshold, weight and confidence bonus used by the
profile builders, signal resolvers and the blending engine lives here, in
one frozen structure that is passed into each component. Tests and
experiments build a modified copy with ``dataclasses.replace`` instead of
editing code.

Usage:
    from plate_discipline.projections.settings import DEFAULT_SETTINGS

    weights = DEFAULT_SETTINGS.weights
    rate = weights.batter_walk * batter_rate + weights.pitcher_walk * pitcher_rate
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class LeagueAverages:
    """League-average values used to seed or replace missing data."""
    # Batter rates
    walk_rate: float = 0.08
    strikeout_rate: float = 0.22
    obp: float = 0.33

    # Batter discipline (profile estimates)
    chase_rate: float = 0.30
    contact_rate: float = 0.75
    zone_swing_rate: float = 0.65
    zone_contact_rate: float = 0.85
    whiff_rate: float = 0.25
    first_pitch_swing_rate: float = 0.28
    pitch_type_score: float = 50.0

    # Batter discipline (advanced-path seeds)
    advanced_whiff_rate: float = 0.24
    advanced_zone_swing_rate: float = 0.67

    # Pitcher control
    walks_per_nine: float = 3.0
    hits_per_nine: float = 8.5
    hbp_per_nine: float = 0.5
    whip: float = 1.3
    strikeout_to_walk_ratio: float = 2.5
    control_rating: float = 5.0
    zone_percentage: float = 0.5
    first_pitch_strike_percentage: float = 0.6
    pitch_efficiency: float = 3.8

    # Pitcher advanced-path seeds
    zone_rate: float = 0.48
    chase_induced_rate: float = 0.28
    contact_allowed_rate: float = 0.77
    hbp_probability: float = 0.008

    # Per-game outcomes
    walks_per_game: float = 0.4
    hbp_per_game: float = 0.05

    # Conversions
    batters_per_inning: float = 4.3
    platoon_strikeout_rate: float = 0.22


@dataclass(frozen=True)
class DisciplineThresholds:
    """Classification cut-offs for profiles and signals."""
    # Batter season profile
    pitcher_min_at_bats: int = 20
    patient_bb_to_k: float = 0.5
    impatient_bb_to_k: float = 0.2
    discipline_nudge: float = 0.05

    # Career profile
    career_min_season_pa: int = 50
    best_season_min_pa: int = 200
    trend_min_seasons: int = 3
    trend_min_season_pa: int = 100
    trend_window: int = 3
    trend_change: float = 0.15
    high_walk_rate: float = 0.12
    low_walk_rate: float = 0.06
    debut_age: int = 24
    max_estimated_age: int = 38
    default_consistency: float = 0.5

    # Pitcher control profile
    high_walks_per_nine: float = 4.0
    low_walks_per_nine: float = 2.0
    high_hbp_per_nine: float = 0.6
    low_hbp_per_nine: float = 0.2
    high_hits_per_nine: float = 9.5
    medium_hits_per_nine: float = 7.5
    control_zone_nudge: float = 0.05
    control_efficiency_nudge: float = 0.3
    control_rating_scale: float = 5.0
    min_walks_per_nine: float = 0.5

    # Matchup history
    large_sample_pa: int = 20
    medium_sample_pa: int = 10
    reference_hit_rate: float = 0.25
    min_hit_rate: float = 0.001
    max_relative_hit_rate: float = 5.0

    # Platoon splits
    obp_walk_share: float = 0.8
    pa_per_at_bat: float = 1.15
    significant_platoon_difference: float = 0.03


@dataclass(frozen=True)
class BlendWeights:
    """Weights for the traditional cascade."""
    batter_walk: float = 0.6
    pitcher_walk: float = 0.4
    matchup_large: float = 0.3
    matchup_medium: float = 0.2
    matchup_small: float = 0.1
    platoon: float = 0.15
    batter_hbp: float = 0.3
    pitcher_hbp: float = 0.7
    plate_appearances_per_game: float = 4.2

    # Factor scale shared by both paths
    high_factor: float = 1.2
    neutral_factor: float = 1.0
    low_factor: float = 0.8
    batter_high_walk_rate: float = 0.12
    batter_medium_walk_rate: float = 0.09
    pitcher_high_walk_rate: float = 0.1
    pitcher_medium_walk_rate: float = 0.07

    def matchup_weight(self, sample_size: str) -> float:
        """Re-blend weight for head-to-head history of the given sample tier."""
        return {
            'large': self.matchup_large,
            'medium': self.matchup_medium,
            'small': self.matchup_small,
        }.get(sample_size, 0.0)


@dataclass(frozen=True)
class AdvancedMetricsPolicy:
    """Thresholds for the advanced (plate discipline metrics) path."""
    # Pitcher estimates without tracking data
    high_strikeout_rate: float = 0.25
    low_strikeout_rate: float = 0.18
    chase_induced_boost: float = 0.05
    chase_induced_cut: float = 0.03
    low_walk_rate: float = 0.07
    high_walk_rate: float = 0.10
    zone_rate_nudge: float = 0.03

    # Batter chase estimated from OBP
    low_obp: float = 0.32
    high_obp: float = 0.38
    low_obp_chase_rate: float = 0.33
    high_obp_chase_rate: float = 0.25
    mid_obp_chase_rate: float = 0.29

    # Matchup advantage scoring
    patient_chase_rate: float = 0.28
    wild_zone_rate: float = 0.46
    free_swing_chase_rate: float = 0.32
    command_zone_rate: float = 0.5
    strong_zone_contact: float = 0.88
    high_contact_allowed: float = 0.8
    weak_zone_contact: float = 0.82
    low_contact_allowed: float = 0.75
    discipline_points: int = 2
    contact_points: int = 1
    advantage_threshold: int = 2

    # Outcome adjustments
    walk_boost_chase_rate: float = 0.27
    walk_boost_zone_rate: float = 0.47
    walk_boost: float = 1.3
    walk_cut_chase_rate: float = 0.33
    walk_cut_zone_rate: float = 0.5
    walk_cut: float = 0.7
    strikeout_boost_whiff_rate: float = 0.27
    strikeout_boost_contact_allowed: float = 0.75
    strikeout_boost: float = 1.2
    strikeout_cut_whiff_rate: float = 0.21
    strikeout_cut_contact_allowed: float = 0.8
    strikeout_cut: float = 0.85

    # Final probability bounds
    min_walk_probability: float = 0.02
    max_walk_probability: float = 0.25
    min_strikeout_probability: float = 0.10
    max_strikeout_probability: float = 0.45


@dataclass(frozen=True)
class ConfidencePolicy:
    """Confidence scoring for both projection paths."""
    base: float = 70.0
    batter_pa_threshold: int = 300
    batter_pa_bonus: float = 5.0
    pitcher_ip_threshold: float = 50.0
    pitcher_ip_bonus: float = 5.0
    matchup_bonus: float = 10.0
    platoon_bonus: float = 5.0
    maximum: float = 100.0

    # Advanced path (1-10 scale)
    advanced_scale: float = 10.0
    at_bats_per_point: float = 100.0
    innings_per_point: float = 20.0
    quality_data_bonus: float = 2.0
    low_sample_confidence: float = 5.0
    strong_sample_confidence: float = 8.0

    # HBP is less predictable than walks
    hbp_penalty: float = 20.0
    hbp_floor: float = 40.0
    advanced_hbp_factor: float = 0.7

    # Default projection
    default_score: float = 30.0


@dataclass(frozen=True)
class ScoringSettings:
    """DFS scoring and projection ranges."""
    walk_points: float = 2.0
    hbp_points: float = 2.0
    walk_high_multiplier: float = 1.3
    walk_low_multiplier: float = 0.7
    hbp_high_multiplier: float = 1.5
    hbp_low_multiplier: float = 0.5


@dataclass(frozen=True)
class EngineSettings:
    """Complete configuration for the projection engine."""
    league: LeagueAverages = field(default_factory=LeagueAverages)
    thresholds: DisciplineThresholds = field(default_factory=DisciplineThresholds)
    weights: BlendWeights = field(default_factory=BlendWeights)
    advanced: AdvancedMetricsPolicy = field(default_factory=AdvancedMetricsPolicy)
    confidence: ConfidencePolicy = field(default_factory=ConfidencePolicy)
    scoring: ScoringSettings = field(default_factory=ScoringSettings)


DEFAULT_SETTINGS = EngineSettings()
