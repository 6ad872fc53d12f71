"""
Plate Discipline Projection Engine.

Projects a batter's walks and hit-by-pitch events (and the DFS points they
are worth) against a specific opposing pitcher by blending several partial
signals into one projection with a 0-100 confidence score.

Cascade:
1. Advanced path: swing-decision metrics for both players. When available
   its outcome probabilities are used directly.
2. Traditional path: 60/40 batter season walk rate / pitcher BB/9 blend,
   re-blended toward head-to-head history (weight by sample size) and the
   platoon split for the pitcher's hand (15%).
3. Default: a conservative league-average projection when anything in the
   traditional path fails.

The two paths are independent formulas and can disagree on the same
inputs; the advanced one wins whenever it is available.

Usage:
    engine = create_engine()
    projection = engine.calculate_plate_discipline_projection(
        batter_id=592450, pitcher_id=543037
    )
    print(projection.walks.expected, projection.overall.total_points)
"""

import logging
from typing import Optional

from plate_discipline.config import get_config
from plate_discipline.projections.advanced_metrics import (
    AdvancedMatchupMetrics,
    AdvancedMetricsResult,
    MatchupAdvantage,
    compute_advanced_metrics,
    fetch_enhanced_pair,
    resolve_advanced_metrics,
)
from plate_discipline.projections.formatter import (
    AdvancedDisciplineProjection,
    ControlProjection,
    format_advanced_projection,
    format_control_projection,
)
from plate_discipline.projections.profiles import (
    BatterDisciplineProfile,
    CareerDisciplineProfile,
    PitcherControlProfile,
    build_batter_profile,
    build_career_profile,
    build_pitcher_profile,
)
from plate_discipline.projections.results import ProjectionFactors, ProjectionSource, WalksProjection
from plate_discipline.projections.settings import DEFAULT_SETTINGS, EngineSettings
from plate_discipline.projections.signals import (
    MatchupSignal,
    PlatoonSignal,
    SampleSize,
    build_matchup_signal,
    build_platoon_signal,
)
from plate_discipline.services.cache_service import get_cache
from plate_discipline.services.mlb_stats_client import MLBStatsClient

logger = logging.getLogger(__name__)


class BatterProfileUnavailableError(Exception):
    """Raised when the traditional path has no season profile for the batter."""
    pass


class PlateDisciplineEngine:
    """
    Walks/HBP projection engine over a ``StatsProvider``.

    The engine holds no per-request state and can be shared across threads.
    Every public method except the two advanced entry points catches
    upstream failures and degrades to an absent signal or a default.
    """

    def __init__(self, provider, settings: EngineSettings = DEFAULT_SETTINGS,
                 default_season: Optional[int] = None):
        """
        Initialize the engine.

        Args:
            provider: Any object implementing the StatsProvider protocol
            settings: Tuning constants
            default_season: Season used when a call omits one
                (defaults to the configured DEFAULT_SEASON)
        """
        self.provider = provider
        self.settings = settings
        self.default_season = default_season if default_season is not None else get_config().DEFAULT_SEASON

        logger.info(f"PlateDisciplineEngine initialized (default season {self.default_season})")

    def _season(self, season: Optional[int]) -> int:
        return season if season is not None else self.default_season

    # =========================================================================
    # Profiles
    # =========================================================================

    def get_player_plate_discipline_stats(self, batter_id: int,
                                          season: Optional[int] = None) -> Optional[BatterDisciplineProfile]:
        """
        Get a batter's current-season plate discipline profile.

        Returns:
            BatterDisciplineProfile, or None when the batter has no usable season
        """
        season = self._season(season)
        try:
            bundle = self.provider.fetch_batter_season_stats(batter_id, season)
            return build_batter_profile(batter_id, bundle, self.settings)
        except Exception as e:
            logger.warning(f"Could not build plate discipline profile for {batter_id} ({season}): {e}")
            return None

    def get_career_plate_discipline_profile(self, batter_id: int,
                                            reference_year: Optional[int] = None
                                            ) -> Optional[CareerDisciplineProfile]:
        """
        Get a batter's career walk tendencies.

        Args:
            batter_id: MLB player ID
            reference_year: Year experience is measured to (defaults to the default season)
        """
        try:
            bundle = self.provider.fetch_batter_career_stats(batter_id)
            return build_career_profile(bundle, self._season(reference_year), self.settings)
        except Exception as e:
            logger.warning(f"Could not build career profile for {batter_id}: {e}")
            return None

    def get_pitcher_control_profile(self, pitcher_id: int,
                                    season: Optional[int] = None) -> PitcherControlProfile:
        """Get a pitcher's control profile. Never None."""
        season = self._season(season)
        try:
            bundle = self.provider.fetch_pitcher_season_stats(pitcher_id, season)
        except Exception as e:
            logger.error(f"Error fetching pitcher control profile for {pitcher_id}: {e}")
            return PitcherControlProfile.default(pitcher_id, settings=self.settings)

        try:
            return build_pitcher_profile(pitcher_id, bundle, self.settings)
        except Exception as e:
            logger.error(f"Error building pitcher control profile for {pitcher_id}: {e}")
            return PitcherControlProfile.default(pitcher_id, settings=self.settings)

    # =========================================================================
    # Signals
    # =========================================================================

    def get_matchup_walk_data(self, batter_id: int, pitcher_id: int,
                              season: Optional[int] = None) -> Optional[MatchupSignal]:
        """Get head-to-head walk data, measured against the batter's season walk rate."""
        return self._matchup_signal(batter_id, pitcher_id, baseline=None, season=season)

    def _matchup_signal(self, batter_id: int, pitcher_id: int, baseline: Optional[float],
                        season: Optional[int] = None) -> Optional[MatchupSignal]:
        try:
            bundle = self.provider.fetch_matchup_history(batter_id, pitcher_id)
            if not bundle or not bundle.get('stats'):
                return None

            if baseline is None:
                profile = self.get_player_plate_discipline_stats(batter_id, season)
                baseline = profile.walk_rate if profile else 0.0

            return build_matchup_signal(bundle, baseline or self.settings.league.walk_rate, self.settings)
        except Exception as e:
            logger.warning(f"Error getting matchup walk data for {batter_id} vs {pitcher_id}: {e}")
            return None

    def get_walk_rate_splits(self, batter_id: int, season: Optional[int] = None) -> Optional[PlatoonSignal]:
        """Get the batter's walk rate splits vs left- and right-handed pitching."""
        season = self._season(season)
        try:
            bundle = self.provider.fetch_batter_splits(batter_id, season)
            return build_platoon_signal(bundle, self.settings)
        except Exception as e:
            logger.warning(f"Error getting walk rate splits for {batter_id}: {e}")
            return None

    # =========================================================================
    # Advanced Path
    # =========================================================================

    def get_advanced_plate_discipline_metrics(self, batter_id: int, pitcher_id: int,
                                              season: Optional[int] = None) -> AdvancedMatchupMetrics:
        """
        Compute advanced matchup metrics.

        Raises:
            MissingStatsError: If either player's current-season stats are missing
            StatsProviderError: If either enhanced fetch fails
        """
        batter_bundle, pitcher_bundle = fetch_enhanced_pair(
            self.provider, batter_id, pitcher_id, self._season(season)
        )
        return compute_advanced_metrics(batter_bundle, pitcher_bundle, self.settings)

    def resolve_advanced_metrics(self, batter_id: int, pitcher_id: int,
                                 season: Optional[int] = None) -> AdvancedMetricsResult:
        """Run the advanced path, returning available(metrics) or unavailable(reason)."""
        return resolve_advanced_metrics(self.provider, batter_id, pitcher_id, self._season(season), self.settings)

    # =========================================================================
    # Blending
    # =========================================================================

    def _tiered_factor(self, rate: float, high: float, medium: float) -> float:
        weights = self.settings.weights
        if rate > high:
            return weights.high_factor
        if rate > medium:
            return weights.neutral_factor
        return weights.low_factor

    def _from_advanced(self, metrics: AdvancedMatchupMetrics) -> WalksProjection:
        weights = self.settings.weights
        policy = self.settings.confidence
        outcomes = metrics.expected_outcomes

        matchup_factor = {
            MatchupAdvantage.BATTER: weights.high_factor,
            MatchupAdvantage.PITCHER: weights.low_factor,
        }.get(metrics.matchup_advantage, weights.neutral_factor)

        return WalksProjection(
            expected_walks=outcomes.walk_probability * weights.plate_appearances_per_game,
            expected_hbp=outcomes.hit_by_pitch_probability * weights.plate_appearances_per_game,
            confidence_score=metrics.prediction_confidence * (policy.maximum / policy.advanced_scale),
            factors=ProjectionFactors(
                batter_walk_propensity=self._tiered_factor(
                    metrics.batter_metrics.walk_rate,
                    weights.batter_high_walk_rate, weights.batter_medium_walk_rate
                ),
                pitcher_control_factor=self._tiered_factor(
                    metrics.pitcher_metrics.walk_rate,
                    weights.pitcher_high_walk_rate, weights.pitcher_medium_walk_rate
                ),
                matchup_factor=matchup_factor,
                platoon_factor=weights.neutral_factor,
            ),
            source=ProjectionSource.ADVANCED,
        )

    def _traditional_projection(self, batter_id: int, pitcher_id: int, season: int) -> WalksProjection:
        """
        Blend season profiles with matchup and platoon signals.

        Raises:
            BatterProfileUnavailableError: If the batter has no season profile
        """
        weights = self.settings.weights
        league = self.settings.league
        policy = self.settings.confidence

        batter = self.get_player_plate_discipline_stats(batter_id, season)
        if batter is None:
            raise BatterProfileUnavailableError(f"No batter profile found for {batter_id}")

        pitcher = self.get_pitcher_control_profile(pitcher_id, season)
        matchup = self._matchup_signal(batter_id, pitcher_id, baseline=batter.walk_rate, season=season)
        platoon = self.get_walk_rate_splits(batter_id, season)

        # BB/9 converted to walks per batter faced
        pitcher_walk_rate = pitcher.walks_per_nine / 9 / league.batters_per_inning
        walk_rate = weights.batter_walk * batter.walk_rate + weights.pitcher_walk * pitcher_walk_rate

        if matchup is not None and matchup.has_sample:
            matchup_weight = weights.matchup_weight(matchup.sample_size.value)
            walk_rate = walk_rate * (1 - matchup_weight) + matchup.walk_rate * matchup_weight

        if platoon is not None:
            split = platoon.split_for(batter.bat_side, pitcher.throws)
            walk_rate = walk_rate * (1 - weights.platoon) + split.walk_rate * weights.platoon

        hbp_rate = weights.batter_hbp * batter.hbp_rate + weights.pitcher_hbp * (pitcher.hbp_per_nine / 9)

        confidence = policy.base
        if batter.plate_appearances > policy.batter_pa_threshold:
            confidence += policy.batter_pa_bonus
        if pitcher.innings_pitched > policy.pitcher_ip_threshold:
            confidence += policy.pitcher_ip_bonus
        if matchup is not None and matchup.has_sample:
            confidence += policy.matchup_bonus
        if platoon is not None:
            confidence += policy.platoon_bonus

        platoon_factor = weights.neutral_factor
        if platoon is not None and abs(platoon.platoon_difference) > self.settings.thresholds.significant_platoon_difference:
            platoon_factor = weights.high_factor

        logger.debug(
            f"Traditional blend {batter_id} vs {pitcher_id}: walk_rate={walk_rate:.4f}, "
            f"hbp_rate={hbp_rate:.4f}, matchup={matchup.sample_size.value if matchup else SampleSize.NONE.value}, "
            f"platoon={'yes' if platoon else 'no'}"
        )

        return WalksProjection(
            expected_walks=walk_rate * weights.plate_appearances_per_game,
            expected_hbp=hbp_rate * weights.plate_appearances_per_game,
            confidence_score=min(policy.maximum, confidence),
            factors=ProjectionFactors(
                batter_walk_propensity=self._tiered_factor(
                    batter.walk_rate, weights.batter_high_walk_rate, weights.batter_medium_walk_rate
                ),
                pitcher_control_factor=self._tiered_factor(
                    pitcher_walk_rate, weights.pitcher_high_walk_rate, weights.pitcher_medium_walk_rate
                ),
                matchup_factor=(matchup.relative_walk_rate if matchup else 0.0) or weights.neutral_factor,
                platoon_factor=platoon_factor,
            ),
            source=ProjectionSource.TRADITIONAL,
        )

    def calculate_expected_walks(self, batter_id: int, pitcher_id: int,
                                 season: Optional[int] = None) -> WalksProjection:
        """
        Project expected walks and HBP for a batter against a pitcher.

        Never raises; returns the default projection on any failure.
        """
        season = self._season(season)
        try:
            advanced = self.resolve_advanced_metrics(batter_id, pitcher_id, season)
            if advanced.is_available:
                return self._from_advanced(advanced.metrics)

            logger.info(f"Falling back to traditional blend for {batter_id} vs {pitcher_id}: {advanced.reason}")
            return self._traditional_projection(batter_id, pitcher_id, season)
        except Exception as e:
            logger.error(f"Error calculating expected walks for {batter_id} vs {pitcher_id}: {e}")
            return WalksProjection.default(self.settings)

    # =========================================================================
    # Projections
    # =========================================================================

    def calculate_plate_discipline_projection(self, batter_id: int, pitcher_id: int,
                                              season: Optional[int] = None) -> ControlProjection:
        """
        Project walks/HBP ranges and DFS points. Never raises.

        Returns:
            ControlProjection, or the fixed default when the blend fell back
        """
        try:
            projection = self.calculate_expected_walks(batter_id, pitcher_id, season)
            return format_control_projection(projection, self.settings)
        except Exception as e:
            logger.error(f"Error calculating plate discipline projection for {batter_id}: {e}")
            return ControlProjection.default(self.settings)

    def calculate_advanced_plate_discipline_projection(self, batter_id: int, pitcher_id: int,
                                                       season: Optional[int] = None
                                                       ) -> AdvancedDisciplineProjection:
        """
        Project walks/HBP points from advanced metrics alone, with insights.

        Raises:
            MissingStatsError: If either player's current-season stats are missing
            StatsProviderError: If either enhanced fetch fails
        """
        metrics = self.get_advanced_plate_discipline_metrics(batter_id, pitcher_id, season)
        return format_advanced_projection(metrics, self.settings)


# =============================================================================
# Factory
# =============================================================================

def create_engine(config_class=None, provider=None,
                  settings: EngineSettings = DEFAULT_SETTINGS) -> PlateDisciplineEngine:
    """
    Create an engine wired to the MLB Stats API client.

    Args:
        config_class: Configuration class (defaults to get_config())
        provider: Optional StatsProvider replacing the MLB Stats API client
        settings: Tuning constants

    Returns:
        Configured PlateDisciplineEngine
    """
    if config_class is None:
        config_class = get_config()

    if provider is None:
        cache = get_cache(config_class.CACHE_DEFAULT_TTL) if config_class.CACHE_ENABLED else None
        provider = MLBStatsClient.from_config(config_class, cache=cache)

    return PlateDisciplineEngine(provider, settings=settings, default_season=config_class.DEFAULT_SEASON)
