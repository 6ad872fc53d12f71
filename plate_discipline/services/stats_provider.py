"""
Data provider contract for the plate discipline engine.

The engine never talks to a data source directly. It consumes raw stat
bundles through the ``StatsProvider`` protocol below; bundles are plain
dicts keyed the way the MLB Stats API names things (camelCase), and are
parsed into typed records by the projection modules.

Bundle shapes:
    Batter season:   {'fullName', 'position', 'batSide', 'currentSeason': {...}}
    Batter career:   {'fullName', 'careerByYear': {'2022': {...}, ...}}
    Pitcher season:  {'fullName', 'position', 'throws', 'currentSeason': {...}}
    Splits:          {'vsLeft': {...}, 'vsRight': {...}}
    Matchup:         {'stats': {...}}
    Enhanced:        {'currentSeason': {...}, 'qualityMetrics'?, 'disciplineMetrics'?,
                      'controlMetrics'?}
"""

from typing import Any, Dict, Optional, Protocol


# =============================================================================
# Custom Exceptions
# =============================================================================

class StatsProviderError(Exception):
    """Base exception for stats provider errors."""
    pass


class PlayerNotFoundError(StatsProviderError):
    """Raised when the requested player (or their stats) cannot be found."""
    pass


class StatsRateLimitError(StatsProviderError):
    """Raised when the data source rate limits our requests."""
    pass


class StatsConnectionError(StatsProviderError):
    """Raised when connection to the data source fails."""
    pass


# =============================================================================
# Provider Protocol
# =============================================================================

class StatsProvider(Protocol):
    """Read-only source of raw batter and pitcher statistics."""

    def fetch_batter_season_stats(self, batter_id: int, season: int) -> Dict[str, Any]:
        ...

    def fetch_batter_career_stats(self, batter_id: int) -> Dict[str, Any]:
        ...

    def fetch_pitcher_season_stats(self, pitcher_id: int, season: int) -> Dict[str, Any]:
        ...

    def fetch_batter_splits(self, batter_id: int, season: int) -> Optional[Dict[str, Any]]:
        ...

    def fetch_matchup_history(self, batter_id: int, pitcher_id: int) -> Optional[Dict[str, Any]]:
        ...

    def fetch_enhanced_batter_data(self, batter_id: int, season: int) -> Dict[str, Any]:
        ...

    def fetch_enhanced_pitcher_data(self, pitcher_id: int, season: int) -> Dict[str, Any]:
        ...
