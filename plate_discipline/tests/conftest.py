"""
Shared fixtures for the plate discipline tests.

The engine only talks to a StatsProvider, so tests run against the
in-memory ``FakeProvider`` below instead of the MLB Stats API.
"""

import copy

import pytest

from plate_discipline.projections.blending_engine import PlateDisciplineEngine
from plate_discipline.services.stats_provider import PlayerNotFoundError, StatsConnectionError

BATTER_ID = 592450
PITCHER_ID = 543037
SEASON = 2024


class FakeProvider:
    """Dict-backed StatsProvider. Missing required data raises PlayerNotFoundError."""

    def __init__(self, batter_seasons=None, careers=None, pitchers=None, splits=None,
                 matchups=None, enhanced_batters=None, enhanced_pitchers=None):
        self.batter_seasons = batter_seasons or {}
        self.careers = careers or {}
        self.pitchers = pitchers or {}
        self.splits = splits or {}
        self.matchups = matchups or {}
        self.enhanced_batters = enhanced_batters or {}
        self.enhanced_pitchers = enhanced_pitchers or {}
        self.calls = []

    def _lookup(self, table, key, name):
        self.calls.append((name, key))
        if key not in table:
            raise PlayerNotFoundError(f"{name}: {key} not found")
        return copy.deepcopy(table[key])

    def fetch_batter_season_stats(self, batter_id, season):
        return self._lookup(self.batter_seasons, batter_id, 'batter_season')

    def fetch_batter_career_stats(self, batter_id):
        return self._lookup(self.careers, batter_id, 'career')

    def fetch_pitcher_season_stats(self, pitcher_id, season):
        return self._lookup(self.pitchers, pitcher_id, 'pitcher_season')

    def fetch_batter_splits(self, batter_id, season):
        self.calls.append(('splits', batter_id))
        return copy.deepcopy(self.splits.get(batter_id))

    def fetch_matchup_history(self, batter_id, pitcher_id):
        self.calls.append(('matchup', (batter_id, pitcher_id)))
        return copy.deepcopy(self.matchups.get((batter_id, pitcher_id)))

    def fetch_enhanced_batter_data(self, batter_id, season):
        return self._lookup(self.enhanced_batters, batter_id, 'enhanced_batter')

    def fetch_enhanced_pitcher_data(self, pitcher_id, season):
        return self._lookup(self.enhanced_pitchers, pitcher_id, 'enhanced_pitcher')


class FailingProvider:
    """Every fetch fails as if the data source were down."""

    def __getattr__(self, name):
        if not name.startswith('fetch_'):
            raise AttributeError(name)

        def fail(*args, **kwargs):
            raise StatsConnectionError(f"{name} unavailable")
        return fail


# =============================================================================
# Sample Bundles
# =============================================================================

def batter_season_bundle(**overrides):
    season = {
        'gamesPlayed': 150,
        'atBats': 500,
        'walks': 80,
        'hitByPitches': 5,
        'sacrificeFlies': 5,
        'strikeouts': 150,
        'hits': 140,
        'obp': 0.38,
        'avg': 0.28,
    }
    season.update(overrides)
    return {
        'fullName': 'Test Batter',
        'position': 'RF',
        'batSide': 'R',
        'currentSeason': season,
    }


def pitcher_season_bundle(**overrides):
    season = {
        'gamesStarted': 30,
        'inningsPitched': 180,
        'walks': 40,
        'strikeouts': 200,
        'hitBatsmen': 6,
        'whip': 1.20,
    }
    season.update(overrides)
    return {
        'fullName': 'Test Pitcher',
        'position': 'P',
        'throws': 'R',
        'currentSeason': season,
    }


MATCHUP_BUNDLE = {
    'stats': {
        'plateAppearances': 25,
        'atBats': 20,
        'hits': 4,
        'walks': 5,
        'hitByPitch': 0,
        'strikeouts': 6,
    }
}

SPLITS_BUNDLE = {
    'vsLeft': {'walkRate': 0.10, 'strikeoutRate': 0.20, 'plateAppearances': 150},
    'vsRight': {'walkRate': 0.14, 'strikeoutRate': 0.24, 'plateAppearances': 440},
}

ENHANCED_BATTER = {
    'currentSeason': {'atBats': 500, 'walks': 80, 'strikeouts': 150, 'hits': 140, 'obp': 0.38},
    'qualityMetrics': {'woba': 0.370},
}

ENHANCED_PITCHER = {
    'currentSeason': {
        'inningsPitched': 180,
        'battersFaced': 720,
        'walks': 40,
        'strikeouts': 200,
        'hitBatsmen': 6,
    },
}


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def traditional_provider():
    """Provider with season data and signals but no enhanced bundles."""
    return FakeProvider(
        batter_seasons={BATTER_ID: batter_season_bundle()},
        pitchers={PITCHER_ID: pitcher_season_bundle()},
        matchups={(BATTER_ID, PITCHER_ID): MATCHUP_BUNDLE},
        splits={BATTER_ID: SPLITS_BUNDLE},
    )


@pytest.fixture
def advanced_provider(traditional_provider):
    """Provider that can also serve the advanced path."""
    traditional_provider.enhanced_batters = {BATTER_ID: copy.deepcopy(ENHANCED_BATTER)}
    traditional_provider.enhanced_pitchers = {PITCHER_ID: copy.deepcopy(ENHANCED_PITCHER)}
    return traditional_provider


@pytest.fixture
def failing_provider():
    return FailingProvider()


@pytest.fixture
def make_engine():
    """Build an engine for a provider with the test season pinned."""
    def _make(provider, **kwargs):
        return PlateDisciplineEngine(provider, default_season=SEASON, **kwargs)
    return _make
