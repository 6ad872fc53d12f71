"""
Tests for the MLB Stats API client.

The HTTP session is mocked; no network access is needed.

Run with: python -m pytest plate_discipline/tests/test_mlb_stats_client.py -v
"""

from unittest.mock import MagicMock, patch

import pytest
from requests.exceptions import ConnectionError as RequestsConnectionError

from plate_discipline.services.cache_service import CacheService
from plate_discipline.services.mlb_stats_client import MLBStatsClient, parse_innings
from plate_discipline.services.stats_provider import (
    PlayerNotFoundError,
    StatsConnectionError,
    StatsProviderError,
    StatsRateLimitError,
)

PERSON = {
    'people': [{
        'id': 543037,
        'fullName': 'Test Pitcher',
        'primaryPosition': {'abbreviation': 'P'},
        'batSide': {'code': 'R'},
        'pitchHand': {'code': 'L'},
    }]
}


def response(payload=None, status_code=200):
    mock = MagicMock()
    mock.status_code = status_code
    mock.json.return_value = payload if payload is not None else {}
    return mock


def routed_session(routes):
    """Session whose get() answers by (path suffix, stats type)."""
    session = MagicMock()

    def get(url, params=None, timeout=None):
        key = (url.rsplit('/api/v1/', 1)[-1], (params or {}).get('stats'))
        if key not in routes:
            return response(status_code=404)
        return response(routes[key])

    session.get.side_effect = get
    session.headers = {}
    return session


@pytest.fixture(autouse=True)
def no_sleep():
    with patch('plate_discipline.services.mlb_stats_client.time.sleep'):
        yield


class TestParsing:
    """Test API value parsing."""

    @pytest.mark.parametrize('value,expected', [
        ('180.1', 180 + 1 / 3),
        ('6.2', 6 + 2 / 3),
        ('45.0', 45.0),
        ('12', 12.0),
        (None, 0.0),
    ])
    def test_parse_innings(self, value, expected):
        assert parse_innings(value) == pytest.approx(expected)


class TestTransport:
    """Test status mapping and retries."""

    def test_not_found(self):
        session = MagicMock()
        session.headers = {}
        session.get.return_value = response(status_code=404)
        client = MLBStatsClient(session=session, max_retries=0)

        with pytest.raises(PlayerNotFoundError):
            client.fetch_pitcher_season_stats(1, 2024)

    def test_rate_limited(self):
        session = MagicMock()
        session.headers = {}
        session.get.return_value = response(status_code=429)
        client = MLBStatsClient(session=session, max_retries=0)

        with pytest.raises(StatsRateLimitError):
            client.fetch_batter_career_stats(1)

    def test_server_error(self):
        session = MagicMock()
        session.headers = {}
        session.get.return_value = response(status_code=500)
        client = MLBStatsClient(session=session, max_retries=0)

        with pytest.raises(StatsProviderError):
            client.fetch_batter_splits(1, 2024)

    def test_retries_connection_errors(self):
        session = MagicMock()
        session.headers = {}
        session.get.side_effect = [RequestsConnectionError("reset"), response(PERSON)]
        client = MLBStatsClient(session=session, max_retries=2)

        assert client._get('people/543037') == PERSON
        assert session.get.call_count == 2

    def test_gives_up_after_retries(self):
        session = MagicMock()
        session.headers = {}
        session.get.side_effect = RequestsConnectionError("down")
        client = MLBStatsClient(session=session, max_retries=2)

        with pytest.raises(StatsConnectionError):
            client._get('people/543037')
        assert session.get.call_count == 3


class TestBundles:
    """Test reshaping API responses into stat bundles."""

    def test_pitcher_season(self):
        session = routed_session({
            ('people/543037', None): PERSON,
            ('people/543037/stats', 'season'): {'stats': [{'splits': [{
                'stat': {
                    'inningsPitched': '180.1', 'baseOnBalls': 40, 'strikeOuts': 200,
                    'hitBatsmen': 6, 'whip': '1.20', 'gamesStarted': 30, 'hits': 176,
                    'battersFaced': 730,
                }
            }]}]},
        })
        bundle = MLBStatsClient(session=session).fetch_pitcher_season_stats(543037, 2024)

        assert bundle['fullName'] == 'Test Pitcher'
        assert bundle['position'] == 'P'
        assert bundle['throws'] == 'L'
        season = bundle['currentSeason']
        assert season['inningsPitched'] == pytest.approx(180 + 1 / 3)
        assert season['walks'] == 40
        assert season['whip'] == pytest.approx(1.2)
        assert season['hits'] == 176

    def test_batter_season_prefers_combined_row(self):
        session = routed_session({
            ('people/1', None): {'people': [{'fullName': 'Traded Guy', 'primaryPosition': {'abbreviation': 'LF'},
                                             'batSide': {'code': 'L'}}]},
            ('people/1/stats', 'season'): {'stats': [{'splits': [
                {'team': {'id': 1}, 'stat': {'atBats': 100, 'baseOnBalls': 10, 'gamesPlayed': 30}},
                {'team': {'id': 2}, 'stat': {'atBats': 200, 'baseOnBalls': 20, 'gamesPlayed': 60}},
                {'stat': {'atBats': 300, 'baseOnBalls': 30, 'gamesPlayed': 90, 'obp': '.350'}},
            ]}]},
        })
        bundle = MLBStatsClient(session=session).fetch_batter_season_stats(1, 2024)

        assert bundle['batSide'] == 'L'
        assert bundle['currentSeason']['atBats'] == 300
        assert bundle['currentSeason']['walks'] == 30
        assert bundle['currentSeason']['obp'] == pytest.approx(0.35)

    def test_batter_without_season(self):
        session = routed_session({
            ('people/1', None): {'people': [{'fullName': 'Rookie'}]},
            ('people/1/stats', 'season'): {'stats': []},
        })
        bundle = MLBStatsClient(session=session).fetch_batter_season_stats(1, 2024)

        assert bundle['currentSeason'] is None
        assert bundle['batSide'] == 'R'

    def test_career_sums_team_rows(self):
        session = routed_session({
            ('people/1', None): {'people': [{'fullName': 'Vet'}]},
            ('people/1/stats', 'yearByYear'): {'stats': [{'splits': [
                {'season': '2022', 'sport': {'id': 1}, 'stat': {'plateAppearances': 600, 'baseOnBalls': 60}},
                {'season': '2023', 'sport': {'id': 1}, 'team': {'id': 1},
                 'stat': {'plateAppearances': 200, 'baseOnBalls': 20}},
                {'season': '2023', 'sport': {'id': 1}, 'team': {'id': 2},
                 'stat': {'plateAppearances': 300, 'baseOnBalls': 40}},
                {'season': '2023', 'sport': {'id': 11}, 'stat': {'plateAppearances': 50, 'baseOnBalls': 9}},
            ]}]},
        })
        bundle = MLBStatsClient(session=session).fetch_batter_career_stats(1)

        assert bundle['careerByYear']['2022'] == {'plateAppearances': 600, 'walks': 60}
        assert bundle['careerByYear']['2023'] == {'plateAppearances': 500, 'walks': 60}

    def test_splits(self):
        session = routed_session({
            ('people/1/stats', 'statSplits'): {'stats': [{'splits': [
                {'split': {'code': 'vl'}, 'stat': {'plateAppearances': 100, 'baseOnBalls': 8, 'strikeOuts': 25}},
                {'split': {'code': 'vr'}, 'stat': {'plateAppearances': 400, 'baseOnBalls': 48, 'strikeOuts': 80}},
            ]}]},
        })
        bundle = MLBStatsClient(session=session).fetch_batter_splits(1, 2024)

        assert bundle['vsLeft']['walkRate'] == pytest.approx(0.08)
        assert bundle['vsRight']['walkRate'] == pytest.approx(0.12)
        assert bundle['vsRight']['strikeoutRate'] == pytest.approx(0.2)

    def test_splits_missing_side(self):
        session = routed_session({
            ('people/1/stats', 'statSplits'): {'stats': [{'splits': [
                {'split': {'code': 'vl'}, 'stat': {'plateAppearances': 100}},
            ]}]},
        })
        assert MLBStatsClient(session=session).fetch_batter_splits(1, 2024) is None

    def test_matchup(self):
        session = routed_session({
            ('people/1/stats', 'vsPlayer'): {'stats': [
                {'type': {'displayName': 'vsPlayer'}, 'splits': [{'stat': {'plateAppearances': 3}}]},
                {'type': {'displayName': 'vsPlayerTotal'}, 'splits': [{'stat': {
                    'plateAppearances': 25, 'atBats': 20, 'hits': 4, 'baseOnBalls': 5,
                    'hitByPitch': 0, 'strikeOuts': 6,
                }}]},
            ]},
        })
        bundle = MLBStatsClient(session=session).fetch_matchup_history(1, 2)

        assert bundle['stats']['plateAppearances'] == 25
        assert bundle['stats']['walks'] == 5
        assert bundle['stats']['hitByPitches'] == 0

    def test_no_matchup_history(self):
        session = routed_session({('people/1/stats', 'vsPlayer'): {'stats': []}})
        assert MLBStatsClient(session=session).fetch_matchup_history(1, 2) is None

    def test_enhanced_batter(self):
        session = routed_session({
            ('people/1/stats', 'season'): {'stats': [{'splits': [{'stat': {'atBats': 500, 'baseOnBalls': 80}}]}]},
            ('people/1/stats', 'sabermetrics'): {'stats': [{'splits': [{'stat': {'woba': 0.371}}]}]},
        })
        bundle = MLBStatsClient(session=session).fetch_enhanced_batter_data(1, 2024)

        assert bundle['currentSeason'] == {'atBats': 500, 'walks': 80}
        assert bundle['qualityMetrics'] == {'woba': 0.371}

    def test_enhanced_pitcher(self):
        session = routed_session({
            ('people/2/stats', 'season'): {'stats': [{'splits': [{'stat': {'inningsPitched': '10.2'}}]}]},
        })
        bundle = MLBStatsClient(session=session).fetch_enhanced_pitcher_data(2, 2024)

        assert bundle['currentSeason']['inningsPitched'] == pytest.approx(10 + 2 / 3)
        assert bundle['controlMetrics'] is None


class TestCaching:
    """Test payload caching."""

    def test_second_fetch_is_served_from_cache(self):
        session = routed_session({
            ('people/543037', None): PERSON,
            ('people/543037/stats', 'season'): {'stats': [{'splits': [{'stat': {'inningsPitched': '50.0'}}]}]},
        })
        cache = CacheService()
        client = MLBStatsClient(session=session, cache=cache)

        first = client.fetch_pitcher_season_stats(543037, 2024)
        second = client.fetch_pitcher_season_stats(543037, 2024)

        assert first == second
        assert session.get.call_count == 2
        assert cache.get(CacheService.player_key(543037, 'pitching', 2024)) == first

    def test_absent_signal_not_cached(self):
        session = routed_session({('people/1/stats', 'vsPlayer'): {'stats': []}})
        client = MLBStatsClient(session=session, cache=CacheService())

        client.fetch_matchup_history(1, 2)
        client.fetch_matchup_history(1, 2)

        assert session.get.call_count == 2


def test_from_config():
    class StubConfig:
        MLB_STATS_API_BASE_URL = 'https://example.test/api/v1/'
        MLB_API_TIMEOUT = 5
        MLB_API_RETRIES = 1

    client = MLBStatsClient.from_config(StubConfig)

    assert client.base_url == 'https://example.test/api/v1'
    assert client.timeout == 5
    assert client.max_retries == 1
