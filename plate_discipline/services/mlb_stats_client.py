"""
MLB Stats API client implementing the ``StatsProvider`` contract.

This module wraps the public statsapi.mlb.com endpoints and reshapes
their responses into the raw stat bundles the projection engine consumes.

Features:
- Batter/pitcher season lines, career year-by-year tables
- Batting splits vs LHP/RHP
- Batter-vs-pitcher head-to-head history
- Enhanced bundles (season line + sabermetrics)
- Retry with exponential backoff on transport failures
- Optional TTL caching of every payload

Usage:
    client = MLBStatsClient(cache=get_cache())
    bundle = client.fetch_pitcher_season_stats(pitcher_id=543037, season=2024)
"""

import logging
import time
from functools import wraps
from typing import Any, Dict, List, Optional

import requests
from requests.exceptions import RequestException

from plate_discipline.services.cache_service import CacheService, CacheTTL
from plate_discipline.services.stats_provider import (
    PlayerNotFoundError,
    StatsConnectionError,
    StatsProviderError,
    StatsRateLimitError,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = 'https://statsapi.mlb.com/api/v1'

# Position abbreviations the API uses for pitchers
PITCHER_POSITIONS = {'P', 'SP', 'RP', 'TWP'}

# MLB Stats API field -> bundle field
BATTING_FIELDS = {
    'gamesPlayed': 'gamesPlayed',
    'atBats': 'atBats',
    'plateAppearances': 'plateAppearances',
    'hits': 'hits',
    'baseOnBalls': 'walks',
    'hitByPitch': 'hitByPitches',
    'sacFlies': 'sacrificeFlies',
    'strikeOuts': 'strikeouts',
    'avg': 'avg',
    'obp': 'obp',
}

PITCHING_FIELDS = {
    'gamesStarted': 'gamesStarted',
    'inningsPitched': 'inningsPitched',
    'battersFaced': 'battersFaced',
    'hits': 'hits',
    'baseOnBalls': 'walks',
    'strikeOuts': 'strikeouts',
    'hitBatsmen': 'hitBatsmen',
    'whip': 'whip',
}

COUNT_FIELDS = {
    'gamesPlayed', 'atBats', 'plateAppearances', 'hits', 'walks',
    'hitByPitches', 'sacrificeFlies', 'strikeouts', 'gamesStarted',
    'battersFaced', 'hitBatsmen',
}


# =============================================================================
# Parsing Helpers
# =============================================================================

def parse_innings(value: Any) -> float:
    """
    Convert the API's innings notation to a real number of innings.

    The API reports thirds after the decimal point: "180.1" is 180 1/3.
    """
    if value is None or value == '':
        return 0.0
    text = str(value)
    if '.' not in text:
        return float(text)
    whole, _, outs = text.partition('.')
    return int(whole or 0) + int(outs[:1] or 0) / 3.0


def _to_number(value: Any) -> Optional[float]:
    """Parse API numerics, which arrive as ints, floats or strings like '.312'."""
    if value is None or value == '' or value == '-.--':
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _normalize_line(raw: Dict[str, Any], field_map: Dict[str, str]) -> Dict[str, Any]:
    """Rename and coerce the fields of one stat line."""
    line: Dict[str, Any] = {}
    for api_name, bundle_name in field_map.items():
        if api_name not in raw:
            continue
        if api_name == 'inningsPitched':
            line[bundle_name] = parse_innings(raw[api_name])
            continue
        number = _to_number(raw[api_name])
        if number is None:
            continue
        line[bundle_name] = int(number) if bundle_name in COUNT_FIELDS else number
    return line


# =============================================================================
# Retry Decorator
# =============================================================================

def retry_on_failure(max_retries: Optional[int] = None, delay: float = 1.0, backoff: float = 2.0):
    """
    Decorator to retry a client method on transport failure with exponential backoff.

    Args:
        max_retries: Maximum number of retry attempts (None reads ``self.max_retries``)
        delay: Initial delay between retries in seconds
        backoff: Multiplier for delay after each retry
    """
    def decorator(func):
        @wraps(func)
        def wrapper(self, *args, **kwargs):
            retries = max_retries if max_retries is not None else getattr(self, 'max_retries', 3)
            last_exception = None
            current_delay = delay

            for attempt in range(retries + 1):
                try:
                    return func(self, *args, **kwargs)
                except (RequestException, ConnectionError) as e:
                    last_exception = e
                    if attempt < retries:
                        logger.warning(
                            f"Attempt {attempt + 1}/{retries + 1} failed for {func.__name__}: {e}. "
                            f"Retrying in {current_delay:.1f}s..."
                        )
                        time.sleep(current_delay)
                        current_delay *= backoff
                    else:
                        logger.error(f"All {retries + 1} attempts failed for {func.__name__}")

            raise StatsConnectionError(f"Failed after {retries + 1} attempts: {last_exception}")
        return wrapper
    return decorator


# =============================================================================
# MLB Stats API Client
# =============================================================================

class MLBStatsClient:
    """
    statsapi.mlb.com client producing engine-ready stat bundles.

    All ``fetch_*`` methods either return a bundle, return None for an
    optional signal that does not exist (splits, head-to-head), or raise a
    ``StatsProviderError`` subclass.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: int = 30,
        max_retries: int = 3,
        cache: Optional[CacheService] = None,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the client.

        Args:
            base_url: API root, e.g. https://statsapi.mlb.com/api/v1
            timeout: Per-request timeout in seconds
            max_retries: Retries on transport failure
            cache: Optional payload cache
            session: Optional pre-built requests session
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.max_retries = max_retries
        self.cache = cache
        self.session = session or requests.Session()
        self.session.headers.update({
            'User-Agent': 'PlateDisciplineEngine/1.0',
            'Accept': 'application/json',
        })

    @classmethod
    def from_config(cls, config_class, cache: Optional[CacheService] = None) -> 'MLBStatsClient':
        """Create a client from a configuration class."""
        return cls(
            base_url=config_class.MLB_STATS_API_BASE_URL,
            timeout=config_class.MLB_API_TIMEOUT,
            max_retries=config_class.MLB_API_RETRIES,
            cache=cache,
        )

    # =========================================================================
    # Transport
    # =========================================================================

    @retry_on_failure(delay=1.0, backoff=2.0)
    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        GET a JSON document from the API.

        Raises:
            PlayerNotFoundError: On 404
            StatsRateLimitError: On 429
            StatsProviderError: On any other non-2xx status
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        response = self.session.get(url, params=params, timeout=self.timeout)

        if response.status_code == 404:
            raise PlayerNotFoundError(f"Not found: {path}")
        if response.status_code == 429:
            raise StatsRateLimitError(f"Rate limited on {path}")
        if response.status_code >= 400:
            raise StatsProviderError(f"HTTP {response.status_code} for {path}")

        return response.json()

    def _cached(self, key: str, ttl: int, loader):
        if self.cache is None:
            return loader()
        return self.cache.get_or_load(key, loader, ttl)

    def _get_person(self, player_id: int) -> Dict[str, Any]:
        data = self._get(f"people/{player_id}")
        people = data.get('people') or []
        if not people:
            raise PlayerNotFoundError(f"Player {player_id} not found")
        return people[0]

    def _get_stat_splits(self, player_id: int, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        data = self._get(f"people/{player_id}/stats", params=params)
        splits: List[Dict[str, Any]] = []
        for stat_group in data.get('stats', []):
            splits.extend(stat_group.get('splits', []))
        return splits

    def _season_line(self, player_id: int, group: str, season: int) -> Optional[Dict[str, Any]]:
        splits = self._get_stat_splits(player_id, {
            'stats': 'season',
            'group': group,
            'season': season,
        })
        if not splits:
            return None
        # Traded players get one row per team plus a combined row without a team
        combined = [s for s in splits if 'team' not in s]
        return (combined or splits)[0].get('stat', {})

    # =========================================================================
    # StatsProvider Implementation
    # =========================================================================

    def fetch_batter_season_stats(self, batter_id: int, season: int) -> Dict[str, Any]:
        """Fetch a batter's identity and current-season batting line."""
        def load():
            person = self._get_person(batter_id)
            raw = self._season_line(batter_id, 'hitting', season)
            return {
                'fullName': person.get('fullName', f'Player {batter_id}'),
                'position': person.get('primaryPosition', {}).get('abbreviation', ''),
                'batSide': person.get('batSide', {}).get('code', 'R'),
                'currentSeason': _normalize_line(raw, BATTING_FIELDS) if raw else None,
            }

        key = CacheService.player_key(batter_id, 'batting', season)
        return self._cached(key, CacheTTL.SEASON_STATS, load)

    def fetch_batter_career_stats(self, batter_id: int) -> Dict[str, Any]:
        """Fetch a batter's year-by-year batting lines keyed by season."""
        def load():
            person = self._get_person(batter_id)
            splits = self._get_stat_splits(batter_id, {
                'stats': 'yearByYear',
                'group': 'hitting',
            })

            by_year: Dict[str, List[Dict[str, Any]]] = {}
            for split in splits:
                if split.get('sport', {}).get('id', 1) != 1:
                    continue
                by_year.setdefault(str(split.get('season')), []).append(split)

            career_by_year = {}
            for year, rows in by_year.items():
                combined = [r for r in rows if 'team' not in r]
                if combined:
                    career_by_year[year] = _normalize_line(combined[0].get('stat', {}), BATTING_FIELDS)
                    continue
                totals: Dict[str, Any] = {}
                for row in rows:
                    for name, value in _normalize_line(row.get('stat', {}), BATTING_FIELDS).items():
                        if name in COUNT_FIELDS:
                            totals[name] = totals.get(name, 0) + value
                career_by_year[year] = totals

            return {
                'fullName': person.get('fullName', f'Player {batter_id}'),
                'careerByYear': career_by_year,
            }

        key = CacheService.player_key(batter_id, 'career')
        return self._cached(key, CacheTTL.CAREER_STATS, load)

    def fetch_pitcher_season_stats(self, pitcher_id: int, season: int) -> Dict[str, Any]:
        """Fetch a pitcher's identity and current-season pitching line."""
        def load():
            person = self._get_person(pitcher_id)
            raw = self._season_line(pitcher_id, 'pitching', season)
            return {
                'fullName': person.get('fullName', f'Player {pitcher_id}'),
                'position': person.get('primaryPosition', {}).get('abbreviation', ''),
                'throws': person.get('pitchHand', {}).get('code', 'R'),
                'currentSeason': _normalize_line(raw, PITCHING_FIELDS) if raw else None,
            }

        key = CacheService.player_key(pitcher_id, 'pitching', season)
        return self._cached(key, CacheTTL.SEASON_STATS, load)

    def fetch_batter_splits(self, batter_id: int, season: int) -> Optional[Dict[str, Any]]:
        """Fetch batting splits vs LHP ('vl') and RHP ('vr'); None if either is missing."""
        def load():
            splits = self._get_stat_splits(batter_id, {
                'stats': 'statSplits',
                'group': 'hitting',
                'sitCodes': 'vl,vr',
                'season': season,
            })
            by_code = {s.get('split', {}).get('code'): s.get('stat', {}) for s in splits}
            if 'vl' not in by_code or 'vr' not in by_code:
                return None
            return {
                'vsLeft': _split_line(by_code['vl']),
                'vsRight': _split_line(by_code['vr']),
            }

        key = CacheService.player_key(batter_id, 'splits', season)
        return self._cached(key, CacheTTL.SPLITS, load)

    def fetch_matchup_history(self, batter_id: int, pitcher_id: int) -> Optional[Dict[str, Any]]:
        """Fetch career batter-vs-pitcher totals; None when they have never met."""
        def load():
            data = self._get(f"people/{batter_id}/stats", params={
                'stats': 'vsPlayer',
                'group': 'hitting',
                'opposingPlayerId': pitcher_id,
            })
            for stat_group in data.get('stats', []):
                if stat_group.get('type', {}).get('displayName') != 'vsPlayerTotal':
                    continue
                splits = stat_group.get('splits', [])
                if splits:
                    return {'stats': _normalize_line(splits[0].get('stat', {}), BATTING_FIELDS)}
            return None

        key = CacheService.matchup_key(batter_id, pitcher_id)
        return self._cached(key, CacheTTL.MATCHUPS, load)

    def fetch_enhanced_batter_data(self, batter_id: int, season: int) -> Dict[str, Any]:
        """Season batting line plus sabermetrics (as quality metrics) when published."""
        def load():
            raw = self._season_line(batter_id, 'hitting', season)
            sabermetrics = self._get_stat_splits(batter_id, {
                'stats': 'sabermetrics',
                'group': 'hitting',
                'season': season,
            })
            return {
                'currentSeason': _normalize_line(raw, BATTING_FIELDS) if raw else None,
                'qualityMetrics': sabermetrics[0].get('stat') if sabermetrics else None,
            }

        key = CacheService.player_key(batter_id, 'enhanced-batting', season)
        return self._cached(key, CacheTTL.ENHANCED, load)

    def fetch_enhanced_pitcher_data(self, pitcher_id: int, season: int) -> Dict[str, Any]:
        """
        Season pitching line for the advanced path.

        The Stats API does not publish zone or chase rates, so
        ``controlMetrics`` is left empty and the engine estimates them.
        """
        def load():
            raw = self._season_line(pitcher_id, 'pitching', season)
            return {
                'currentSeason': _normalize_line(raw, PITCHING_FIELDS) if raw else None,
                'controlMetrics': None,
            }

        key = CacheService.player_key(pitcher_id, 'enhanced-pitching', season)
        return self._cached(key, CacheTTL.ENHANCED, load)


def _split_line(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Reshape one platoon split into the splits bundle format."""
    line = _normalize_line(raw, BATTING_FIELDS)
    plate_appearances = line.get('plateAppearances', 0)
    if plate_appearances:
        line['walkRate'] = line.get('walks', 0) / plate_appearances
        line['strikeoutRate'] = line.get('strikeouts', 0) / plate_appearances
    return line
