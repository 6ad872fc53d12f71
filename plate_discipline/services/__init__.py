# Services Package
"""
Data access services: the stats provider contract, the MLB Stats API
client and the payload cache.
"""

from .cache_service import CacheService, CacheTTL, get_cache, reset_cache
from .mlb_stats_client import MLBStatsClient
from .stats_provider import (
    PlayerNotFoundError,
    StatsConnectionError,
    StatsProvider,
    StatsProviderError,
    StatsRateLimitError,
)

__all__ = [
    'CacheService',
    'CacheTTL',
    'get_cache',
    'reset_cache',
    'MLBStatsClient',
    'StatsProvider',
    'StatsProviderError',
    'PlayerNotFoundError',
    'StatsRateLimitError',
    'StatsConnectionError',
]
