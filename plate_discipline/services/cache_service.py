"""
In-memory response cache for stat provider payloads.

Season lines, career year-by-year tables and head-to-head histories change
at most once a day, while a slate of projections asks for the same pitcher
dozens of times. This TTL cache sits in front of the MLB Stats API client
so repeated lookups within a slate are served from memory.

Features:
- Per-entry TTL with lazy expiry and periodic sweeps
- Thread-safe (the advanced path fetches from two worker threads)
- Player- and matchup-scoped keys
- Load-through lookups that never store an absent (None) payload

Usage:
    cache = get_cache()
    key = CacheService.player_key(660271, 'batting', 2024)
    payload = cache.get_or_load(key, lambda: fetch(660271), ttl=CacheTTL.SEASON_STATS)
"""

import logging
import threading
import time
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


# =============================================================================
# Default TTL Values (in seconds)
# =============================================================================

class CacheTTL:
    """Default TTL values for each kind of stat payload."""

    # Current-season lines update after every game
    SEASON_STATS = 900  # 15 minutes

    # Enhanced (sabermetric) bundles update on the same cadence
    ENHANCED = 900  # 15 minutes

    # Splits and head-to-head history move slowly
    SPLITS = 3600  # 1 hour
    MATCHUPS = 3600  # 1 hour

    # Completed seasons never change
    CAREER_STATS = 86400  # 24 hours


# =============================================================================
# Cache Entry
# =============================================================================

class CacheEntry:
    """A cached payload with its expiry time."""

    __slots__ = ['value', 'expires_at', 'created_at']

    def __init__(self, value: Any, ttl: int):
        self.value = value
        self.created_at = time.time()
        self.expires_at = self.created_at + ttl

    @property
    def is_expired(self) -> bool:
        return time.time() > self.expires_at


# =============================================================================
# Cache Service
# =============================================================================

class CacheService:
    """
    In-memory cache with TTL support.

    All access is guarded by a re-entrant lock. Expired entries are removed
    when read, and swept in bulk at most once per ``cleanup_interval``.
    """

    def __init__(self, default_ttl: int = 900, cleanup_interval: int = 60):
        """
        Initialize the cache service.

        Args:
            default_ttl: TTL in seconds for entries stored without one
            cleanup_interval: Minimum seconds between expiry sweeps
        """
        self._cache: Dict[str, CacheEntry] = {}
        self._lock = threading.RLock()
        self._default_ttl = default_ttl
        self._cleanup_interval = cleanup_interval
        self._last_cleanup = time.time()

        logger.info(f"Stats cache initialized with default TTL={default_ttl}s")

    def get(self, key: str) -> Optional[Any]:
        """
        Retrieve a payload from the cache.

        Returns:
            The cached payload, or None when missing or expired
        """
        self._maybe_cleanup()

        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                logger.debug(f"Cache MISS: {key}")
                return None

            if entry.is_expired:
                del self._cache[key]
                logger.debug(f"Cache EXPIRED: {key}")
                return None

            logger.debug(f"Cache HIT: {key}")
            return entry.value

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """Store a payload, using the default TTL when none is given."""
        if ttl is None:
            ttl = self._default_ttl

        with self._lock:
            self._cache[key] = CacheEntry(value, ttl)
            logger.debug(f"Cache SET: {key} (ttl={ttl}s)")

    def get_or_load(self, key: str, loader: Callable[[], Any], ttl: Optional[int] = None) -> Any:
        """
        Return the cached payload for ``key``, calling ``loader`` on a miss.

        A None result is returned but not stored, so an absent signal
        (no splits, no head-to-head history) is asked for again next time.
        Loader exceptions propagate and nothing is cached.
        """
        payload = self.get(key)
        if payload is not None:
            return payload

        payload = loader()
        if payload is not None:
            self.set(key, payload, ttl)
        return payload

    def clear(self) -> int:
        """Drop every entry and return how many were removed."""
        with self._lock:
            count = len(self._cache)
            self._cache.clear()
            logger.info(f"Cache CLEARED: {count} entries removed")
            return count

    # =========================================================================
    # Stat Payload Keys
    # =========================================================================

    @staticmethod
    def player_key(player_id: int, data_type: str, season: Optional[int] = None) -> str:
        """
        Build a cache key for one player's payload.

        Args:
            player_id: MLB player ID
            data_type: Payload kind ('batting', 'career', 'splits', ...)
            season: Season year, omitted for season-independent payloads
        """
        if season is None:
            return f"player:{player_id}:{data_type}"
        return f"player:{player_id}:{data_type}:{season}"

    @staticmethod
    def matchup_key(batter_id: int, pitcher_id: int) -> str:
        """Build a cache key for a batter-vs-pitcher history."""
        return f"matchup:{batter_id}:{pitcher_id}"

    # =========================================================================
    # Cleanup
    # =========================================================================

    def _maybe_cleanup(self) -> None:
        now = time.time()
        if now - self._last_cleanup > self._cleanup_interval:
            self.cleanup()
            self._last_cleanup = now

    def cleanup(self) -> int:
        """Remove all expired entries and return how many were dropped."""
        with self._lock:
            expired = [key for key, entry in self._cache.items() if entry.is_expired]
            for key in expired:
                del self._cache[key]

            if expired:
                logger.debug(f"Cleanup removed {len(expired)} expired entries")
            return len(expired)


# =============================================================================
# Global Cache Instance
# =============================================================================

_cache_instance: Optional[CacheService] = None


def get_cache(default_ttl: int = 900) -> CacheService:
    """Get the process-wide cache instance, creating it on first use."""
    global _cache_instance
    if _cache_instance is None:
        _cache_instance = CacheService(default_ttl=default_ttl)
    return _cache_instance


def reset_cache() -> None:
    """Reset the process-wide cache instance (useful for testing)."""
    global _cache_instance
    if _cache_instance is not None:
        _cache_instance.clear()
    _cache_instance = None
