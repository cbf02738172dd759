"""Redis-based cache keyed by composite tuples, with TTL and prefix invalidation."""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Iterable, Optional

import redis
from redis.exceptions import ConnectionError, RedisError

from salon_api.core.config import settings

logger = logging.getLogger(__name__)

KEY_SEPARATOR = ":"

_redis_client: Optional[redis.Redis] = None


def make_key(*parts: Any) -> str:
    """Join a composite key tuple into a flat cache key."""
    return KEY_SEPARATOR.join("" if part is None else str(part) for part in parts)


class _InMemoryCache:
    """Fallback in-memory cache when Redis is unavailable."""

    def __init__(self):
        self._cache: dict[str, tuple[Any, float | None]] = {}

    def get(self, key: str) -> Optional[Any]:
        entry = self._cache.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and expires_at <= time.monotonic():
            self._cache.pop(key, None)
            return None
        return value

    def set(self, key: str, value: Any, ex: Optional[int] = None) -> None:
        expires_at = time.monotonic() + ex if ex else None
        self._cache[key] = (value, expires_at)

    def delete(self, *keys: str) -> None:
        for key in keys:
            self._cache.pop(key, None)

    def exists(self, key: str) -> bool:
        return self.get(key) is not None

    def keys_with_prefix(self, prefix: str) -> list[str]:
        return [key for key in self._cache if key.startswith(prefix)]

    def clear(self) -> None:
        self._cache.clear()


def _get_redis_client() -> redis.Redis | _InMemoryCache:
    """Get or create Redis client."""
    global _redis_client

    if settings.REDIS_CACHE_URL.startswith("memory://"):
        return _InMemoryCache()

    if _redis_client is None:
        try:
            pool = redis.ConnectionPool.from_url(
                settings.REDIS_CACHE_URL,
                max_connections=50,
                decode_responses=True,
            )
            client = redis.Redis(connection_pool=pool)
            client.ping()
            _redis_client = client
            logger.info(f"Redis cache connected: {settings.REDIS_CACHE_URL}")
        except (ConnectionError, RedisError) as e:
            logger.warning(f"Failed to connect to Redis cache: {e}. Using fallback in-memory cache.")
            return _InMemoryCache()

    return _redis_client


class Cache:
    """Cache with per-entry TTL and invalidation by key prefix.

    Keys are composite tuples such as ``("availability", location_id, date)``;
    invalidating ``("availability", location_id)`` drops every entry whose key
    starts with that tuple.
    """

    def __init__(self, default_ttl: int = 300, client: redis.Redis | _InMemoryCache | None = None):
        self.default_ttl = default_ttl
        self._client = client if client is not None else _get_redis_client()

    @property
    def is_memory(self) -> bool:
        return isinstance(self._client, _InMemoryCache)

    @staticmethod
    def _key(key: str | Iterable[Any]) -> str:
        if isinstance(key, str):
            return key
        return make_key(*key)

    def get(self, key: str | Iterable[Any]) -> Optional[Any]:
        """Get value from cache, None when missing or expired."""
        flat = self._key(key)
        try:
            if self.is_memory:
                return self._client.get(flat)

            value = self._client.get(flat)
            if value is None:
                return None
            try:
                return json.loads(value)
            except (json.JSONDecodeError, TypeError):
                return value
        except (ConnectionError, RedisError) as e:
            logger.warning(f"Redis cache get error for key {flat}: {e}")
            return None

    def set(self, key: str | Iterable[Any], value: Any, ttl: Optional[int] = None) -> None:
        """Set value in cache with TTL."""
        flat = self._key(key)
        ttl = ttl or self.default_ttl
        try:
            if self.is_memory:
                # Round-trip through JSON so both backends hand back the same shapes
                self._client.set(flat, json.loads(json.dumps(value, default=str)), ex=ttl)
                return

            self._client.setex(flat, ttl, json.dumps(value, default=str))
        except (ConnectionError, RedisError) as e:
            logger.warning(f"Redis cache set error for key {flat}: {e}")

    def delete(self, key: str | Iterable[Any]) -> None:
        """Delete key from cache."""
        flat = self._key(key)
        try:
            self._client.delete(flat)
        except (ConnectionError, RedisError) as e:
            logger.warning(f"Redis cache delete error for key {flat}: {e}")

    def invalidate_prefix(self, prefix: str | Iterable[Any]) -> int:
        """Drop every entry whose key starts with the given composite prefix."""
        flat = self._key(prefix)
        pattern_base = flat if flat.endswith(KEY_SEPARATOR) else flat + KEY_SEPARATOR
        try:
            if self.is_memory:
                keys = self._client.keys_with_prefix(pattern_base)
            else:
                keys = list(self._client.scan_iter(match=f"{pattern_base}*", count=500))
            if self._client.exists(flat):
                keys.append(flat)
            if keys:
                self._client.delete(*keys)
            logger.debug(f"Invalidated {len(keys)} cache entries under {flat}")
            return len(keys)
        except (ConnectionError, RedisError) as e:
            logger.warning(f"Redis cache invalidate error for prefix {flat}: {e}")
            return 0

    def clear(self) -> None:
        """Clear all cache entries."""
        try:
            if self.is_memory:
                self._client.clear()
                return
            self._client.flushdb()
        except (ConnectionError, RedisError) as e:
            logger.warning(f"Redis cache clear error: {e}")


_cache: Cache | None = None


def get_cache() -> Cache:
    """Get global cache instance."""
    global _cache
    if _cache is None:
        _cache = Cache(default_ttl=settings.CACHE_DEFAULT_TTL)
    return _cache


def invalidate_availability(location_id: str | None) -> None:
    """Drop cached availability for a location after its hours or bookings change."""
    if location_id:
        get_cache().invalidate_prefix(("availability", location_id))
