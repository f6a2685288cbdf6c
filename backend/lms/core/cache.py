"""Redis-backed query cache.

All cache operations fail silently so Redis outages never break a request;
a failed read is a miss and a failed write is logged at DEBUG.
"""

import json
import logging
from collections import OrderedDict
from collections.abc import Awaitable, Callable
from typing import Any

import redis.asyncio as redis

from lms.config import settings

logger = logging.getLogger(__name__)

# Global Redis connection pool
_redis_pool: redis.ConnectionPool | None = None
_redis_client: redis.Redis | None = None


async def get_redis() -> redis.Redis:
    """Get Redis client instance (creates connection pool on first call)."""
    global _redis_pool, _redis_client

    if _redis_client is None:
        _redis_pool = redis.ConnectionPool.from_url(
            settings.redis_url,
            decode_responses=True,
            max_connections=10,
        )
        _redis_client = redis.Redis(connection_pool=_redis_pool)
        logger.info("Redis connection pool initialized")

    return _redis_client


async def close_redis() -> None:
    """Close Redis connection pool."""
    global _redis_pool, _redis_client

    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None

    if _redis_pool:
        await _redis_pool.aclose()
        _redis_pool = None

    logger.info("Redis connection pool closed")


class KeyIndex:
    """Bounded LRU set of cache keys written by this process.

    Redis has no cheap prefix delete, so the keys we wrote are remembered
    here. When full, the least recently written key is forgotten (its Redis
    entry still expires through its TTL).
    """

    def __init__(self, max_keys: int) -> None:
        self.max_keys = max_keys
        self._keys: OrderedDict[str, None] = OrderedDict()

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def add(self, key: str) -> None:
        self._keys[key] = None
        self._keys.move_to_end(key)
        while len(self._keys) > self.max_keys:
            self._keys.popitem(last=False)

    def discard(self, key: str) -> None:
        self._keys.pop(key, None)

    def with_prefix(self, prefix: str) -> list[str]:
        return [key for key in self._keys if key.startswith(prefix)]


class CacheService:
    """JSON values in Redis with TTL and prefix eviction."""

    def __init__(
        self,
        client_factory: Callable[[], Awaitable[redis.Redis]] = get_redis,
        default_ttl: int = 300,
        max_tracked_keys: int = 10_000,
    ) -> None:
        self._client_factory = client_factory
        self.default_ttl = default_ttl
        self.index = KeyIndex(max_tracked_keys)

    async def ping(self) -> bool:
        """True if Redis answers."""
        try:
            client = await self._client_factory()
            return bool(await client.ping())
        except Exception:
            logger.debug("Cache ping failed", exc_info=True)
            return False

    async def get(self, key: str) -> Any | None:
        """Get a cached value by key. Returns None on miss or error."""
        try:
            client = await self._client_factory()
            raw = await client.get(key)
            if raw is None:
                return None
            return json.loads(raw)
        except Exception:
            logger.debug("Cache miss/error for key %s", key, exc_info=True)
            return None

    async def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        """Store a value in cache with TTL. Fails silently."""
        try:
            client = await self._client_factory()
            await client.setex(key, ttl_seconds or self.default_ttl, json.dumps(value, default=str))
            self.index.add(key)
        except Exception:
            logger.debug("Cache set failed for key %s", key, exc_info=True)

    async def remove(self, key: str) -> None:
        """Delete a cached key. Fails silently."""
        self.index.discard(key)
        try:
            client = await self._client_factory()
            await client.delete(key)
        except Exception:
            logger.debug("Cache delete failed for key %s", key, exc_info=True)

    async def remove_by_prefix(self, prefix: str) -> None:
        """Delete every key starting with ``prefix``. Fails silently.

        Keys this process wrote come from the local index; Redis is scanned
        for keys written by other workers or before a restart.
        """
        keys = set(self.index.with_prefix(prefix))
        for key in keys:
            self.index.discard(key)
        try:
            client = await self._client_factory()
            async for key in client.scan_iter(match=f"{prefix}*"):
                keys.add(key)
            if keys:
                await client.delete(*keys)
        except Exception:
            logger.debug("Cache prefix delete failed for %s", prefix, exc_info=True)


_cache_service: CacheService | None = None


def get_cache_service() -> CacheService:
    """Process-wide cache service (dependency injection)."""
    global _cache_service

    if _cache_service is None:
        _cache_service = CacheService(
            get_redis,
            default_ttl=settings.cache_ttl_seconds,
            max_tracked_keys=settings.cache_max_tracked_keys,
        )
    return _cache_service
