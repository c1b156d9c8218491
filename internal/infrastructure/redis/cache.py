"""
Redis Cache implementation.

Cache-Aside for attribute metadata, with jittered TTLs.
"""
import random
from typing import Iterable, Optional

import msgpack
import redis.asyncio as aioredis
from redis.asyncio import Redis
from redis.exceptions import RedisError

from internal.domain.attribute import AttributeDefinition
from internal.domain.ports import AttributeSource
from internal.infrastructure.metrics import ATTRIBUTE_CACHE_LOOKUPS
from pkg.logger.logger import get_logger


logger = get_logger(__name__)


# Default TTL in seconds (10 minutes)
DEFAULT_TTL = 600
# Maximum jitter in seconds (1 minute)
MAX_JITTER = 60


class RedisCache:
    """
    Redis cache with msgpack values.

    Cache failures are logged and reported as misses; the cache is never
    the source of truth.
    """

    def __init__(
        self,
        redis_url: str,
        default_ttl: int = DEFAULT_TTL,
        max_jitter: int = MAX_JITTER,
    ) -> None:
        """
        Initialize the Redis cache.

        Args:
            redis_url: Redis connection URL.
            default_ttl: Default TTL in seconds.
            max_jitter: Maximum jitter to add to TTL.
        """
        self._redis_url = redis_url
        self._default_ttl = default_ttl
        self._max_jitter = max_jitter
        self._redis: Optional[Redis] = None

    async def connect(self) -> None:
        """Connect to Redis."""
        self._redis = aioredis.from_url(
            self._redis_url,
            decode_responses=False,
        )
        await self._redis.ping()
        logger.info("Connected to Redis", url=self._redis_url)

    async def disconnect(self) -> None:
        """Disconnect from Redis."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None
            logger.info("Disconnected from Redis")

    def _get_ttl_with_jitter(self, ttl: Optional[int] = None) -> int:
        # Spreads expiry of keys written together
        base_ttl = ttl or self._default_ttl
        return base_ttl + random.randint(0, self._max_jitter)

    async def get(self, key: str) -> Optional[dict]:
        """
        Get a value from cache.

        Args:
            key: Cache key.

        Returns:
            Cached value as dict, or None if not found.
        """
        if not self._redis:
            return None

        try:
            data = await self._redis.get(key)
            if data is None:
                logger.debug("Cache miss", key=key)
                return None
            return msgpack.unpackb(data, raw=False)
        except (RedisError, ValueError) as e:
            logger.error("Cache get error", key=key, error=str(e))
            return None

    async def set(
        self,
        key: str,
        value: dict,
        ttl: Optional[int] = None,
    ) -> bool:
        """
        Set a value in cache with TTL.

        Args:
            key: Cache key.
            value: Value to cache.
            ttl: TTL in seconds. Uses default with jitter if not provided.

        Returns:
            True if successful, False otherwise.
        """
        if not self._redis:
            return False

        try:
            data = msgpack.packb(value, use_bin_type=True)
            ttl_with_jitter = self._get_ttl_with_jitter(ttl)
            await self._redis.setex(key, ttl_with_jitter, data)
            logger.debug("Cache set", key=key, ttl=ttl_with_jitter)
            return True
        except (RedisError, TypeError, ValueError) as e:
            logger.error("Cache set error", key=key, error=str(e))
            return False


class CachedAttributeCatalog:
    """
    AttributeCatalog decorator caching the attribute table in Redis.

    The whole table lives under one key and lookups are answered from it,
    so request parameter names and sort keys never become cache keys.
    """

    SNAPSHOT_KEY = "attribute:all"

    def __init__(
        self,
        catalog: AttributeSource,
        cache: RedisCache,
        ttl: Optional[int] = None,
    ) -> None:
        """
        Initialize the cached catalog.

        Args:
            catalog: Catalog answering cache misses.
            cache: RedisCache instance.
            ttl: TTL for the cached table.
        """
        self._catalog = catalog
        self._cache = cache
        self._ttl = ttl

    async def _snapshot(self) -> dict[str, AttributeDefinition]:
        cached = await self._cache.get(self.SNAPSHOT_KEY)
        if cached is not None:
            ATTRIBUTE_CACHE_LOOKUPS.labels(result="hit").inc()
            definitions = [AttributeDefinition.from_dict(item) for item in cached["items"]]
        else:
            ATTRIBUTE_CACHE_LOOKUPS.labels(result="miss").inc()
            definitions = await self._catalog.all_attributes()
            await self._cache.set(
                self.SNAPSHOT_KEY,
                {"items": [definition.to_dict() for definition in definitions]},
                ttl=self._ttl,
            )
        return {definition.code: definition for definition in definitions}

    async def filterable_attributes(
        self, codes: Iterable[str]
    ) -> list[AttributeDefinition]:
        """Filterable definitions among ``codes``, ordered by code."""
        codes = sorted(set(codes))
        if not codes:
            return []

        snapshot = await self._snapshot()
        return [
            snapshot[code]
            for code in codes
            if code in snapshot and snapshot[code].is_filterable
        ]

    async def by_code(self, code: str) -> Optional[AttributeDefinition]:
        """Definition for ``code``, None when the table has no such attribute."""
        snapshot = await self._snapshot()
        return snapshot.get(code)
