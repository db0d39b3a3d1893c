"""Cache Backends — Redis-backed TTL cache and a no-op cache.

Invariants:
    - Every entry is written with the same fixed TTL; entries are never updated in place
    - get() returns None on a miss and raises CacheError on any backend failure
    - Nothing here decides what a failure means; the caller treats CacheError as a miss

Design Decisions:
    - redis.asyncio client without decode_responses: get() hands back the raw bytes and
      decoding is left to the payload parser, so a non-UTF-8 entry is just a corrupt
      entry to the caller, not a client error
    - NullCache always misses: used when no Redis is configured, and in tests
"""

import logging

import redis.asyncio as redis
from redis.exceptions import RedisError

from app.core.errors import CacheError

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 2.0


class RedisCache:
    """Cache over a Redis server; TTL applied with millisecond precision."""

    def __init__(self, client: redis.Redis, ttl_seconds: float = DEFAULT_TTL_SECONDS):
        self._client = client
        self.ttl_ms = max(1, int(ttl_seconds * 1000))

    @classmethod
    def from_url(
        cls,
        url: str,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        pool_size: int = 10,
        pool_timeout: float = 30.0,
        connect_timeout: float = 1.0,
    ) -> "RedisCache":
        pool = redis.BlockingConnectionPool.from_url(
            url,
            max_connections=pool_size,
            timeout=pool_timeout,
            socket_connect_timeout=connect_timeout,
        )
        return cls(redis.Redis(connection_pool=pool), ttl_seconds)

    async def get(self, key: str) -> bytes | None:
        try:
            return await self._client.get(key)
        except RedisError as e:
            raise CacheError(str(e), "get") from e

    async def set(self, key: str, value: str) -> None:
        try:
            await self._client.set(key, value, px=self.ttl_ms)
        except RedisError as e:
            raise CacheError(str(e), "set") from e

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except RedisError as e:
            logger.warning(f"Redis ping failed: {e}")
            return False

    async def close(self) -> None:
        await self._client.aclose()


class NullCache:
    """Cache that stores nothing: every get is a miss, every set is dropped."""

    async def get(self, key: str) -> str | None:
        return None

    async def set(self, key: str, value: str) -> None:
        return None

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        return None
