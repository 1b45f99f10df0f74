"""Redis cache gateway for murmur.

Thin wrapper over the redis-py async client. Every operation is bounded by a
timeout and treated as fallible I/O: a failed or timed-out read is reported
as a miss, a failed write or delete is logged and swallowed. The cache is an
optimization layer, so an outage must never fail the request that uses it.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Awaitable, Iterable
from typing import TYPE_CHECKING, TypeVar, cast

import redis.asyncio as redis
from redis.exceptions import RedisError

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Default timeout for a single cache round trip (seconds)
DEFAULT_TIMEOUT = 0.5

# Keys per DEL command when purging a prefix
DELETE_BATCH_SIZE = 500

# COUNT hint per SCAN round trip
SCAN_COUNT = 500

# Failures that degrade to a miss instead of propagating
CACHE_ERRORS = (RedisError, OSError, TimeoutError)

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


def create_redis(url: str) -> Redis:
    """Create a Redis client with its own connection pool.

    The client is created once per process and injected into every
    component that needs the cache.
    """
    return redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=False,  # Values are JSON bytes
    )


def escape_pattern(prefix: str) -> str:
    """Escape glob metacharacters so a prefix matches literally in SCAN."""
    return _GLOB_SPECIAL.sub(r"\\\1", prefix)


class RedisCache:
    """Cache operations with graceful degradation.

    Contract:
    - get() returns None on miss, on timeout and on backend failure
    - set_with_ttl(), delete() return False instead of raising
    - list_keys_by_prefix() returns the keys found before a backend failure
    """

    def __init__(self, client: Redis, timeout: float = DEFAULT_TIMEOUT):
        self.client = client
        self.timeout = timeout

    async def _call(self, awaitable: Awaitable[T]) -> T:
        """Run one cache round trip bounded by the configured timeout."""
        return await asyncio.wait_for(awaitable, timeout=self.timeout)

    async def get(self, key: str) -> bytes | None:
        """Get a cached value, or None on miss or cache failure."""
        try:
            return cast(bytes | None, await self._call(self.client.get(key)))
        except CACHE_ERRORS as e:
            logger.warning("Cache get failed for %s, treating as miss: %r", key, e)
            return None

    async def set_with_ttl(self, key: str, value: bytes, ttl_seconds: int) -> bool:
        """Store a value with an expiry. Returns False if the write failed."""
        try:
            await self._call(self.client.set(key, value, ex=ttl_seconds))
            return True
        except CACHE_ERRORS as e:
            logger.warning("Cache set failed for %s: %r", key, e)
            return False

    async def delete(self, key: str) -> bool:
        """Delete a key. Deleting an absent key is not an error."""
        try:
            await self._call(self.client.delete(key))
            return True
        except CACHE_ERRORS as e:
            logger.warning("Cache delete failed for %s: %r", key, e)
            return False

    async def list_keys_by_prefix(self, prefix: str) -> list[str]:
        """List every key starting with prefix.

        Uses SCAN to avoid blocking the server on large keyspaces. Each SCAN
        round trip gets its own timeout. If one fails, the keys found so far
        are returned so a purge still removes them.
        """
        pattern = f"{escape_pattern(prefix)}*"
        keys: list[str] = []
        cursor = 0
        try:
            while True:
                cursor, batch = await self._call(
                    self.client.scan(cursor=cursor, match=pattern, count=SCAN_COUNT)
                )
                keys.extend(key.decode() if isinstance(key, bytes) else key for key in batch)
                if cursor == 0:
                    return keys
        except CACHE_ERRORS as e:
            logger.warning(
                "Cache scan failed for prefix %s after %d keys: %r", prefix, len(keys), e
            )
            return keys

    async def delete_many(self, keys: Iterable[str]) -> int:
        """Delete keys in batches. Returns the number of keys removed."""
        pending = list(keys)
        deleted = 0
        for start in range(0, len(pending), DELETE_BATCH_SIZE):
            batch = pending[start : start + DELETE_BATCH_SIZE]
            try:
                deleted += cast(int, await self._call(self.client.delete(*batch)))
            except CACHE_ERRORS as e:
                logger.warning("Cache delete of %d keys failed: %r", len(batch), e)
        return deleted

    async def health_check(self) -> bool:
        """Check Redis connectivity."""
        try:
            await self._call(cast(Awaitable[bool], self.client.ping()))
            return True
        except CACHE_ERRORS:
            return False
