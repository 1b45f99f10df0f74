"""Read-through cache strategy.

Reads check the cache first and fall back to the source of truth on a miss:

    cache get -> hit: decode and return verbatim
              -> miss: load from source of truth -> populate cache -> return

Negative results (loader returned None) are never cached. Concurrent misses
for the same key inside one process share a single loader call, so a purge of
a hot key does not fan out into one source-of-truth query per waiting
request. No lock is held across a suspension point: waiters only await the
leader's future.

Writers call invalidate() before purging Redis. It detaches the matching
in-flight loads, so reads that start afterwards load again instead of joining
a snapshot taken before the write, and a detached load never leaves its
result in the cache.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import TypeAdapter, ValidationError

if TYPE_CHECKING:
    from murmur.cache.redis import RedisCache

logger = logging.getLogger(__name__)

T = TypeVar("T")

Loader = Callable[[], Awaitable[T | None]]


class ReadThroughCache:
    """Cache-aside reads with in-process miss coalescing."""

    def __init__(self, cache: RedisCache):
        self.cache = cache
        self._inflight: dict[str, asyncio.Future[Any]] = {}

    async def get_or_load(
        self,
        key: str,
        loader: Loader[T],
        ttl: int,
        adapter: TypeAdapter[T],
    ) -> T | None:
        """Return the cached value for key, loading and caching it on a miss.

        Args:
            key: Cache key
            loader: Coroutine function querying the source of truth; returns
                None when the entity does not exist
            ttl: Expiry for the populated entry, in seconds
            adapter: Pydantic adapter used to encode and decode the value

        Returns:
            The value, or None if the loader found nothing.

        Raises:
            Whatever the loader raises. Source-of-truth failures are never
            absorbed here.
        """
        cached = await self.cache.get(key)
        if cached is not None:
            try:
                value = adapter.validate_json(cached)
            except ValidationError:
                logger.warning("Discarding undecodable cache entry %s", key)
                await self.cache.delete(key)
            else:
                logger.debug("Cache hit for %s", key)
                return value

        inflight = self._inflight.get(key)
        if inflight is not None:
            try:
                return await asyncio.shield(inflight)
            except asyncio.CancelledError:
                if not inflight.cancelled():
                    raise
                # The leading request was cancelled; load on our own.

        return await self._load(key, loader, ttl, adapter)

    async def _load(
        self,
        key: str,
        loader: Loader[T],
        ttl: int,
        adapter: TypeAdapter[T],
    ) -> T | None:
        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        self._inflight[key] = future
        try:
            value = await loader()
            if value is not None and self._inflight.get(key) is future:
                await self.cache.set_with_ttl(key, adapter.dump_json(value, by_alias=True), ttl)
                if self._inflight.get(key) is future:
                    logger.debug("Cache populated for %s (ttl=%ds)", key, ttl)
                else:
                    # Invalidated while the write was in flight
                    await self.cache.delete(key)
            elif value is not None:
                logger.debug("Skipping cache population for invalidated load of %s", key)
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            future.set_exception(e)
            future.exception()  # mark retrieved when nobody is waiting
            raise
        else:
            future.set_result(value)
            return value
        finally:
            if self._inflight.get(key) is future:
                del self._inflight[key]

    def invalidate(self, keys: Iterable[str] = (), prefix: str | None = None) -> int:
        """Detach in-flight loads of keys, or of any key under prefix.

        Detached loads still answer the readers already waiting on them but
        never populate the cache. Returns the number of loads detached.
        """
        exact = set(keys)
        stale = [
            key
            for key in self._inflight
            if key in exact or (prefix is not None and key.startswith(prefix))
        ]
        for key in stale:
            del self._inflight[key]
        if stale:
            logger.debug("Detached %d in-flight cache loads", len(stale))
        return len(stale)

    @property
    def inflight_count(self) -> int:
        """Number of keys currently being loaded."""
        return len(self._inflight)
