"""Cache invalidation policy for writes.

Decides which cache keys become stale when a primary entity is created or
deleted, and purges them. Collection and query keys are keyed by arbitrary
page/limit/query combinations that are not tracked individually, so the
policy conservatively purges every key under the namespace prefix instead
of computing the exact affected set.

Example:
    policy = CacheInvalidationPolicy(
        cache,
        collection_prefix=CacheKeys.prefix(CacheKeys.POSTS),
        entity_key=CacheKeys.post,
    )

    # After the write has been committed and its event published
    await policy.invalidate(post.id)
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from murmur.cache.read_through import ReadThroughCache
    from murmur.cache.redis import RedisCache

logger = logging.getLogger(__name__)

EntityKeyBuilder = Callable[[str], str]


class CacheInvalidationPolicy:
    """Purges the per-entity key and the whole collection prefix.

    Deletions are idempotent and commutative, so two writers purging the
    same prefix concurrently is safe. A failed purge is logged and never
    raised: the source of truth is already correct, and only the entry TTL
    bounds staleness in that case.

    When given the read-through cache of the same namespace, its in-flight
    loads are detached before Redis is purged.
    """

    def __init__(
        self,
        cache: RedisCache,
        collection_prefix: str,
        entity_key: EntityKeyBuilder | None = None,
        read_through: ReadThroughCache | None = None,
    ):
        self.cache = cache
        self.collection_prefix = collection_prefix
        self.entity_key = entity_key
        self.read_through = read_through

    def keys_for(self, entity_id: str | None) -> list[str]:
        """Exact keys to delete for an entity (the prefix purge comes on top)."""
        if entity_id is None or self.entity_key is None:
            return []
        return [self.entity_key(entity_id)]

    async def invalidate(self, entity_id: str | None = None) -> int:
        """Purge cache entries made stale by a mutation of entity_id.

        Returns the number of keys removed.
        """
        try:
            keys = self.keys_for(entity_id)
            if self.read_through is not None:
                self.read_through.invalidate(keys, self.collection_prefix)
            scanned = await self.cache.list_keys_by_prefix(self.collection_prefix)
            keys = list(dict.fromkeys([*keys, *scanned]))
            deleted = await self.cache.delete_many(keys) if keys else 0
        except Exception:
            logger.exception(
                "Cache invalidation failed for %s (entity %s)", self.collection_prefix, entity_id
            )
            return 0

        logger.debug(
            "Invalidated %d cache keys under %s (entity %s)",
            deleted,
            self.collection_prefix,
            entity_id,
        )
        return deleted
