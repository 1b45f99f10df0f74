"""Search projection updater.

Consumes post events and maintains the search projection, then purges the
search cache namespace. Events are delivered at least once and in no
guaranteed order, so both handlers are idempotent:

- post.created for a post that already has a projection is a no-op
- post.deleted for a post without a projection is a no-op

A delete that arrives before its create leaves no projection behind, but
the late create will then insert one. There is no tombstone for that case.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from murmur.cache.invalidation import CacheInvalidationPolicy
from murmur.cache.keys import CacheKeys
from murmur.cache.read_through import ReadThroughCache
from murmur.cache.redis import RedisCache
from murmur.events.bus import EventBus
from murmur.events.schemas import EventType, PostEvent
from murmur.persistence.repositories import DuplicateProjectionError, SearchPostRepository

logger = logging.getLogger(__name__)


class SearchProjectionUpdater:
    """Applies post events to the search projection."""

    def __init__(
        self,
        repository: SearchPostRepository,
        cache: RedisCache,
        read_through: ReadThroughCache | None = None,
    ):
        """Create the updater.

        Args:
            repository: Search projection store
            cache: Cache holding the search results
            read_through: Read-through cache of the search service in this
                process, whose in-flight loads are detached on every change
        """
        self.repository = repository
        self.invalidation = CacheInvalidationPolicy(
            cache,
            collection_prefix=CacheKeys.prefix(CacheKeys.SEARCH),
            read_through=read_through,
        )

    async def register(self, event_bus: EventBus) -> None:
        """Subscribe each handler to its own routing key."""
        await event_bus.subscribe(EventType.POST_CREATED.value, self.handle_post_created)
        await event_bus.subscribe(EventType.POST_DELETED.value, self.handle_post_deleted)

    async def handle_post_created(self, event: PostEvent) -> None:
        try:
            await self.repository.insert(
                post_id=event.post_id,
                user_id=event.user_id,
                content=event.content or "",
                created_at=event.created_at or event.timestamp or datetime.now(UTC),
            )
        except DuplicateProjectionError:
            logger.info("Projection for post %s already exists, skipping", event.post_id)
            return

        await self.invalidation.invalidate(event.post_id)
        logger.info("Indexed post %s", event.post_id)

    async def handle_post_deleted(self, event: PostEvent) -> None:
        removed = await self.repository.find_delete_by_post_id(event.post_id)
        if removed is None:
            logger.warning("No projection for deleted post %s, skipping", event.post_id)
            return

        await self.invalidation.invalidate(event.post_id)
        logger.info("Removed post %s from search", event.post_id)
