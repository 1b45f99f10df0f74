"""Process runtime for murmur.

Builds the shared handles (Redis client, database engine, event bus) once per
process and injects them into the services of the configured role:

- posts: PostService (writes publish events and purge the post cache)
- search: SearchService and the SearchProjectionUpdater consumer
- all: both, sharing one bus (single-process deployments)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from murmur.cache.redis import RedisCache, create_redis
from murmur.config import Settings
from murmur.events.bus import EventBus
from murmur.events.runtime import create_event_bus, start_event_bus, stop_event_bus
from murmur.persistence.db import create_engine, create_session_factory
from murmur.persistence.db import health_check as db_health_check
from murmur.persistence.repositories import PostRepository, SearchPostRepository
from murmur.projections.search import SearchProjectionUpdater
from murmur.services.posts import PostService
from murmur.services.search import SearchService

if TYPE_CHECKING:
    from redis.asyncio import Redis
    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

logger = logging.getLogger(__name__)


@dataclass
class Runtime:
    """Connection handles and services of one process."""

    settings: Settings
    cache: RedisCache
    event_bus: EventBus
    post_service: PostService | None = None
    search_service: SearchService | None = None
    search_projection: SearchProjectionUpdater | None = None
    redis: Redis | None = None
    engine: AsyncEngine | None = None
    session_factory: async_sessionmaker[AsyncSession] | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> Runtime:
        """Create every handle and the services enabled by settings.service_role."""
        if not (settings.runs_posts or settings.runs_search):
            raise ValueError(
                f"Unsupported service_role {settings.service_role!r}. "
                "Supported values: all, posts, search."
            )

        redis_client = create_redis(settings.redis_url)
        cache = RedisCache(redis_client, timeout=settings.cache_timeout_seconds)
        engine = create_engine(settings)
        session_factory = create_session_factory(engine)
        event_bus = create_event_bus(settings)

        runtime = cls(
            settings=settings,
            cache=cache,
            event_bus=event_bus,
            redis=redis_client,
            engine=engine,
            session_factory=session_factory,
        )

        if settings.runs_posts:
            runtime.post_service = PostService(
                PostRepository(session_factory),
                cache,
                event_bus,
                post_ttl=settings.post_cache_ttl,
                list_ttl=settings.post_list_cache_ttl,
                publish_timeout=settings.event_publish_timeout_seconds,
            )

        if settings.runs_search:
            search_repository = SearchPostRepository(session_factory)
            search_service = SearchService(
                search_repository,
                cache,
                ttl=settings.search_cache_ttl,
                result_limit=settings.search_result_limit,
            )
            runtime.search_service = search_service
            runtime.search_projection = SearchProjectionUpdater(
                search_repository, cache, read_through=search_service.read_through
            )

        return runtime

    async def start(self) -> None:
        """Register consumers and connect the event bus."""
        if self.search_projection is not None:
            await self.search_projection.register(self.event_bus)
        await start_event_bus(self.event_bus)

    async def close(self) -> None:
        """Stop consuming and release every connection."""
        await stop_event_bus(self.event_bus)
        if self.redis is not None:
            await self.redis.aclose()
        if self.engine is not None:
            await self.engine.dispose()

    async def check_database(self) -> bool:
        if self.session_factory is None:
            return True
        return await db_health_check(self.session_factory)
