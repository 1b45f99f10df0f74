"""Post service: writes and cached reads of posts.

Write protocol, in this order:

    commit to the source of truth -> publish event -> invalidate cache -> return

A publish or invalidation failure never undoes or fails the committed write;
both are logged and swallowed by their components. Reads go through the
read-through cache.
"""

from __future__ import annotations

import logging
import math

from pydantic import TypeAdapter

from murmur.cache.invalidation import CacheInvalidationPolicy
from murmur.cache.keys import CacheKeys
from murmur.cache.read_through import ReadThroughCache
from murmur.cache.redis import RedisCache
from murmur.core.models import Post, PostPage
from murmur.events.bus import EventBus
from murmur.events.publisher import (
    DEFAULT_PUBLISH_TIMEOUT,
    publish_post_created,
    publish_post_deleted,
)
from murmur.persistence.repositories import PostRepository

logger = logging.getLogger(__name__)

POST_ADAPTER = TypeAdapter(Post)
POST_PAGE_ADAPTER = TypeAdapter(PostPage)


class PostNotFoundError(LookupError):
    """Raised when a post does not exist (or is not owned by the caller)."""

    def __init__(self, post_id: str):
        self.post_id = post_id
        super().__init__(f"Post {post_id} not found")


class PostService:
    """Creates, deletes and reads posts."""

    def __init__(
        self,
        repository: PostRepository,
        cache: RedisCache,
        event_bus: EventBus,
        post_ttl: int = 3600,
        list_ttl: int = 300,
        publish_timeout: float = DEFAULT_PUBLISH_TIMEOUT,
    ):
        self.repository = repository
        self.event_bus = event_bus
        self.post_ttl = post_ttl
        self.list_ttl = list_ttl
        self.publish_timeout = publish_timeout
        self.read_through = ReadThroughCache(cache)
        self.invalidation = CacheInvalidationPolicy(
            cache,
            collection_prefix=CacheKeys.prefix(CacheKeys.POSTS),
            entity_key=CacheKeys.post,
            read_through=self.read_through,
        )

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def create_post(
        self, user_id: str, content: str, media_ids: list[str] | None = None
    ) -> Post:
        post = await self.repository.insert(user_id, content, media_ids or [])
        logger.info("Post %s created by %s", post.id, user_id)

        await publish_post_created(self.event_bus, post, self.publish_timeout)
        await self.invalidation.invalidate(post.id)
        return post

    async def delete_post(self, post_id: str, user_id: str) -> Post:
        """Delete a post owned by user_id.

        Raises:
            PostNotFoundError: If the post does not exist or belongs to
                someone else
        """
        post = await self.repository.find_delete_by_id(post_id, user_id)
        if post is None:
            raise PostNotFoundError(post_id)
        logger.info("Post %s deleted by %s", post_id, user_id)

        await publish_post_deleted(self.event_bus, post, self.publish_timeout)
        await self.invalidation.invalidate(post.id)
        return post

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def list_posts(self, page: int, limit: int) -> PostPage:
        """One page of posts, newest first."""

        async def load() -> PostPage:
            posts = await self.repository.find_page(skip=(page - 1) * limit, limit=limit)
            total = await self.repository.count()
            return PostPage(
                posts=posts,
                current_page=page,
                total_pages=math.ceil(total / limit),
                total_posts=total,
            )

        result = await self.read_through.get_or_load(
            CacheKeys.posts_page(page, limit), load, self.list_ttl, POST_PAGE_ADAPTER
        )
        assert result is not None
        return result

    async def get_post(self, post_id: str) -> Post:
        """A single post.

        Raises:
            PostNotFoundError: If the post does not exist
        """
        post = await self.read_through.get_or_load(
            CacheKeys.post(post_id),
            lambda: self.repository.find_by_id(post_id),
            self.post_ttl,
            POST_ADAPTER,
        )
        if post is None:
            raise PostNotFoundError(post_id)
        return post
