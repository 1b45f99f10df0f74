"""In-memory test doubles for the Redis client and the repositories."""

from __future__ import annotations

import re
from datetime import UTC, datetime, timedelta
from uuid import uuid4

from redis.exceptions import ConnectionError as RedisConnectionError

from murmur.cache.redis import RedisCache
from murmur.config import Settings
from murmur.core.models import Post, SearchHit
from murmur.events.bus import EventBus, InMemoryEventBus
from murmur.persistence.repositories import DuplicateProjectionError
from murmur.projections.search import SearchProjectionUpdater
from murmur.runtime import Runtime
from murmur.services.posts import PostService
from murmur.services.search import SearchService

_SEARCH_TERM = re.compile(r"[^\W_]+")


class FakeRedis:
    """Subset of redis.asyncio.Redis used by RedisCache.

    Values are bytes, as with decode_responses=False. Set ``fail`` to make
    every command raise a connection error.
    """

    def __init__(self) -> None:
        self.store: dict[str, bytes] = {}
        self.ttls: dict[str, int | None] = {}
        self.fail = False
        self.commands: list[tuple[str, tuple[str, ...]]] = []
        self.scan_page_size = 10

    def _check(self, command: str, *keys: str) -> None:
        if self.fail:
            raise RedisConnectionError("Connection refused")
        self.commands.append((command, keys))

    async def get(self, key: str) -> bytes | None:
        self._check("GET", key)
        return self.store.get(key)

    async def set(self, key: str, value: bytes, ex: int | None = None) -> bool:
        self._check("SET", key)
        self.store[key] = value
        self.ttls[key] = ex
        return True

    async def delete(self, *keys: str) -> int:
        self._check("DEL", *keys)
        deleted = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                self.ttls.pop(key, None)
                deleted += 1
        return deleted

    async def scan(
        self, cursor: int = 0, match: str = "*", count: int | None = None
    ) -> tuple[int, list[bytes]]:
        """One SCAN page. The cursor is an offset into the matching keys."""
        self._check("SCAN", match)
        assert match.endswith("*")
        prefix = re.sub(r"\\(.)", r"\1", match[:-1])
        matching = [key for key in self.store if key.startswith(prefix)]
        end = cursor + self.scan_page_size
        batch = [key.encode() for key in matching[cursor:end]]
        return (end if end < len(matching) else 0), batch

    async def ping(self) -> bool:
        self._check("PING")
        return True

    async def aclose(self) -> None:
        pass

    def keys_with_prefix(self, prefix: str) -> list[str]:
        return sorted(key for key in self.store if key.startswith(prefix))


class FakePostRepository:
    """PostRepository over a dict. Each insert is one second newer."""

    def __init__(self) -> None:
        self.posts: dict[str, Post] = {}
        self.find_page_calls = 0
        self.find_by_id_calls = 0
        self._clock = datetime(2026, 1, 1, tzinfo=UTC)

    async def insert(self, user_id: str, content: str, media_ids: list[str]) -> Post:
        self._clock += timedelta(seconds=1)
        post = Post(
            id=str(uuid4()),
            user_id=user_id,
            content=content,
            media_ids=list(media_ids),
            created_at=self._clock,
        )
        self.posts[post.id] = post
        return post

    async def find_by_id(self, post_id: str) -> Post | None:
        self.find_by_id_calls += 1
        return self.posts.get(post_id)

    async def find_delete_by_id(self, post_id: str, user_id: str) -> Post | None:
        post = self.posts.get(post_id)
        if post is None or post.user_id != user_id:
            return None
        return self.posts.pop(post_id)

    async def find_page(self, skip: int, limit: int) -> list[Post]:
        self.find_page_calls += 1
        ordered = sorted(self.posts.values(), key=lambda p: p.created_at, reverse=True)
        return ordered[skip : skip + limit]

    async def count(self) -> int:
        return len(self.posts)


class FakeSearchPostRepository:
    """SearchPostRepository over a dict, scoring by matching term count."""

    def __init__(self) -> None:
        self.rows: dict[str, SearchHit] = {}
        self.search_calls = 0

    async def insert(
        self, post_id: str, user_id: str, content: str, created_at: datetime
    ) -> SearchHit:
        if post_id in self.rows:
            raise DuplicateProjectionError(post_id)
        hit = SearchHit(
            id=str(uuid4()),
            post_id=post_id,
            user_id=user_id,
            content=content,
            created_at=created_at,
        )
        self.rows[post_id] = hit
        return hit

    async def find_delete_by_post_id(self, post_id: str) -> SearchHit | None:
        return self.rows.pop(post_id, None)

    async def find_by_relevance(self, query: str, top_n: int) -> list[SearchHit]:
        self.search_calls += 1
        terms = set(_SEARCH_TERM.findall(query.lower()))
        if not terms:
            return []
        scored = []
        for hit in self.rows.values():
            words = _SEARCH_TERM.findall(hit.content.lower())
            score = sum(1 for word in words if word in terms)
            if score:
                scored.append(hit.model_copy(update={"score": float(score)}))
        scored.sort(key=lambda h: (h.score, h.created_at), reverse=True)
        return scored[:top_n]


def make_settings(**overrides: object) -> Settings:
    values: dict[str, object] = {"service_role": "all", "event_bus_backend": "memory"}
    values.update(overrides)
    return Settings(**values)  # type: ignore[arg-type]


def make_runtime(
    redis: FakeRedis | None = None,
    posts: FakePostRepository | None = None,
    search: FakeSearchPostRepository | None = None,
    event_bus: EventBus | None = None,
) -> Runtime:
    """Runtime wired to in-memory fakes, both service roles enabled."""
    settings = make_settings()
    cache = RedisCache(redis or FakeRedis())  # type: ignore[arg-type]
    bus = event_bus or InMemoryEventBus()
    search_repository = search or FakeSearchPostRepository()
    search_service = SearchService(
        search_repository,  # type: ignore[arg-type]
        cache,
        ttl=settings.search_cache_ttl,
        result_limit=settings.search_result_limit,
    )
    return Runtime(
        settings=settings,
        cache=cache,
        event_bus=bus,
        post_service=PostService(
            posts or FakePostRepository(),  # type: ignore[arg-type]
            cache,
            bus,
            post_ttl=settings.post_cache_ttl,
            list_ttl=settings.post_list_cache_ttl,
        ),
        search_service=search_service,
        search_projection=SearchProjectionUpdater(
            search_repository,  # type: ignore[arg-type]
            cache,
            read_through=search_service.read_through,
        ),
    )
