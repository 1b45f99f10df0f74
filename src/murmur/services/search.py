"""Search service: cached relevance queries over the search projection."""

from __future__ import annotations

from pydantic import TypeAdapter

from murmur.cache.keys import CacheKeys
from murmur.cache.read_through import ReadThroughCache
from murmur.cache.redis import RedisCache
from murmur.core.models import SearchHit
from murmur.persistence.repositories import SearchPostRepository

SEARCH_RESULT_ADAPTER = TypeAdapter(list[SearchHit])


class SearchService:
    """Answers search queries, most relevant first."""

    def __init__(
        self,
        repository: SearchPostRepository,
        cache: RedisCache,
        ttl: int = 3600,
        result_limit: int = 10,
    ):
        self.repository = repository
        self.ttl = ttl
        self.result_limit = result_limit
        self.read_through = ReadThroughCache(cache)

    async def search(self, query: str) -> list[SearchHit]:
        """Top matches for query. An empty result is cached like any other."""
        hits = await self.read_through.get_or_load(
            CacheKeys.search(query),
            lambda: self.repository.find_by_relevance(query, self.result_limit),
            self.ttl,
            SEARCH_RESULT_ADAPTER,
        )
        return hits or []
