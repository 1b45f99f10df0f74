"""Global pytest configuration and fixtures."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
from fakes import FakePostRepository, FakeRedis, FakeSearchPostRepository, make_runtime

from murmur.cache.redis import RedisCache
from murmur.events.bus import InMemoryEventBus
from murmur.runtime import Runtime


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def cache(fake_redis: FakeRedis) -> RedisCache:
    return RedisCache(fake_redis)  # type: ignore[arg-type]


@pytest.fixture
def post_repository() -> FakePostRepository:
    return FakePostRepository()


@pytest.fixture
def search_repository() -> FakeSearchPostRepository:
    return FakeSearchPostRepository()


@pytest.fixture
def event_bus() -> InMemoryEventBus:
    return InMemoryEventBus(max_size=100)


@pytest.fixture
async def runtime(
    fake_redis: FakeRedis,
    post_repository: FakePostRepository,
    search_repository: FakeSearchPostRepository,
    event_bus: InMemoryEventBus,
) -> AsyncIterator[Runtime]:
    """Started runtime over fakes; consumers are registered on the bus."""
    rt = make_runtime(fake_redis, post_repository, search_repository, event_bus)
    await rt.start()
    yield rt
    await rt.close()
