"""Integration test fixtures using Docker.

Provides containerized PostgreSQL and Redis. Tests are skipped when Docker
is unavailable.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator

import pytest
from docker_utils import DockerService, get_docker_client, run_container, wait_until_ready
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from murmur.cache.redis import RedisCache, create_redis
from murmur.persistence.db import create_session_factory
from murmur.persistence.tables import Base


@pytest.fixture(scope="session")
def docker_client():
    """Create a Docker client or skip if Docker is unavailable."""
    try:
        client = get_docker_client()
        client.ping()
    except Exception as exc:
        pytest.skip(f"Docker not available: {exc}")
    yield client
    client.close()


@pytest.fixture(scope="session")
def postgres_container(docker_client) -> Iterator[DockerService]:
    env = {
        "POSTGRES_USER": "murmur",
        "POSTGRES_PASSWORD": "murmur",
        "POSTGRES_DB": "murmur",
    }
    with run_container(
        docker_client, "postgres:16-alpine", env=env, ports={"5432/tcp": None}
    ) as postgres:
        yield postgres


@pytest.fixture(scope="session")
def redis_container(docker_client) -> Iterator[DockerService]:
    with run_container(docker_client, "redis:7-alpine", ports={"6379/tcp": None}) as redis:
        yield redis


@pytest.fixture(scope="session")
def database_url(postgres_container: DockerService) -> str:
    host, port = postgres_container.host, postgres_container.port(5432)
    return f"postgresql+asyncpg://murmur:murmur@{host}:{port}/murmur"


@pytest.fixture(scope="session")
def redis_url(redis_container: DockerService) -> str:
    host, port = redis_container.host, redis_container.port(6379)
    return f"redis://{host}:{port}/0"


@pytest.fixture
async def session_factory(database_url: str) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    """Session factory over freshly created tables."""
    engine = create_async_engine(database_url)

    async def probe() -> None:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    await wait_until_ready(probe)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield create_session_factory(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def real_cache(redis_url: str) -> AsyncIterator[RedisCache]:
    client = create_redis(redis_url)
    await wait_until_ready(client.ping)
    yield RedisCache(client, timeout=2.0)
    await client.flushdb()
    await client.aclose()
