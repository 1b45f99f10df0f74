"""Tests for event publisher helper functions."""

import asyncio
from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest

from murmur.core.models import Post
from murmur.events import (
    EventType,
    InMemoryEventBus,
    PostEvent,
    publish_post_created,
    publish_post_deleted,
)
from murmur.events.bus import EventBus

POST = Post(
    id="p1",
    user_id="u1",
    content="hello world",
    media_ids=["m1", "m2"],
    created_at=datetime(2026, 1, 1, tzinfo=UTC),
)


@pytest.fixture
async def event_bus():
    """Create an in-memory event bus for testing."""
    bus = InMemoryEventBus()
    await bus.start()
    yield bus
    await bus.stop()


class TestPublishPostCreated:
    """Tests for publish_post_created."""

    async def test_publishes_created_event(self, event_bus: InMemoryEventBus) -> None:
        received: list[PostEvent] = []

        async def handler(e: PostEvent) -> None:
            received.append(e)

        await event_bus.subscribe("post.created", handler)

        result = await publish_post_created(event_bus, POST)
        await event_bus.drain()

        assert result is not None
        assert result.event_type == EventType.POST_CREATED
        assert result.post_id == "p1"
        assert result.user_id == "u1"
        assert result.content == "hello world"
        assert result.media_ids == ("m1", "m2")
        assert result.created_at == POST.created_at
        assert received == [result]

    async def test_broker_failure_is_swallowed(self) -> None:
        bus = AsyncMock(spec=EventBus)
        bus.publish.side_effect = ConnectionError("broker down")

        assert await publish_post_created(bus, POST) is None
        bus.publish.assert_awaited_once()

    async def test_slow_broker_times_out(self) -> None:
        async def hang(event: PostEvent) -> None:
            await asyncio.sleep(1)

        bus = AsyncMock(spec=EventBus)
        bus.publish.side_effect = hang

        assert await publish_post_created(bus, POST, timeout=0.01) is None


class TestPublishPostDeleted:
    """Tests for publish_post_deleted."""

    async def test_publishes_deleted_event(self, event_bus: InMemoryEventBus) -> None:
        received: list[PostEvent] = []

        async def handler(e: PostEvent) -> None:
            received.append(e)

        await event_bus.subscribe("post.deleted", handler)

        result = await publish_post_deleted(event_bus, POST)
        await event_bus.drain()

        assert result is not None
        assert result.routing_key == "post.deleted"
        assert result.post_id == "p1"
        assert result.media_ids == ("m1", "m2")
        assert result.content is None
        assert len(received) == 1

    async def test_exactly_one_event_per_call(self, event_bus: InMemoryEventBus) -> None:
        received: list[PostEvent] = []

        async def handler(e: PostEvent) -> None:
            received.append(e)

        await event_bus.subscribe("#", handler)

        await publish_post_deleted(event_bus, POST)
        await event_bus.drain()

        assert len(received) == 1
