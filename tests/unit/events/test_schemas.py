"""Tests for domain event serialization."""

from datetime import UTC, datetime

import orjson
import pytest

from murmur.events.schemas import EventDecodeError, EventType, PostEvent

CREATED_AT = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


class TestPostEvent:
    """Wire format of post events."""

    def test_routing_key_is_event_type(self) -> None:
        event = PostEvent(event_type=EventType.POST_DELETED, post_id="p1", user_id="u1")
        assert event.routing_key == "post.deleted"

    def test_wire_format_is_camel_case(self) -> None:
        event = PostEvent(
            event_type=EventType.POST_CREATED,
            post_id="p1",
            user_id="u1",
            content="hello",
            media_ids=("m1",),
            created_at=CREATED_AT,
        )

        payload = orjson.loads(event.to_bytes())

        assert payload["eventType"] == "post.created"
        assert payload["postId"] == "p1"
        assert payload["userId"] == "u1"
        assert payload["content"] == "hello"
        assert payload["mediaIds"] == ["m1"]
        assert payload["createdAt"] == "2026-03-01T12:00:00+00:00"
        assert payload["eventId"] == event.event_id

    def test_from_bytes_restores_event(self) -> None:
        event = PostEvent(
            event_type=EventType.POST_CREATED,
            post_id="p1",
            user_id="u1",
            content="hello",
            created_at=CREATED_AT,
        )

        decoded = PostEvent.from_bytes(event.to_bytes())

        assert decoded == event

    def test_routing_key_used_when_type_missing(self) -> None:
        body = orjson.dumps({"postId": "p1", "userId": "u1", "mediaIds": ["m1"]})

        event = PostEvent.from_bytes(body, routing_key="post.deleted")

        assert event.event_type == EventType.POST_DELETED
        assert event.media_ids == ("m1",)
        assert event.content is None

    def test_event_ids_are_unique(self) -> None:
        first = PostEvent(event_type=EventType.POST_CREATED, post_id="p1", user_id="u1")
        second = PostEvent(event_type=EventType.POST_CREATED, post_id="p1", user_id="u1")
        assert first.event_id != second.event_id

    @pytest.mark.parametrize(
        "body",
        [
            b"not json",
            b"[]",
            b'{"eventType": "post.created", "userId": "u1"}',
            b'{"eventType": "post.updated", "postId": "p1", "userId": "u1"}',
            b'{"eventType": "post.created", "postId": "p1", "userId": "u1", "createdAt": "x"}',
        ],
    )
    def test_invalid_body_raises_decode_error(self, body: bytes) -> None:
        with pytest.raises(EventDecodeError):
            PostEvent.from_bytes(body)
