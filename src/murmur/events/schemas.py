"""Domain event schemas for murmur.

Events describe a completed state change of a post. They carry everything a
consumer needs to maintain its projection without calling back into the post
service. The routing key of an event is its type ("post.created", ...).

Wire format is camelCase JSON:
    {"eventId": "...", "eventType": "post.created", "postId": "...",
     "userId": "...", "content": "...", "mediaIds": [], "createdAt": "...",
     "timestamp": "..."}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import uuid4

import orjson


class EventType(str, Enum):
    """Type of post change event, also used as the routing key."""

    POST_CREATED = "post.created"
    POST_DELETED = "post.deleted"


class EventDecodeError(ValueError):
    """Raised when a message body is not a valid domain event."""


@dataclass(frozen=True, slots=True)
class PostEvent:
    """Event for post changes."""

    event_type: EventType
    post_id: str
    user_id: str
    content: str | None = None  # None for delete
    media_ids: tuple[str, ...] = ()
    created_at: datetime | None = None
    event_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def routing_key(self) -> str:
        return self.event_type.value

    def to_dict(self) -> dict[str, Any]:
        return {
            "eventId": self.event_id,
            "eventType": self.event_type.value,
            "postId": self.post_id,
            "userId": self.user_id,
            "content": self.content,
            "mediaIds": list(self.media_ids),
            "createdAt": self.created_at,
            "timestamp": self.timestamp,
        }

    def to_bytes(self) -> bytes:
        """Serialize to JSON bytes."""
        return orjson.dumps(self.to_dict())

    @classmethod
    def from_bytes(cls, data: bytes, routing_key: str | None = None) -> "PostEvent":
        """Deserialize from JSON bytes.

        The routing key is used as the event type when the body omits it.
        """
        try:
            parsed = orjson.loads(data)
            event_type = EventType(parsed.get("eventType") or routing_key)
            created_at = parsed.get("createdAt")
            timestamp = parsed.get("timestamp")
            kwargs: dict[str, Any] = {
                "event_type": event_type,
                "post_id": str(parsed["postId"]),
                "user_id": str(parsed["userId"]),
                "content": parsed.get("content"),
                "media_ids": tuple(parsed.get("mediaIds") or ()),
                "created_at": datetime.fromisoformat(created_at) if created_at else None,
            }
            if parsed.get("eventId"):
                kwargs["event_id"] = parsed["eventId"]
            if timestamp:
                kwargs["timestamp"] = datetime.fromisoformat(timestamp)
        except (orjson.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
            raise EventDecodeError(f"Invalid post event: {e}") from e
        return cls(**kwargs)


# Union type for all events
AnyEvent = PostEvent
