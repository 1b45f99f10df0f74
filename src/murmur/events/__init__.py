"""Event system for murmur.

Every committed post write produces an event on a topic exchange:
- The post service publishes post.created and post.deleted after commit
- The search service consumes them to maintain its projection
- Delivery is at-least-once, so every consumer is idempotent
"""

from murmur.events.bus import EventBus, InMemoryEventBus, topic_matches
from murmur.events.publisher import publish_event, publish_post_created, publish_post_deleted
from murmur.events.rabbitmq_bus import RabbitMQEventBus
from murmur.events.runtime import create_event_bus, start_event_bus, stop_event_bus
from murmur.events.schemas import AnyEvent, EventDecodeError, EventType, PostEvent

__all__ = [
    # Event types
    "EventType",
    "PostEvent",
    "AnyEvent",
    "EventDecodeError",
    # Bus
    "EventBus",
    "InMemoryEventBus",
    "RabbitMQEventBus",
    "topic_matches",
    "create_event_bus",
    "start_event_bus",
    "stop_event_bus",
    # Publishers
    "publish_event",
    "publish_post_created",
    "publish_post_deleted",
]
