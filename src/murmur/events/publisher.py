"""Event publishing helpers for post writes.

Provides functions to publish events after a post has been committed to the
source of truth. Publishing is best effort: a broker failure or timeout is
logged and reported as None, never raised, because the write it describes
has already happened.

Example:
    from murmur.events.publisher import publish_post_created, publish_post_deleted

    # After committing a new post
    await publish_post_created(event_bus, post)

    # After committing a deletion
    await publish_post_deleted(event_bus, post)
"""

from __future__ import annotations

import asyncio
import logging

from murmur.core.models import Post
from murmur.events.bus import EventBus
from murmur.events.schemas import EventType, PostEvent

logger = logging.getLogger(__name__)

# Upper bound for a single publish (seconds)
DEFAULT_PUBLISH_TIMEOUT = 5.0


async def publish_event(
    event_bus: EventBus,
    event: PostEvent,
    timeout: float = DEFAULT_PUBLISH_TIMEOUT,
) -> PostEvent | None:
    """Publish an event, swallowing broker failures.

    Returns:
        The published event, or None if publishing failed
    """
    try:
        await asyncio.wait_for(event_bus.publish(event), timeout=timeout)
    except asyncio.CancelledError:
        raise
    except Exception:
        logger.exception(
            "Failed to publish %s event for post %s", event.routing_key, event.post_id
        )
        return None

    logger.info("Published %s for post %s", event.routing_key, event.post_id)
    return event


async def publish_post_created(
    event_bus: EventBus,
    post: Post,
    timeout: float = DEFAULT_PUBLISH_TIMEOUT,
) -> PostEvent | None:
    """Publish a post.created event.

    Args:
        event_bus: Event bus to publish to
        post: The committed post
        timeout: Publish timeout in seconds

    Returns:
        The published event, or None if publishing failed
    """
    event = PostEvent(
        event_type=EventType.POST_CREATED,
        post_id=post.id,
        user_id=post.user_id,
        content=post.content,
        media_ids=tuple(post.media_ids),
        created_at=post.created_at,
    )
    return await publish_event(event_bus, event, timeout)


async def publish_post_deleted(
    event_bus: EventBus,
    post: Post,
    timeout: float = DEFAULT_PUBLISH_TIMEOUT,
) -> PostEvent | None:
    """Publish a post.deleted event.

    The event carries the media ids of the post so that a media consumer can
    release them without reading the deleted post.
    """
    event = PostEvent(
        event_type=EventType.POST_DELETED,
        post_id=post.id,
        user_id=post.user_id,
        media_ids=tuple(post.media_ids),
    )
    return await publish_event(event_bus, event, timeout)
