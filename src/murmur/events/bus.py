"""Event bus implementation for murmur.

Provides topic-based pub/sub for domain events:
- InMemoryEventBus: for single-process deployments and tests
- RabbitMQEventBus: topic exchange shared by the post and search services

Subscriptions are bound to a routing-key pattern using AMQP topic syntax
("*" matches one dot-separated word, "#" matches zero or more). Each
subscription is consumed independently, and a failing handler is logged and
skipped so one bad message never halts consumption.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from murmur.events.schemas import AnyEvent
from murmur.observability.logging import LogContext

logger = logging.getLogger(__name__)


EventHandler = Callable[[AnyEvent], Awaitable[None]]


def topic_matches(pattern: str, routing_key: str) -> bool:
    """Match a routing key against an AMQP topic pattern."""
    return _match(pattern.split("."), routing_key.split("."))


def _match(pattern: list[str], words: list[str]) -> bool:
    if not pattern:
        return not words
    head, rest = pattern[0], pattern[1:]
    if head == "#":
        return any(_match(rest, words[i:]) for i in range(len(words) + 1))
    if not words:
        return False
    if head == "*" or head == words[0]:
        return _match(rest, words[1:])
    return False


def handler_name(handler: EventHandler) -> str:
    return getattr(handler, "__qualname__", handler.__class__.__name__)


async def run_handler(handler: EventHandler, event: AnyEvent) -> bool:
    """Run one handler for one event, logging instead of raising.

    Returns True if the handler completed.
    """
    with LogContext(event_id=event.event_id):
        try:
            await handler(event)
            return True
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception(
                "Handler %s failed for %s event %s",
                handler_name(handler),
                event.routing_key,
                event.event_id,
            )
            return False


class EventBus(ABC):
    """Abstract event bus interface."""

    @abstractmethod
    async def publish(self, event: AnyEvent) -> None:
        """Publish an event using its type as routing key."""
        pass

    @abstractmethod
    async def subscribe(self, pattern: str, handler: EventHandler) -> None:
        """Subscribe a handler to events whose routing key matches pattern."""
        pass

    @abstractmethod
    async def start(self) -> None:
        """Connect and start consuming."""
        pass

    @abstractmethod
    async def stop(self) -> None:
        """Stop consuming and release the connection."""
        pass

    async def health_check(self) -> bool:
        return True


@dataclass
class _Subscription:
    pattern: str
    handler: EventHandler
    queue: asyncio.Queue[AnyEvent]
    task: asyncio.Task[None] | None = field(default=None)


class InMemoryEventBus(EventBus):
    """In-memory topic bus using one asyncio.Queue per subscription.

    Suitable for single-process deployments. Like a non-durable exchange,
    an event published while no subscription matches it is dropped.
    """

    def __init__(self, max_size: int = 10000):
        self.max_size = max_size
        self._subscriptions: list[_Subscription] = []
        self._running = False

    async def publish(self, event: AnyEvent) -> None:
        """Fan an event out to every matching subscription.

        Blocks if a subscription queue is full.
        """
        matched = 0
        for subscription in self._subscriptions:
            if topic_matches(subscription.pattern, event.routing_key):
                await subscription.queue.put(event)
                matched += 1
        if not matched:
            logger.debug(
                "No subscription for %s, event %s dropped", event.routing_key, event.event_id
            )

    async def subscribe(self, pattern: str, handler: EventHandler) -> None:
        subscription = _Subscription(
            pattern=pattern,
            handler=handler,
            queue=asyncio.Queue(maxsize=self.max_size),
        )
        self._subscriptions.append(subscription)
        if self._running:
            subscription.task = asyncio.create_task(self._consume(subscription))
        logger.info("Registered event handler %s for %s", handler_name(handler), pattern)

    async def start(self) -> None:
        if self._running:
            return

        self._running = True
        for subscription in self._subscriptions:
            subscription.task = asyncio.create_task(self._consume(subscription))

    async def stop(self) -> None:
        self._running = False

        for subscription in self._subscriptions:
            if subscription.task:
                subscription.task.cancel()
                try:
                    await subscription.task
                except asyncio.CancelledError:
                    pass
                subscription.task = None

    async def _consume(self, subscription: _Subscription) -> None:
        """Consumption loop of one subscription."""
        while self._running:
            event = await subscription.queue.get()
            try:
                await run_handler(subscription.handler, event)
            finally:
                subscription.queue.task_done()

    @property
    def pending_count(self) -> int:
        """Number of events waiting to be processed."""
        return sum(s.queue.qsize() for s in self._subscriptions)

    async def drain(self) -> None:
        """Wait for all pending events to be processed."""
        for subscription in self._subscriptions:
            await subscription.queue.join()
