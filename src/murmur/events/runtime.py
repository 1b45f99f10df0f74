"""Runtime wiring for the murmur event bus."""

from __future__ import annotations

import logging

from murmur.config import Settings
from murmur.events.bus import EventBus, InMemoryEventBus
from murmur.events.rabbitmq_bus import RabbitMQEventBus

logger = logging.getLogger(__name__)


def create_event_bus(settings: Settings) -> EventBus:
    """Create an event bus based on configuration."""
    backend = settings.event_bus_backend.lower()

    if backend in {"memory", "inmemory", "in_memory"}:
        return InMemoryEventBus()

    if backend in {"rabbitmq", "amqp"}:
        return RabbitMQEventBus(
            url=settings.rabbitmq_url,
            exchange_name=settings.event_exchange_name,
            durable=settings.event_exchange_durable,
            queue_prefix=settings.event_queue_prefix,
            connect_timeout=settings.event_connect_timeout_seconds,
        )

    raise ValueError("Unsupported event_bus_backend. Supported values: memory, rabbitmq.")


async def start_event_bus(bus: EventBus) -> EventBus:
    """Start an event bus."""
    await bus.start()
    logger.info("Event bus started (%s)", type(bus).__name__)
    return bus


async def stop_event_bus(bus: EventBus) -> None:
    """Stop an event bus."""
    await bus.stop()
    logger.info("Event bus stopped (%s)", type(bus).__name__)
