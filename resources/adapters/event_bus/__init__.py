"""Optional Redis mirror for recorded client events."""

from resources.adapters.event_bus.client import create_redis_client
from resources.adapters.event_bus.publisher import EventMirrorPublisher, QueueClient

__all__ = [
    "EventMirrorPublisher",
    "QueueClient",
    "create_redis_client",
]
