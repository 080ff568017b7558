"""Redis client construction for the event mirror."""

from __future__ import annotations

from redis import Redis

from packages.router_shared.config import EventBusSettings


def create_redis_client(settings: EventBusSettings) -> Redis:
    """Construct a configured Redis client instance."""
    return Redis.from_url(
        url=settings.url,
        socket_connect_timeout=settings.connect_timeout_seconds,
        socket_timeout=settings.socket_timeout_seconds,
        decode_responses=True,
        encoding="utf-8",
    )
