"""Unit tests for the Redis event mirror publisher."""

from __future__ import annotations

import time
from dataclasses import dataclass, field

from packages.router_shared.config import EventBusSettings
from packages.router_shared.metrics import RouterMetrics
from resources.adapters.event_bus import EventMirrorPublisher


@dataclass
class _FakeRedisClient:
    """In-memory list store with scriptable push failures."""

    queues: dict[str, list[str]] = field(default_factory=dict)
    failures: int = 0

    def lpush(self, name: str, *values: str) -> int:
        if self.failures > 0:
            self.failures -= 1
            raise ConnectionError("redis unavailable")
        items = self.queues.setdefault(name, [])
        for value in values:
            items.insert(0, value)
        return len(items)


def _publisher(
    client: _FakeRedisClient,
    metrics: RouterMetrics,
    *,
    event_buffer: int = 10,
) -> EventMirrorPublisher:
    settings = EventBusSettings(
        enabled=True,
        topic="client-metrics",
        event_buffer=event_buffer,
        retry_delay_seconds=0,
    )
    return EventMirrorPublisher(client=client, settings=settings, metrics=metrics)


def test_drain_once_pushes_message_to_topic(recording_metrics) -> None:
    """Queued messages should land on the configured Redis list."""
    client = _FakeRedisClient()
    publisher = _publisher(client, recording_metrics)

    assert publisher.publish('{"phase":"pre_update"}') is True
    assert publisher.drain_once() is True

    assert client.queues["client-metrics"] == ['{"phase":"pre_update"}']
    assert publisher.pending == 0


def test_drain_once_returns_false_when_queue_is_empty(recording_metrics) -> None:
    """An idle poll should report that nothing was handled."""
    publisher = _publisher(_FakeRedisClient(), recording_metrics)

    assert publisher.drain_once() is False


def test_failed_write_requeues_message(recording_metrics) -> None:
    """A failed push should keep the message locally and count the failure."""
    client = _FakeRedisClient(failures=1)
    publisher = _publisher(client, recording_metrics)
    publisher.publish("one")

    publisher.drain_once()

    assert publisher.pending == 1
    assert "client-metrics" not in client.queues
    failures = recording_metrics.event_mirror_failures_total.samples
    assert failures == [(1.0, {"reason": "write_failed"})]

    publisher.drain_once()

    assert client.queues["client-metrics"] == ["one"]
    assert publisher.pending == 0


def test_full_buffer_drops_new_messages(recording_metrics) -> None:
    """Publishing past the buffer size should drop and count the message."""
    publisher = _publisher(_FakeRedisClient(), recording_metrics, event_buffer=1)

    assert publisher.publish("first") is True
    assert publisher.publish("second") is False

    assert publisher.pending == 1
    failures = recording_metrics.event_mirror_failures_total.samples
    assert failures == [(1.0, {"reason": "buffer_full"})]


def test_worker_thread_delivers_until_stopped(recording_metrics) -> None:
    """The background worker should drain messages and stop on request."""
    client = _FakeRedisClient()
    publisher = _publisher(client, recording_metrics)
    publisher.start()
    try:
        publisher.publish("a")
        publisher.publish("b")
        deadline = time.monotonic() + 5
        while len(client.queues.get("client-metrics", [])) < 2:
            assert time.monotonic() < deadline
            time.sleep(0.01)
    finally:
        publisher.stop(timeout_seconds=2)

    assert client.queues["client-metrics"] == ["b", "a"]
