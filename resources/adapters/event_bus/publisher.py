"""Background publisher mirroring recorded events onto a Redis list.

Messages wait in a bounded in-process queue until a worker thread pushes
them with ``LPUSH``. A failed push is put back on the local queue and
retried. This is not a durable outbox: anything still queued locally when
the process exits is lost, and a full queue drops new messages.
"""

from __future__ import annotations

import queue
import threading
from typing import Protocol

from packages.router_shared.config import EventBusSettings
from packages.router_shared.logging import get_logger
from packages.router_shared.metrics import RouterMetrics, router_metrics

_LOGGER = get_logger(__name__)
_POLL_SECONDS = 0.25


class QueueClient(Protocol):
    """Minimal Redis surface used by the publisher."""

    def lpush(self, name: str, *values: str) -> int:
        """Push values at list head and return resulting length."""


class EventMirrorPublisher:
    """Drain a bounded local queue into one Redis list."""

    def __init__(
        self,
        *,
        client: QueueClient,
        settings: EventBusSettings,
        metrics: RouterMetrics | None = None,
    ) -> None:
        self._client = client
        self._topic = settings.topic
        self._retry_delay_seconds = settings.retry_delay_seconds
        self._metrics = metrics or router_metrics()
        self._queue: queue.Queue[str] = queue.Queue(maxsize=settings.event_buffer)
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def pending(self) -> int:
        """Return the number of messages waiting locally."""
        return self._queue.qsize()

    def publish(self, message: str) -> bool:
        """Queue one message without blocking; False when it was dropped."""
        try:
            self._queue.put_nowait(message)
        except queue.Full:
            self._metrics.event_mirror_failures_total.add(
                1, attributes={"reason": "buffer_full"}
            )
            _LOGGER.warning(
                "event mirror buffer full; message dropped",
                extra={"topic": self._topic, "buffer": self._queue.maxsize},
            )
            return False
        return True

    def start(self) -> None:
        """Start the worker thread once."""
        if self._thread is not None:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="event-mirror-publisher", daemon=True
        )
        self._thread.start()
        _LOGGER.info("event mirror publisher started", extra={"topic": self._topic})

    def stop(self, *, timeout_seconds: float = 5.0) -> None:
        """Signal the worker to exit and wait for it."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout_seconds)
            self._thread = None
        if self.pending > 0:
            _LOGGER.warning(
                "event mirror stopped with undelivered messages",
                extra={"topic": self._topic, "pending": self.pending},
            )

    def drain_once(self) -> bool:
        """Deliver at most one queued message; True when one was handled."""
        try:
            message = self._queue.get(timeout=_POLL_SECONDS)
        except queue.Empty:
            return False
        try:
            self._client.lpush(self._topic, message)
        except Exception as exc:  # noqa: BLE001
            self._metrics.event_mirror_failures_total.add(
                1, attributes={"reason": "write_failed"}
            )
            _LOGGER.error(
                "message write failed; will try again",
                extra={"topic": self._topic, "error": str(exc)},
            )
            self.publish(message)
            self._stop.wait(self._retry_delay_seconds)
        finally:
            self._queue.task_done()
        return True

    def _run(self) -> None:
        """Worker loop; exits when ``stop`` is signalled."""
        while not self._stop.is_set():
            self.drain_once()
