"""OpenTelemetry instruments used across the router.

Instruments are created against the globally configured ``MeterProvider``;
without one, the API hands back no-op instruments and recording is free.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Mapping, Protocol

from opentelemetry import metrics as otel_metrics

METER_NAME = "module_update_router"

METRIC_HTTP_REQUESTS_TOTAL = "module_update_router_http_requests_total"
METRIC_HTTP_REQUEST_DURATION_MS = "module_update_router_http_request_duration_ms"
METRIC_REQUESTS = "module_update_router_requests"
METRIC_EVENTS = "module_update_router_events"
METRIC_CLIENT_SECONDS = "module_update_router_client_seconds"
METRIC_CHANNEL_LOOKUP_FAILURES_TOTAL = "channel_lookup_failures_total"
METRIC_EVENT_MIRROR_FAILURES_TOTAL = "module_update_router_event_mirror_failures_total"
METRIC_RETENTION_DELETED_TOTAL = "module_update_router_retention_deleted_total"


class CounterLike(Protocol):
    """Minimal counter interface used by router components."""

    def add(
        self, amount: int | float, attributes: Mapping[str, str] | None = None
    ) -> None:
        """Record one counter increment with attributes."""


class HistogramLike(Protocol):
    """Minimal histogram interface used by router components."""

    def record(
        self, amount: int | float, attributes: Mapping[str, str] | None = None
    ) -> None:
        """Record one sample with attributes."""


@dataclass(frozen=True)
class RouterMetrics:
    """Resolved instruments shared by middleware, services and workers."""

    http_requests_total: CounterLike
    http_request_duration_ms: HistogramLike
    requests: CounterLike
    events: CounterLike
    client_seconds: HistogramLike
    channel_lookup_failures_total: CounterLike
    event_mirror_failures_total: CounterLike
    retention_deleted_total: CounterLike


@lru_cache(maxsize=1)
def router_metrics() -> RouterMetrics:
    """Create the process-wide instrument set once."""
    meter = otel_metrics.get_meter(METER_NAME)
    return RouterMetrics(
        http_requests_total=meter.create_counter(
            name=METRIC_HTTP_REQUESTS_TOTAL,
            description="Count of API requests by route/method/status.",
            unit="1",
        ),
        http_request_duration_ms=meter.create_histogram(
            name=METRIC_HTTP_REQUEST_DURATION_MS,
            description="API request latency in milliseconds.",
            unit="ms",
        ),
        requests=meter.create_counter(
            name=METRIC_REQUESTS,
            description="Count of requests by endpoint.",
            unit="1",
        ),
        events=meter.create_counter(
            name=METRIC_EVENTS,
            description="Count of recorded client events by core version.",
            unit="1",
        ),
        client_seconds=meter.create_histogram(
            name=METRIC_CLIENT_SECONDS,
            description="Client-reported phase duration in seconds.",
            unit="s",
        ),
        channel_lookup_failures_total=meter.create_counter(
            name=METRIC_CHANNEL_LOOKUP_FAILURES_TOTAL,
            description="Channel lookups that failed and defaulted to release.",
            unit="1",
        ),
        event_mirror_failures_total=meter.create_counter(
            name=METRIC_EVENT_MIRROR_FAILURES_TOTAL,
            description="Event mirror publish attempts that failed or were dropped.",
            unit="1",
        ),
        retention_deleted_total=meter.create_counter(
            name=METRIC_RETENTION_DELETED_TOTAL,
            description="Events deleted by the retention sweeper.",
            unit="1",
        ),
    )
