"""Shared pytest fixtures for router tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Mapping

import pytest

from packages.router_shared.config import DatabaseSettings
from packages.router_shared.metrics import RouterMetrics
from services.state.update_store.data.repository import SqlUpdateStore


@dataclass
class RecordingInstrument:
    """Counter/histogram double capturing every sample."""

    samples: list[tuple[float, dict[str, str]]] = field(default_factory=list)

    def add(
        self, amount: int | float, attributes: Mapping[str, str] | None = None
    ) -> None:
        self.samples.append((float(amount), dict(attributes or {})))

    def record(
        self, amount: int | float, attributes: Mapping[str, str] | None = None
    ) -> None:
        self.samples.append((float(amount), dict(attributes or {})))

    @property
    def total(self) -> float:
        """Return the sum of recorded amounts."""
        return sum(amount for amount, _ in self.samples)


def build_recording_metrics() -> RouterMetrics:
    """Build a metrics bundle whose instruments record in memory."""
    return RouterMetrics(
        http_requests_total=RecordingInstrument(),
        http_request_duration_ms=RecordingInstrument(),
        requests=RecordingInstrument(),
        events=RecordingInstrument(),
        client_seconds=RecordingInstrument(),
        channel_lookup_failures_total=RecordingInstrument(),
        event_mirror_failures_total=RecordingInstrument(),
        retention_deleted_total=RecordingInstrument(),
    )


@pytest.fixture
def recording_metrics() -> RouterMetrics:
    """Return in-memory metrics for assertions."""
    return build_recording_metrics()


@pytest.fixture
def sqlite_store() -> Iterator[SqlUpdateStore]:
    """Return a migrated in-memory SQLite store."""
    store = SqlUpdateStore.open(DatabaseSettings(url="sqlite://"))
    store.migrate()
    try:
        yield store
    finally:
        store.close()
