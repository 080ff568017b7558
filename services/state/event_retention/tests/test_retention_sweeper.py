"""Behavior tests for the event retention sweeper."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta, timezone

from packages.router_shared.config import RetentionSettings
from packages.router_shared.errors import ErrorCategory, codes
from resources.substrates.database import QueryError
from services.state.event_retention import RetentionSweeper
from services.state.update_store.data.repository import SqlUpdateStore

_NOW = datetime(2021, 3, 1, 12, 0, tzinfo=UTC)


@dataclass
class _FakeStore:
    """Retention store double recording every cutoff."""

    cutoffs: list[datetime] = field(default_factory=list)
    failures: int = 0
    deleted: int = 3
    called: threading.Event = field(default_factory=threading.Event)

    def delete_events_older_than(self, cutoff: datetime) -> int:
        self.cutoffs.append(cutoff)
        self.called.set()
        if self.failures > 0:
            self.failures -= 1
            raise QueryError("delete events", RuntimeError("database is locked"))
        return self.deleted


def test_sweep_once_deletes_before_thirty_days(recording_metrics) -> None:
    """The cutoff should be exactly thirty days before now in UTC."""
    store = _FakeStore()
    sweeper = RetentionSweeper(store=store, metrics=recording_metrics)

    result = sweeper.sweep_once(now=_NOW)

    assert result.ok
    assert result.payload.cutoff == _NOW - timedelta(days=30)
    assert result.payload.deleted == 3
    assert store.cutoffs == [datetime(2021, 1, 30, 12, 0, tzinfo=UTC)]
    assert recording_metrics.retention_deleted_total.total == 3


def test_sweep_once_normalizes_clock_to_utc(recording_metrics) -> None:
    """Offset clocks should still produce a UTC cutoff."""
    store = _FakeStore()
    sweeper = RetentionSweeper(
        store=store,
        settings=RetentionSettings(max_age_days=1),
        metrics=recording_metrics,
        clock=lambda: datetime(2021, 3, 1, 7, 0, tzinfo=timezone(timedelta(hours=-5))),
    )

    sweeper.sweep_once()

    assert store.cutoffs == [datetime(2021, 2, 28, 12, 0, tzinfo=UTC)]
    assert store.cutoffs[0].tzinfo == UTC


def test_sweep_once_reports_errors_without_raising(recording_metrics) -> None:
    """Store failures should be returned as dependency errors."""
    sweeper = RetentionSweeper(store=_FakeStore(failures=1), metrics=recording_metrics)

    result = sweeper.sweep_once(now=_NOW)

    assert not result.ok
    assert result.errors[0].category == ErrorCategory.DEPENDENCY
    assert result.errors[0].code == codes.DEPENDENCY_FAILURE
    assert result.errors[0].metadata["operation"] == "delete events"
    assert recording_metrics.retention_deleted_total.samples == []


def test_sweep_once_removes_expired_rows(
    sqlite_store: SqlUpdateStore, recording_metrics
) -> None:
    """Rows older than the window should be removed from a real store."""
    for age_days in (31, 30, 1):
        started = _NOW - timedelta(days=age_days)
        sqlite_store.insert_event(
            phase="pre_update",
            started_at=started,
            exit=0,
            exception=None,
            ended_at=started + timedelta(seconds=1),
            machine_id=f"age-{age_days}",
            core_version="3.0.1",
            core_path="/egg",
        )
    sweeper = RetentionSweeper(store=sqlite_store, metrics=recording_metrics)

    result = sweeper.sweep_once(now=_NOW)

    assert result.payload.deleted == 1
    remaining = [event.machine_id for event in sqlite_store.list_events(-1)]
    assert remaining == ["age-30", "age-1"]


def test_loop_survives_failures_and_stops(recording_metrics) -> None:
    """Background passes should continue after an error until stopped."""
    store = _FakeStore(failures=1)
    sweeper = RetentionSweeper(
        store=store,
        settings=RetentionSettings(interval_seconds=0.01),
        metrics=recording_metrics,
        clock=lambda: _NOW,
    )

    sweeper.start()
    try:
        assert store.called.wait(timeout=5)
        deadline = datetime.now(UTC) + timedelta(seconds=5)
        while len(store.cutoffs) < 2 and datetime.now(UTC) < deadline:
            threading.Event().wait(0.01)
        assert sweeper.running
    finally:
        sweeper.stop(timeout_seconds=2)

    assert len(store.cutoffs) >= 2
    assert not sweeper.running
    assert recording_metrics.retention_deleted_total.total >= 3
