"""Background retention sweeper over the update store."""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from packages.router_shared.config import RetentionSettings
from packages.router_shared.errors import (
    Result,
    failure,
    success,
)
from packages.router_shared.logging import fields, get_logger, log_context
from packages.router_shared.metrics import RouterMetrics, router_metrics
from resources.substrates.database import QueryError, normalize_database_error
from services.state.event_retention.domain import SweepOutcome
from services.state.event_retention.service import EventRetentionService
from services.state.update_store import UpdateStore

_LOGGER = get_logger(__name__)
_ROUTINE = "db_trim"


def _utc_now() -> datetime:
    return datetime.now(UTC)


class RetentionSweeper(EventRetentionService):
    """Daemon thread deleting expired events once per interval.

    The first pass runs immediately on start. Failures are logged and the
    loop keeps going.
    """

    def __init__(
        self,
        *,
        store: UpdateStore,
        settings: RetentionSettings | None = None,
        metrics: RouterMetrics | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        settings = settings or RetentionSettings()
        self._store = store
        self._interval_seconds = settings.interval_seconds
        self._max_age = timedelta(days=settings.max_age_days)
        self._metrics = metrics or router_metrics()
        self._clock = clock
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        """Return True while the loop thread is alive."""
        return self._thread is not None and self._thread.is_alive()

    def sweep_once(self, *, now: datetime | None = None) -> Result[SweepOutcome]:
        """Run one deletion pass relative to ``now`` (UTC by default)."""
        cutoff = (now or self._clock()).astimezone(UTC) - self._max_age
        with log_context({fields.ROUTINE: _ROUTINE}):
            try:
                deleted = self._store.delete_events_older_than(cutoff)
            except QueryError as exc:
                error = normalize_database_error(exc)
                _LOGGER.error(
                    "deleting events failed",
                    extra={
                        "cutoff": cutoff.isoformat(),
                        "error": error.message,
                        "code": error.code,
                        "retryable": error.retryable,
                    },
                )
                return failure(error)

            self._metrics.retention_deleted_total.add(deleted)
            _LOGGER.info(
                "deleted rows",
                extra={"cutoff": cutoff.isoformat(), "rows": deleted},
            )
        return success(SweepOutcome(cutoff=cutoff, deleted=deleted))

    def start(self) -> None:
        """Start the daemon loop once."""
        if self._thread is not None:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="event-retention-sweeper", daemon=True
        )
        self._thread.start()
        with log_context({fields.ROUTINE: _ROUTINE}):
            _LOGGER.info(
                "started database trimmer",
                extra={"interval_seconds": self._interval_seconds},
            )

    def stop(self, *, timeout_seconds: float = 5.0) -> None:
        """Signal the loop to exit and wait for it."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout_seconds)
            self._thread = None

    def _run(self) -> None:
        """Sweep, then sleep until the next tick or a stop signal."""
        while not self._stop.is_set():
            try:
                self.sweep_once()
            except Exception:  # noqa: BLE001
                _LOGGER.exception("retention sweep crashed; continuing")
            self._stop.wait(self._interval_seconds)
