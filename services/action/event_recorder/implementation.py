"""Concrete event recorder implementation."""

from __future__ import annotations

from collections.abc import Mapping

from packages.router_shared.errors import (
    Result,
    codes,
    failure,
    success,
    validation_error,
)
from packages.router_shared.logging import get_logger
from packages.router_shared.metrics import RouterMetrics, router_metrics
from resources.adapters.event_bus import EventMirrorPublisher
from resources.substrates.database import QueryError, normalize_database_error
from services.action.event_recorder.service import EventRecorderService
from services.action.event_recorder.validation import (
    EventSubmission,
    validate_event_payload,
)
from services.state.update_store import EventRecord, UpdateStore

_LOGGER = get_logger(__name__)


class DefaultEventRecorderService(EventRecorderService):
    """Store-backed recorder with an optional best-effort mirror."""

    def __init__(
        self,
        *,
        store: UpdateStore,
        publisher: EventMirrorPublisher | None = None,
        metrics: RouterMetrics | None = None,
    ) -> None:
        self._store = store
        self._publisher = publisher
        self._metrics = metrics or router_metrics()

    def record_event(self, *, payload: Mapping[str, object]) -> Result[None]:
        """Validate one decoded JSON object and persist it."""
        self._metrics.requests.add(1, attributes={"endpoint": "event"})
        checked = validate_event_payload(payload)
        event = checked.payload
        if event is None:
            return failure(*checked.errors)

        try:
            self._store.insert_event(
                phase=event.phase,
                started_at=event.started_at,
                exit=event.exit,
                exception=event.exception,
                ended_at=event.ended_at,
                machine_id=event.machine_id,
                core_version=event.core_version,
                core_path=event.core_path,
            )
        except QueryError as exc:
            _LOGGER.error(
                "event insert failed",
                extra={"machine_id": event.machine_id, "error": str(exc)},
            )
            return failure(normalize_database_error(exc))

        self._metrics.events.add(1, attributes={"core_version": event.core_version})
        self._metrics.client_seconds.record(
            event.elapsed_seconds, attributes={"phase": event.phase}
        )
        self._mirror(event)
        return success()

    def list_events(self, *, limit: int, offset: int) -> Result[list[EventRecord]]:
        """Return one page of recorded events by ascending start time."""
        if offset < 0:
            return failure(
                validation_error(
                    "invalid query parameter 'offset': must be >= 0",
                    code=codes.INVALID_ARGUMENT,
                    metadata={"parameter": "offset"},
                )
            )
        try:
            records = self._store.list_events(limit, offset)
        except QueryError as exc:
            _LOGGER.error("event listing failed", extra={"error": str(exc)})
            return failure(normalize_database_error(exc))
        return success(records)

    def _mirror(self, event: EventSubmission) -> None:
        """Hand the accepted event to the mirror publisher, if configured."""
        if self._publisher is None:
            return
        self._publisher.publish(event.model_dump_json())
