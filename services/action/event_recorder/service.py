"""Authoritative in-process Python API for event recording."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping

from packages.router_shared.errors import Result
from services.state.update_store import EventRecord


class EventRecorderService(ABC):
    """Validate, persist and list client update events."""

    @abstractmethod
    def record_event(self, *, payload: Mapping[str, object]) -> Result[None]:
        """Validate one decoded JSON object and persist it."""

    @abstractmethod
    def list_events(self, *, limit: int, offset: int) -> Result[list[EventRecord]]:
        """Return one page of recorded events by ascending start time."""
