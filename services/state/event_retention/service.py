"""Authoritative in-process Python API for event retention."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from packages.router_shared.errors import Result
from services.state.event_retention.domain import SweepOutcome


class EventRetentionService(ABC):
    """Periodically delete events older than the retention window."""

    @abstractmethod
    def sweep_once(self, *, now: datetime | None = None) -> Result[SweepOutcome]:
        """Run one deletion pass relative to ``now`` (UTC by default)."""

    @abstractmethod
    def start(self) -> None:
        """Start the background sweep loop."""

    @abstractmethod
    def stop(self, *, timeout_seconds: float = 5.0) -> None:
        """Stop the background sweep loop."""
