"""Authoritative in-process Python API for the update store."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path

from packages.router_shared.config import DatabaseSettings
from services.state.update_store.data.migrator import MigrationRunResult
from services.state.update_store.domain import EventRecord


class UpdateStore(ABC):
    """Membership and event persistence used by the router services.

    Query failures raise ``QueryError``; connection failures raise
    ``DatabaseConnectionError``.
    """

    @abstractmethod
    def migrate(self, *, reset: bool = False) -> MigrationRunResult:
        """Apply pending schema migrations, optionally from an empty schema."""

    @abstractmethod
    def seed(self, path: Path) -> None:
        """Execute one raw SQL script against the store."""

    @abstractmethod
    def count(self, module_name: str, account_id: str) -> int:
        """Return membership rows matching one module/account pair."""

    @abstractmethod
    def insert_membership(self, module_name: str, account_id: str) -> None:
        """Insert one membership row; duplicates are ignored."""

    @abstractmethod
    def insert_event(
        self,
        *,
        phase: str,
        started_at: datetime,
        exit: int,
        exception: str | None,
        ended_at: datetime,
        machine_id: str,
        core_version: str,
        core_path: str | None,
    ) -> None:
        """Persist one event under a freshly generated id."""

    @abstractmethod
    def list_events(self, limit: int, offset: int = 0) -> list[EventRecord]:
        """Return events by ascending start time; negative limit means all."""

    @abstractmethod
    def delete_events_older_than(self, cutoff: datetime) -> int:
        """Delete events started strictly before ``cutoff``; return the count."""

    @abstractmethod
    def close(self) -> None:
        """Release cached statements and pooled connections."""


def open_update_store(settings: DatabaseSettings) -> UpdateStore:
    """Connect to the configured database and return a ready store."""
    from services.state.update_store.data.repository import SqlUpdateStore

    return SqlUpdateStore.open(settings)
