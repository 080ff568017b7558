"""Domain models exposed by the update store public API."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class EventRecord(BaseModel):
    """One persisted client update event."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    event_id: str
    phase: str
    started_at: datetime
    exit: int
    exception: str | None = None
    ended_at: datetime
    machine_id: str
    core_version: str
    core_path: str | None = None

    def to_json(self) -> dict[str, Any]:
        """Serialize for HTTP responses; null optional fields are omitted."""
        return self.model_dump(mode="json", exclude_none=True)
