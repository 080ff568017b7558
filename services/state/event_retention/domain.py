"""Domain models for event retention sweeps."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class SweepOutcome(BaseModel):
    """Result of one retention pass."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    cutoff: datetime
    deleted: int
