"""Domain models for channel resolution."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

TESTING_CHANNEL = "/testing"
RELEASE_CHANNEL = "/release"


class DecisionSource(str, Enum):
    """Why a channel was chosen."""

    MEMBERSHIP = "membership"
    DEFAULT = "default"
    LOOKUP_FAILED = "lookup_failed"


class ChannelDecision(BaseModel):
    """Resolved channel for one module/account pair."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    url: str
    source: DecisionSource

    def to_json(self) -> dict[str, str]:
        """Serialize as the public response body."""
        return {"url": self.url}
