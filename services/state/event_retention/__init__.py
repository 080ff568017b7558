"""Event retention native package exports."""

from services.state.event_retention.domain import SweepOutcome
from services.state.event_retention.implementation import RetentionSweeper
from services.state.event_retention.service import EventRetentionService

__all__ = [
    "EventRetentionService",
    "RetentionSweeper",
    "SweepOutcome",
]
