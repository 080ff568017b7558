"""Event recorder native package exports."""

from services.action.event_recorder.implementation import DefaultEventRecorderService
from services.action.event_recorder.service import EventRecorderService
from services.action.event_recorder.validation import (
    REQUIRED_FIELDS,
    EventSubmission,
    validate_event_payload,
)

__all__ = [
    "DefaultEventRecorderService",
    "EventRecorderService",
    "EventSubmission",
    "REQUIRED_FIELDS",
    "validate_event_payload",
]
