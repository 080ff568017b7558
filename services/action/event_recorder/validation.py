"""Request validation for client event submissions."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime

from pydantic import (
    AwareDatetime,
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    StrictStr,
    ValidationError,
    field_validator,
)

from packages.router_shared.errors import (
    ErrorDetail,
    Result,
    codes,
    failure,
    success,
    validation_error,
)

# Presence is checked in this order; the first gap is reported.
REQUIRED_FIELDS: tuple[str, ...] = (
    "phase",
    "started_at",
    "exit",
    "ended_at",
    "machine_id",
    "core_version",
    "core_path",
)

# The stored exit column is a 32-bit INTEGER.
EXIT_MIN = -(2**31)
EXIT_MAX = 2**31 - 1


class EventSubmission(BaseModel):
    """One validated client update event."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    phase: StrictStr
    started_at: AwareDatetime
    exit: StrictInt = Field(ge=EXIT_MIN, le=EXIT_MAX)
    exception: StrictStr | None = None
    ended_at: AwareDatetime
    machine_id: StrictStr
    core_version: StrictStr
    core_path: StrictStr

    @field_validator("started_at", "ended_at", mode="before")
    @classmethod
    def _require_timestamp_text(cls, value: object) -> object:
        """Accept RFC 3339 strings only, not epoch numbers."""
        if isinstance(value, datetime):
            return value
        if not isinstance(value, str):
            raise ValueError("must be an RFC 3339 timestamp string")
        return value

    @field_validator("exception", mode="after")
    @classmethod
    def _empty_exception_is_none(cls, value: str | None) -> str | None:
        """Treat an empty exception string as no exception."""
        if value == "":
            return None
        return value

    @property
    def elapsed_seconds(self) -> float:
        """Return the client-reported duration of the phase."""
        return (self.ended_at - self.started_at).total_seconds()


def validate_event_payload(
    payload: Mapping[str, object],
) -> Result[EventSubmission]:
    """Validate one decoded JSON object into an event submission."""
    for name in REQUIRED_FIELDS:
        if payload.get(name) is None:
            return failure(
                validation_error(
                    f"missing required field: '{name}'",
                    code=codes.MISSING_REQUIRED_FIELD,
                    metadata={"field": name},
                )
            )

    try:
        event = EventSubmission.model_validate(dict(payload))
    except ValidationError as exc:
        return failure(_field_error(exc))
    return success(event)


def _field_error(exc: ValidationError) -> ErrorDetail:
    """Convert the first pydantic error into a field-named validation error."""
    errors = exc.errors()
    if len(errors) == 0:
        return validation_error(str(exc), code=codes.INVALID_ARGUMENT)
    first = errors[0]
    location = first.get("loc", ())
    field_name = str(location[0]) if location else "body"
    return validation_error(
        f"invalid field '{field_name}': {first.get('msg', 'invalid value')}",
        code=codes.INVALID_ARGUMENT,
        metadata={"field": field_name},
    )
