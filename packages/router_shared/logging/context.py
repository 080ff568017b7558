"""Per-request and per-routine fields attached to every router log record.

HTTP requests bind their request id and background loops bind their routine
name. The fields sit in a ``ContextVar``, so a request handled in a worker
thread or the retention sweeper's daemon thread sees only its own values.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Mapping

_FIELDS: ContextVar[dict[str, str]] = ContextVar("router_log_fields", default={})


def _merged(base: Mapping[str, str], values: Mapping[str, object]) -> dict[str, str]:
    """Return ``base`` updated with the stringified non-None ``values``."""
    merged = dict(base)
    merged.update({str(key): str(value) for key, value in values.items() if value is not None})
    return merged


def get_context() -> dict[str, str]:
    """Return a copy of the fields bound in this context."""
    return dict(_FIELDS.get())


def bind_context(**values: object) -> None:
    """Add fields to this context; ``None`` leaves a field untouched."""
    if values:
        _FIELDS.set(_merged(_FIELDS.get(), values))


def clear_context(*keys: str) -> None:
    """Drop the named fields, or every field when no names are given."""
    if keys:
        _FIELDS.set({key: value for key, value in _FIELDS.get().items() if key not in keys})
    else:
        _FIELDS.set({})


@contextmanager
def log_context(values: Mapping[str, object]) -> Iterator[None]:
    """Bind ``values`` inside the block and restore the prior fields after."""
    token = _FIELDS.set(_merged(_FIELDS.get(), values))
    try:
        yield
    finally:
        _FIELDS.reset(token)
