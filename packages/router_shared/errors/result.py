"""Typed result model for in-process service boundaries."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, TypeVar

from .types import ErrorDetail

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Service response carrying either a payload or structured errors."""

    payload: T | None
    errors: list[ErrorDetail] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """Return True when no errors are present."""
        return len(self.errors) == 0


def success(payload: T | None = None) -> Result[T]:
    """Build one successful result."""
    return Result(payload=payload, errors=[])


def failure(*errors: ErrorDetail) -> Result[T]:
    """Build one failed result from at least one error."""
    if len(errors) == 0:
        raise ValueError("failure requires at least one error")
    return Result(payload=None, errors=list(errors))
