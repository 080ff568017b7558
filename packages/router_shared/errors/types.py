"""Canonical shared error types for Module Update Router components.

Errors cross in-process service boundaries as ``ErrorDetail`` values and are
only translated into HTTP error envelopes at the transport edge.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping


class ErrorCategory(str, Enum):
    """High-level error categories shared across service boundaries."""

    VALIDATION = "validation"
    DEPENDENCY = "dependency"


@dataclass(frozen=True)
class ErrorDetail:
    """Structured error object carried by service results."""

    code: str
    message: str
    category: ErrorCategory
    retryable: bool = False
    metadata: Mapping[str, str] = field(default_factory=dict)
