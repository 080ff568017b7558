"""Identity extraction and retrieval errors."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class IdentityError(Exception):
    """Base error for identity header handling."""

    message: str

    def __str__(self) -> str:
        """Return the human-readable error message."""
        return self.message


@dataclass(frozen=True)
class IdentityDecodeError(IdentityError):
    """Header value is not base64 JSON of a principal."""


@dataclass(frozen=True)
class MissingIdentityError(IdentityError):
    """Request state carries no principal; the middleware did not run."""


@dataclass(frozen=True)
class IdentityTypeError(IdentityError):
    """Request state carries something other than a principal."""
