"""Base64 JSON encoding of identity principals."""

from __future__ import annotations

import base64
import binascii
import json

from pydantic import ValidationError

from .errors import IdentityDecodeError
from .models import Principal


def decode_identity(value: str) -> Principal:
    """Decode one header value into a validated principal."""
    try:
        raw = base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise IdentityDecodeError(message=f"illegal base64 data: {exc}") from exc

    try:
        payload = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise IdentityDecodeError(message=f"invalid identity JSON: {exc}") from exc

    if not isinstance(payload, dict):
        raise IdentityDecodeError(message="invalid identity: expected a JSON object")

    try:
        return Principal.model_validate(payload)
    except ValidationError as exc:
        raise IdentityDecodeError(message=f"invalid identity: {_first_error(exc)}") from exc


def encode_identity(principal: Principal) -> str:
    """Encode one principal as the base64 JSON header value."""
    data = principal.model_dump_json(by_alias=True, exclude_none=True)
    return base64.b64encode(data.encode("utf-8")).decode("ascii")


def _first_error(exc: ValidationError) -> str:
    """Render the first validation error as ``loc: message``."""
    errors = exc.errors()
    if len(errors) == 0:
        return str(exc)
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg', 'invalid value')}"
