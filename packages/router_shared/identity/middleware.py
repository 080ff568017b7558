"""Identity middleware and request-scoped principal retrieval."""

from __future__ import annotations

from http import HTTPStatus

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from packages.router_shared.http.errors import MissingHeaderError
from packages.router_shared.http.responses import error_response
from packages.router_shared.http.server import get_header
from packages.router_shared.logging import get_logger

from .codec import decode_identity
from .errors import IdentityDecodeError, IdentityTypeError, MissingIdentityError
from .models import Principal

IDENTITY_HEADER = "X-Rh-Identity"
_STATE_ATTR = "identity"

_LOGGER = get_logger(__name__)


class IdentityMiddleware(BaseHTTPMiddleware):
    """Reject requests without a decodable identity; store it otherwise."""

    def __init__(self, app: ASGIApp, header_name: str = IDENTITY_HEADER) -> None:
        super().__init__(app)
        self._header_name = header_name

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            value = get_header(request, self._header_name)
            principal = decode_identity(value or "")
        except (MissingHeaderError, IdentityDecodeError) as exc:
            _LOGGER.debug("identity rejected", extra={"reason": exc.message})
            return error_response(HTTPStatus.BAD_REQUEST, exc.message)

        setattr(request.state, _STATE_ATTR, principal)
        return await call_next(request)


def get_identity(request: Request) -> Principal:
    """Return the principal stored by ``IdentityMiddleware``.

    Usable directly or as a FastAPI dependency.
    """
    value = getattr(request.state, _STATE_ATTR, None)
    if value is None:
        raise MissingIdentityError(
            message="identity: no principal found in request state"
        )
    if not isinstance(value, Principal):
        raise IdentityTypeError(
            message=f"identity: cannot use {type(value).__name__} as Principal"
        )
    return value
