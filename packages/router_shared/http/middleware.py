"""Request middleware for the API chain: metrics, request id, access log."""

from __future__ import annotations

import logging
import uuid
from time import perf_counter

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from packages.router_shared.logging import fields, get_logger, log_context
from packages.router_shared.metrics import RouterMetrics, router_metrics

REQUEST_ID_HEADER = "X-Request-Id"

_LOGGER = get_logger("module_update_router.access")


def _route_template(request: Request) -> str:
    """Return the matched route template, falling back to the raw path."""
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    if isinstance(path, str) and path:
        return path
    return request.url.path


class MetricsMiddleware(BaseHTTPMiddleware):
    """Record request count and latency per route, method and status."""

    def __init__(self, app: ASGIApp, metrics: RouterMetrics | None = None) -> None:
        super().__init__(app)
        self._metrics = metrics

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        metrics = self._metrics or router_metrics()
        started = perf_counter()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            attrs = {
                "route": _route_template(request),
                "method": request.method,
                "status": str(status),
            }
            metrics.http_requests_total.add(1, attributes=attrs)
            metrics.http_request_duration_ms.record(
                (perf_counter() - started) * 1000.0, attributes=attrs
            )


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Propagate or generate a request id and bind it to the log context."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER, "").strip()
        if request_id == "":
            request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        with log_context({fields.REQUEST_ID: request_id}):
            response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Emit one structured access log line per request."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        started = perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            _log_access(request, status=500, length="0", started=started)
            raise

        _log_access(
            request,
            status=response.status_code,
            length=response.headers.get("content-length", "0"),
            started=started,
        )
        return response


def _log_access(request: Request, *, status: int, length: str, started: float) -> None:
    """Log one completed request at a level derived from its status."""
    level = logging.INFO
    if status >= 500:
        level = logging.ERROR
    elif status >= 400:
        level = logging.WARNING

    _LOGGER.log(
        level,
        "request completed",
        extra={
            fields.HOST: request.url.hostname or "",
            fields.METHOD: request.method,
            fields.REFERER: request.headers.get("referer", ""),
            fields.URL: str(request.url),
            fields.USER_AGENT: request.headers.get("user-agent", ""),
            fields.STATUS: status,
            fields.RESPONSE_BYTES: length,
            fields.DURATION_MS: round((perf_counter() - started) * 1000.0, 3),
            fields.REQUEST_ID: getattr(request.state, "request_id", ""),
        },
    )
