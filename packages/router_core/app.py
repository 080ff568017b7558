"""HTTP application assembly: root app, API sub-apps and middleware chain."""

from __future__ import annotations

from http import HTTPStatus

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware import Middleware

from packages.router_shared.config import HttpSettings
from packages.router_shared.http import (
    AccessLogMiddleware,
    MetricsMiddleware,
    RequestIdMiddleware,
    create_app,
    error_response,
)
from packages.router_shared.identity import IdentityError, IdentityMiddleware
from packages.router_shared.logging import get_logger
from packages.router_shared.metrics import RouterMetrics
from services.action.channel_router.api import register_routes as register_channel
from services.action.channel_router.service import ChannelRouterService
from services.action.event_recorder.api import register_routes as register_events
from services.action.event_recorder.service import EventRecorderService

_LOGGER = get_logger(__name__)


def api_middleware(metrics: RouterMetrics | None = None) -> list[Middleware]:
    """Return the API middleware chain, outermost first."""
    return [
        Middleware(MetricsMiddleware, metrics=metrics),
        Middleware(RequestIdMiddleware),
        Middleware(AccessLogMiddleware),
        Middleware(IdentityMiddleware),
    ]


def _register_error_handlers(app: FastAPI) -> None:
    """Render every API failure with the JSON error envelope."""

    async def _http_error(request: Request, exc: StarletteHTTPException) -> Response:
        del request
        return error_response(exc.status_code, str(exc.detail))

    async def _validation_error(
        request: Request, exc: RequestValidationError
    ) -> Response:
        del request
        titles = [str(item.get("msg", "invalid request")) for item in exc.errors()]
        return error_response(HTTPStatus.BAD_REQUEST, *(titles or ["invalid request"]))

    async def _identity_error(request: Request, exc: IdentityError) -> Response:
        _LOGGER.error(
            "identity unavailable to handler",
            extra={"path": request.url.path, "error": exc.message},
        )
        return error_response(HTTPStatus.INTERNAL_SERVER_ERROR, exc.message)

    async def _unhandled(request: Request, exc: Exception) -> Response:
        _LOGGER.error(
            "unhandled API error",
            extra={"path": request.url.path, "error": str(exc)},
        )
        return error_response(HTTPStatus.INTERNAL_SERVER_ERROR, str(exc))

    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(IdentityError, _identity_error)
    app.add_exception_handler(Exception, _unhandled)


def build_api_app(
    *,
    channel_service: ChannelRouterService,
    event_service: EventRecorderService,
    metrics: RouterMetrics | None = None,
) -> FastAPI:
    """Build one API application behind the full middleware chain."""
    app = create_app(title="module-update-router-api", middleware=api_middleware(metrics))
    router = APIRouter()
    register_channel(router=router, service=channel_service)
    register_events(router=router, service=event_service)
    app.include_router(router)
    _register_error_handlers(app)
    return app


def build_app(
    *,
    settings: HttpSettings,
    channel_service: ChannelRouterService,
    event_service: EventRecorderService,
    metrics: RouterMetrics | None = None,
) -> FastAPI:
    """Build the root app: ``/ping`` plus one mounted API app per root."""
    app = create_app(title="module-update-router")

    @app.get("/ping", response_class=PlainTextResponse)
    def ping() -> str:
        return "OK"

    for api_root in settings.api_roots():
        app.mount(
            api_root,
            build_api_app(
                channel_service=channel_service,
                event_service=event_service,
                metrics=metrics,
            ),
        )
        _LOGGER.debug("API root mounted", extra={"api_root": api_root})
    return app
