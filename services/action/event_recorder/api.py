"""HTTP route registration for event recording and listing."""

from __future__ import annotations

from http import HTTPStatus

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool

from packages.router_shared.http import (
    InvalidBodyError,
    error_response,
    read_json_object,
    result_error_response,
)
from services.action.event_recorder.service import EventRecorderService

# Paging values are bound as signed 64-bit integers.
_BIGINT_MIN = -(2**63)
_BIGINT_MAX = 2**63 - 1


def _int_query(request: Request, name: str, default: int) -> int:
    """Parse one optional integer query parameter."""
    raw = request.query_params.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(
            f"invalid query parameter '{name}': must be an integer"
        ) from exc
    if not _BIGINT_MIN <= value <= _BIGINT_MAX:
        raise ValueError(f"invalid query parameter '{name}': out of range")
    return value


def register_routes(*, router: APIRouter, service: EventRecorderService) -> None:
    """Register ``POST /event`` and ``GET /event`` on one API router."""

    @router.post("/event")
    async def post_event(request: Request) -> Response:
        try:
            payload = await read_json_object(request)
        except InvalidBodyError as exc:
            return error_response(HTTPStatus.BAD_REQUEST, exc.message)

        result = await run_in_threadpool(service.record_event, payload=payload)
        if not result.ok:
            return result_error_response(result)
        return Response(status_code=HTTPStatus.CREATED)

    @router.get("/event")
    def list_events(request: Request) -> Response:
        try:
            limit = _int_query(request, "limit", -1)
            offset = _int_query(request, "offset", 0)
        except ValueError as exc:
            return error_response(HTTPStatus.BAD_REQUEST, str(exc))

        result = service.list_events(limit=limit, offset=offset)
        if not result.ok or result.payload is None:
            return result_error_response(result)
        return JSONResponse(content=[record.to_json() for record in result.payload])
