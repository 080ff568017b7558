"""HTTP route registration for channel resolution."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response

from packages.router_shared.http import result_error_response
from packages.router_shared.identity import Principal, get_identity
from services.action.channel_router.service import ChannelRouterService


def register_routes(*, router: APIRouter, service: ChannelRouterService) -> None:
    """Register ``GET /channel`` on one API router."""

    @router.get("/channel")
    def get_channel(
        request: Request,
        principal: Principal = Depends(get_identity),
    ) -> Response:
        result = service.resolve_channel(
            module_name=request.query_params.get("module"),
            account_number=principal.account_number,
        )
        if not result.ok or result.payload is None:
            return result_error_response(result)
        return JSONResponse(content=result.payload.to_json())
