"""Minimal FastAPI and uvicorn helpers for raw HTTP handling."""

from __future__ import annotations

import json
from typing import Any, Sequence

import uvicorn
from fastapi import FastAPI, Request
from starlette.middleware import Middleware

from .errors import InvalidBodyError, InvalidJsonBodyError, MissingHeaderError


def create_app(
    *,
    title: str = "module-update-router",
    version: str = "0.0.0",
    middleware: Sequence[Middleware] | None = None,
) -> FastAPI:
    """Create a FastAPI app with project defaults.

    ``middleware`` is ordered outermost first.
    """
    return FastAPI(
        title=title,
        version=version,
        middleware=list(middleware or ()),
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )


def build_server(
    app: FastAPI,
    *,
    host: str = "0.0.0.0",
    port: int = 8080,
    log_level: str = "info",
) -> uvicorn.Server:
    """Build one uvicorn server that the caller runs and stops."""
    config = uvicorn.Config(
        app,
        host=host,
        port=port,
        log_level=log_level.lower(),
        access_log=False,
    )
    return uvicorn.Server(config)


def get_header(
    request: Request,
    name: str,
    *,
    required: bool = True,
    strip: bool = True,
) -> str | None:
    """Fetch one header value and optionally enforce presence."""
    value = request.headers.get(name)
    if value is None:
        if required:
            raise MissingHeaderError(
                message=f"missing {name} header",
                header_name=name,
            )
        return None

    if strip:
        value = value.strip()
    if required and value == "":
        raise MissingHeaderError(
            message=f"missing {name} header",
            header_name=name,
        )
    return value


async def read_raw_body(request: Request) -> bytes:
    """Read raw request body bytes without interpretation."""
    return await request.body()


async def read_json_body(request: Request) -> Any:
    """Read and decode one request body as JSON.

    The decoder message is preserved so clients see what was wrong.
    """
    body = await read_raw_body(request)
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidBodyError(message=f"body is not valid utf-8: {exc}") from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise InvalidJsonBodyError(message=str(exc)) from exc


async def read_json_object(request: Request) -> dict[str, Any]:
    """Read one JSON body that must decode to an object."""
    payload = await read_json_body(request)
    if not isinstance(payload, dict):
        raise InvalidBodyError(message="request body must be a JSON object")
    return payload
