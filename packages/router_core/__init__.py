"""Public API for Module Update Router process assembly."""

from packages.router_core.app import api_middleware, build_api_app, build_app
from packages.router_core.main import (
    RouterRuntime,
    build_runtime,
    main,
    prepare_store,
    serve,
)

__all__ = [
    "RouterRuntime",
    "api_middleware",
    "build_api_app",
    "build_app",
    "build_runtime",
    "main",
    "prepare_store",
    "serve",
]
