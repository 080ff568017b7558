"""Public shared HTTP API for router components."""

from .errors import (
    HttpError,
    HttpServerError,
    InvalidBodyError,
    InvalidJsonBodyError,
    MissingHeaderError,
)
from .middleware import (
    REQUEST_ID_HEADER,
    AccessLogMiddleware,
    MetricsMiddleware,
    RequestIdMiddleware,
)
from .responses import (
    error_body,
    error_response,
    error_status,
    errors_response,
    result_error_response,
)
from .server import (
    build_server,
    create_app,
    get_header,
    read_json_body,
    read_json_object,
    read_raw_body,
)

__all__ = [
    "AccessLogMiddleware",
    "HttpError",
    "HttpServerError",
    "InvalidBodyError",
    "InvalidJsonBodyError",
    "MetricsMiddleware",
    "MissingHeaderError",
    "REQUEST_ID_HEADER",
    "RequestIdMiddleware",
    "build_server",
    "create_app",
    "error_body",
    "error_response",
    "error_status",
    "errors_response",
    "get_header",
    "read_json_body",
    "read_json_object",
    "read_raw_body",
    "result_error_response",
]
