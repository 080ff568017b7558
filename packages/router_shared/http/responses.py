"""JSON error envelope shared by every API endpoint.

Every failure is rendered as::

    {"errors": [{"status": "Bad Request", "title": "<message>"}]}
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Sequence

from fastapi.responses import JSONResponse

from packages.router_shared.errors import ErrorCategory, ErrorDetail, Result


def error_status(category: ErrorCategory) -> int:
    """Map structured error category to HTTP status code."""
    if category == ErrorCategory.VALIDATION:
        return HTTPStatus.BAD_REQUEST
    return HTTPStatus.INTERNAL_SERVER_ERROR


def error_body(status: int, *titles: str) -> dict[str, list[dict[str, str]]]:
    """Build the error envelope payload for one status and message list."""
    phrase = HTTPStatus(status).phrase
    return {"errors": [{"status": phrase, "title": title} for title in titles]}


def error_response(status: int, *titles: str) -> JSONResponse:
    """Build one JSON error envelope response."""
    return JSONResponse(status_code=int(status), content=error_body(status, *titles))


def errors_response(errors: Sequence[ErrorDetail]) -> JSONResponse:
    """Render structured errors; the first error decides the status code."""
    if len(errors) == 0:
        return error_response(HTTPStatus.INTERNAL_SERVER_ERROR, "unknown error")
    status = error_status(errors[0].category)
    return error_response(status, *(error.message for error in errors))


def result_error_response(result: Result[object]) -> JSONResponse:
    """Render the errors of one failed service result."""
    return errors_response(result.errors)
