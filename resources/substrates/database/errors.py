"""Relational store errors and their mapping onto shared error semantics."""

from __future__ import annotations

from packages.router_shared.errors import ErrorDetail, codes, dependency_error


class DatabaseError(Exception):
    """Base error for relational store failures."""


class DatabaseConnectionError(DatabaseError, ConnectionError):
    """Engine construction or the connectivity probe failed."""


class QueryError(DatabaseError):
    """One statement failed; ``cause`` holds the driver error."""

    def __init__(self, operation: str, cause: BaseException) -> None:
        super().__init__(f"{operation}: {cause}")
        self.operation = operation
        self.cause = cause


def normalize_database_error(exc: DatabaseError) -> ErrorDetail:
    """Map one store failure onto a dependency error for service results.

    Connection loss and driver ``OperationalError`` (locks, disk I/O) are
    retryable; anything else the statement did is not.
    """
    cause = exc.cause if isinstance(exc, QueryError) else exc
    exc_type_name = type(cause).__name__
    metadata = {"exception_type": exc_type_name}
    if isinstance(exc, QueryError):
        metadata["operation"] = exc.operation

    if isinstance(exc, DatabaseConnectionError) or "OperationalError" in exc_type_name:
        return dependency_error(
            str(exc),
            code=codes.DEPENDENCY_UNAVAILABLE,
            retryable=True,
            metadata=metadata,
        )

    return dependency_error(
        str(exc),
        code=codes.DEPENDENCY_FAILURE,
        retryable=False,
        metadata=metadata,
    )
