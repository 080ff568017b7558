"""Tests for relational engine construction and readiness probes."""

from __future__ import annotations

from types import SimpleNamespace

import pytest
from sqlalchemy.pool import StaticPool

from packages.router_shared.config import DatabaseSettings
from packages.router_shared.errors import ErrorCategory, codes
from resources.substrates.database import (
    DatabaseConnectionError,
    QueryError,
    backend_name,
    create_database_engine,
    normalize_database_error,
    probe,
    shares_one_connection,
)


class _FakeConnection:
    """Minimal context-managed connection double capturing execute calls."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, object] | None]] = []

    def __enter__(self) -> "_FakeConnection":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        del exc_type, exc, tb

    def execute(self, statement, params=None) -> None:
        self.calls.append((str(statement), params))


class _FakeEngine:
    """Minimal engine double exposing ``connect`` and a dialect name."""

    def __init__(self, conn: _FakeConnection, dialect: str) -> None:
        self._conn = conn
        self.dialect = SimpleNamespace(name=dialect)

    def connect(self) -> _FakeConnection:
        return self._conn


def test_backend_name_strips_driver() -> None:
    """Backend should ignore the DBAPI driver suffix."""
    assert backend_name("postgresql+psycopg://u:p@h/db") == "postgresql"
    assert backend_name("sqlite://") == "sqlite"


def test_in_memory_sqlite_shares_one_connection() -> None:
    """In-memory SQLite should use a static pool."""
    engine = create_database_engine(DatabaseSettings(url="sqlite://"))
    try:
        assert isinstance(engine.pool, StaticPool)
        assert shares_one_connection(engine) is True
        probe(engine)
    finally:
        engine.dispose()


def test_postgres_url_is_built_from_parts() -> None:
    """Split fields should produce a psycopg URL when url is unset."""
    settings = DatabaseSettings(
        driver="postgresql", host="db", port=5433, name="mur", user="u", password="p@ss"
    )

    assert settings.resolved_url() == "postgresql+psycopg://u:p%40ss@db:5433/mur"


def test_unsupported_backend_is_rejected() -> None:
    """Engines are only built for SQLite and PostgreSQL."""
    with pytest.raises(ValueError, match="unsupported database backend: mysql"):
        create_database_engine(DatabaseSettings(url="mysql://u@h/db"))


def test_probe_sets_statement_timeout_on_postgres() -> None:
    """Postgres probes should set a statement timeout before SELECT 1."""
    conn = _FakeConnection()

    probe(_FakeEngine(conn, "postgresql"), timeout_seconds=1.2)

    assert conn.calls[0] == (
        "SELECT set_config('statement_timeout', :timeout_value, false)",
        {"timeout_value": "1200ms"},
    )
    assert conn.calls[1] == ("SELECT 1", None)


def test_probe_skips_statement_timeout_on_sqlite() -> None:
    """SQLite probes should only run SELECT 1."""
    conn = _FakeConnection()

    probe(_FakeEngine(conn, "sqlite"))
    assert conn.calls == [("SELECT 1", None)]


def test_probe_raises_driver_errors() -> None:
    """Probe failures should surface the driver exception."""

    class _FailingConnection(_FakeConnection):
        def execute(self, statement, params=None) -> None:
            del statement, params
            raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        probe(_FakeEngine(_FailingConnection(), "sqlite"))


def test_query_error_message_names_operation_and_cause() -> None:
    """QueryError should keep the driver error as its cause."""
    cause = RuntimeError("no such table: events")
    error = QueryError("list events", cause)

    assert str(error) == "list events: no such table: events"
    assert error.cause is cause


def test_normalize_database_error_maps_categories() -> None:
    """Connection and operational failures are retryable dependency errors."""

    class OperationalError(Exception):
        pass

    unavailable = normalize_database_error(DatabaseConnectionError("down"))
    locked = normalize_database_error(
        QueryError("insert event", OperationalError("database is locked"))
    )
    failed = normalize_database_error(QueryError("count", ValueError("bad")))

    assert unavailable.category == ErrorCategory.DEPENDENCY
    assert unavailable.code == codes.DEPENDENCY_UNAVAILABLE
    assert unavailable.retryable is True
    assert locked.code == codes.DEPENDENCY_UNAVAILABLE
    assert locked.retryable is True
    assert locked.metadata["operation"] == "insert event"
    assert failed.category == ErrorCategory.DEPENDENCY
    assert failed.code == codes.DEPENDENCY_FAILURE
    assert failed.retryable is False
    assert failed.message == "count: bad"
    assert failed.metadata == {"exception_type": "ValueError", "operation": "count"}
