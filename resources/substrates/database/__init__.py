"""Relational store substrate primitives for router services."""

from resources.substrates.database.engine import (
    backend_name,
    create_database_engine,
    shares_one_connection,
)
from resources.substrates.database.errors import (
    DatabaseConnectionError,
    DatabaseError,
    QueryError,
    normalize_database_error,
)
from resources.substrates.database.health import probe
from resources.substrates.database.statements import StatementCache, normalize_sql

__all__ = [
    "DatabaseConnectionError",
    "DatabaseError",
    "QueryError",
    "StatementCache",
    "backend_name",
    "create_database_engine",
    "normalize_database_error",
    "normalize_sql",
    "probe",
    "shares_one_connection",
]
