"""SQLAlchemy engine construction for the relational store."""

from __future__ import annotations

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.pool import StaticPool

from packages.router_shared.config import DatabaseSettings

SUPPORTED_BACKENDS = frozenset({"sqlite", "postgresql"})


def backend_name(url: str) -> str:
    """Return the dialect backend name for one SQLAlchemy URL."""
    return make_url(url).get_backend_name()


def create_database_engine(settings: DatabaseSettings) -> Engine:
    """Construct a configured engine for SQLite or PostgreSQL.

    In-memory SQLite shares one connection across threads so every caller
    sees the same database.
    """
    url = settings.resolved_url()
    backend = backend_name(url)
    if backend not in SUPPORTED_BACKENDS:
        raise ValueError(f"unsupported database backend: {backend}")

    if backend == "sqlite":
        database = make_url(url).database
        if database in (None, "", ":memory:"):
            return create_engine(
                url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        return create_engine(url, connect_args={"check_same_thread": False})

    return create_engine(
        url,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        pool_timeout=settings.pool_timeout_seconds,
        pool_pre_ping=True,
        connect_args={"connect_timeout": int(settings.connect_timeout_seconds)},
    )


def shares_one_connection(engine: Engine) -> bool:
    """Return True when every checkout hands back the same DBAPI connection."""
    return isinstance(engine.pool, StaticPool)
