"""Connectivity probe for the relational store."""

from __future__ import annotations

from sqlalchemy import Engine, text


def probe(engine: Engine, *, timeout_seconds: float = 1.0) -> None:
    """Run a trivial query; raise whatever the driver raises on failure."""
    with engine.connect() as conn:
        if engine.dialect.name == "postgresql":
            timeout_ms = max(1, int(timeout_seconds * 1000))
            conn.execute(
                text("SELECT set_config('statement_timeout', :timeout_value, false)"),
                {"timeout_value": f"{timeout_ms}ms"},
            )
        conn.execute(text("SELECT 1"))
