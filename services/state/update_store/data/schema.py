"""SQLAlchemy table definitions owned by the update store."""

from __future__ import annotations

from sqlalchemy import (
    Column,
    DateTime,
    Index,
    Integer,
    MetaData,
    PrimaryKeyConstraint,
    String,
    Table,
    Text,
)

metadata = MetaData()

accounts_modules = Table(
    "accounts_modules",
    metadata,
    Column("module_name", Text, nullable=False),
    Column("account_id", Text, nullable=False),
    PrimaryKeyConstraint("module_name", "account_id", name="pk_accounts_modules"),
)

events = Table(
    "events",
    metadata,
    Column("event_id", String(36), primary_key=True),
    Column("phase", Text, nullable=False),
    Column("started_at", DateTime(timezone=True), nullable=False),
    Column("exit", Integer, nullable=False),
    Column("exception", Text, nullable=True),
    Column("ended_at", DateTime(timezone=True), nullable=False),
    Column("machine_id", Text, nullable=False),
    Column("core_version", Text, nullable=False),
    Column("core_path", Text, nullable=True),
    Index("ix_events_started_at", "started_at"),
)
