"""Alembic environment for update store schema migrations.

The migrator passes its open connection through
``config.attributes["connection"]``; standalone runs fall back to the
configured database URL.
"""

from __future__ import annotations

from logging.config import fileConfig

from alembic import context
from sqlalchemy import Connection, engine_from_config, pool

from packages.router_shared.config import load_settings
from services.state.update_store.data.schema import metadata

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = metadata


def _configured_url() -> str:
    """Resolve the database URL from alembic config or router settings."""
    url = config.get_main_option("sqlalchemy.url")
    if url:
        return url
    return load_settings().database.resolved_url()


def run_migrations_offline() -> None:
    """Run migrations without a live DB connection."""
    context.configure(
        url=_configured_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def _run_with_connection(connection: Connection) -> None:
    """Run migrations on one already-open connection."""
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        render_as_batch=connection.dialect.name == "sqlite",
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations using a live DB connection."""
    shared = config.attributes.get("connection")
    if shared is not None:
        _run_with_connection(shared)
        return

    connectable = engine_from_config(
        {"sqlalchemy.url": _configured_url()},
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        _run_with_connection(connection)


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
