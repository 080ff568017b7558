"""Update store data-access primitives: schema, migrations, SQL store."""

from services.state.update_store.data.migrator import (
    MIGRATIONS_DIR,
    MigrationExecutionError,
    MigrationRunResult,
    run_migrations,
)
from services.state.update_store.data.schema import accounts_modules, events, metadata

__all__ = [
    "MIGRATIONS_DIR",
    "MigrationExecutionError",
    "MigrationRunResult",
    "accounts_modules",
    "events",
    "metadata",
    "run_migrations",
]
