"""Update store native package exports.

Owns membership and event persistence for the router. The SQL
implementation lives in ``data.repository`` and is built through
``open_update_store``.
"""

from services.state.update_store.data.migrator import (
    MigrationExecutionError,
    MigrationRunResult,
)
from services.state.update_store.domain import EventRecord
from services.state.update_store.service import UpdateStore, open_update_store

__all__ = [
    "EventRecord",
    "MigrationExecutionError",
    "MigrationRunResult",
    "UpdateStore",
    "open_update_store",
]
