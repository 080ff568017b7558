"""Alembic-driven schema migration for the update store."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy import Connection, Engine, MetaData

from packages.router_shared.logging import get_logger

MIGRATIONS_DIR = Path(__file__).resolve().parent.parent / "migrations"

_LOGGER = get_logger(__name__)


class MigrationExecutionError(RuntimeError):
    """Raised when schema migration fails."""


@dataclass(frozen=True, slots=True)
class MigrationRunResult:
    """Summary of one migration pass.

    ``applied`` is empty when the schema was already at head.
    """

    reset: bool
    starting_revision: str | None
    applied: tuple[str, ...]


def build_alembic_config(connection: Connection | None = None) -> Config:
    """Build an in-memory Alembic config pointing at this store's scripts."""
    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_DIR))
    if connection is not None:
        config.attributes["connection"] = connection
    return config


def pending_revisions(script: ScriptDirectory, current: str | None) -> tuple[str, ...]:
    """Return revisions after ``current`` up to head, oldest first."""
    chain: list[str] = []
    for revision in script.walk_revisions():
        if revision.revision == current:
            break
        chain.append(revision.revision)
    return tuple(reversed(chain))


def drop_all(connection: Connection) -> tuple[str, ...]:
    """Drop every reflected table, including Alembic's version table."""
    reflected = MetaData()
    reflected.reflect(bind=connection)
    names = tuple(table.name for table in reflected.sorted_tables)
    reflected.drop_all(bind=connection)
    return names


def run_migrations(
    engine: Engine,
    *,
    reset: bool = False,
    upgrade_fn: Callable[[Config, str], None] = command.upgrade,
) -> MigrationRunResult:
    """Apply pending revisions in order, optionally dropping everything first."""
    try:
        with engine.begin() as connection:
            if reset:
                dropped = drop_all(connection)
                _LOGGER.warning("database reset", extra={"dropped_tables": dropped})

            config = build_alembic_config(connection)
            script = ScriptDirectory.from_config(config)
            current = MigrationContext.configure(connection).get_current_revision()
            pending = pending_revisions(script, current)
            if pending:
                upgrade_fn(config, "head")
    except Exception as exc:
        raise MigrationExecutionError(f"schema migration failed: {exc}") from exc

    if pending:
        _LOGGER.info(
            "migrations applied",
            extra={"from_revision": current, "applied": pending},
        )
    else:
        _LOGGER.info("no pending migrations", extra={"revision": current})
    return MigrationRunResult(reset=reset, starting_revision=current, applied=pending)
