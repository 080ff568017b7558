"""SQL implementation of the update store over cached text statements."""

from __future__ import annotations

import threading
import uuid
from contextlib import AbstractContextManager, contextmanager, nullcontext
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Iterator, Mapping

from sqlalchemy import (
    Connection,
    DateTime,
    Engine,
    Executable,
    Integer,
    String,
    Text,
    TextClause,
    bindparam,
)

from packages.router_shared.config import DatabaseSettings
from packages.router_shared.logging import get_logger
from resources.substrates.database import (
    DatabaseConnectionError,
    QueryError,
    StatementCache,
    create_database_engine,
    probe,
    shares_one_connection,
)
from resources.substrates.database.statements import StatementBuilder
from services.state.update_store.data.migrator import MigrationRunResult, run_migrations
from services.state.update_store.domain import EventRecord
from services.state.update_store.service import UpdateStore

_LOGGER = get_logger(__name__)

_COUNT_SQL = """
    SELECT COUNT(*) AS membership_count
    FROM accounts_modules
    WHERE module_name = :module_name AND account_id = :account_id
"""

_INSERT_MEMBERSHIP_SQL = """
    INSERT INTO accounts_modules (module_name, account_id)
    VALUES (:module_name, :account_id)
    ON CONFLICT (module_name, account_id) DO NOTHING
"""

_INSERT_EVENT_SQL = """
    INSERT INTO events (
        event_id, phase, started_at, exit, exception,
        ended_at, machine_id, core_version, core_path
    )
    VALUES (
        :event_id, :phase, :started_at, :exit, :exception,
        :ended_at, :machine_id, :core_version, :core_path
    )
"""

_SELECT_EVENTS_SQL = """
    SELECT event_id, phase, started_at, exit, exception,
           ended_at, machine_id, core_version, core_path
    FROM events
    ORDER BY started_at, event_id
"""

_DELETE_EVENTS_SQL = "DELETE FROM events WHERE started_at < :cutoff"

# Dialect spelling of "no row limit" so OFFSET can still be bound.
_UNBOUNDED_LIMIT = {"sqlite": "LIMIT -1", "postgresql": "LIMIT ALL"}

_EVENT_COLUMNS = {
    "event_id": String(),
    "phase": Text(),
    "started_at": DateTime(timezone=True),
    "exit": Integer(),
    "exception": Text(),
    "ended_at": DateTime(timezone=True),
    "machine_id": Text(),
    "core_version": Text(),
    "core_path": Text(),
}


def _as_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _require_int(name: str, value: object) -> int:
    """Reject non-integers, including bools, for paging arguments."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer")
    return value


def _event_page_builder(*, bounded: bool) -> StatementBuilder:
    """Return a builder attaching typed paging binds and event columns."""

    def build(clause: TextClause) -> Executable:
        binds = [bindparam("offset", type_=Integer())]
        if bounded:
            binds.append(bindparam("limit", type_=Integer()))
        return clause.bindparams(*binds).columns(**_EVENT_COLUMNS)

    return build


def _event_from_row(row: Mapping[str, Any]) -> EventRecord:
    """Map one result row onto the domain model."""
    return EventRecord(
        event_id=str(row["event_id"]),
        phase=row["phase"],
        started_at=_as_utc(row["started_at"]),
        exit=int(row["exit"]),
        exception=row["exception"],
        ended_at=_as_utc(row["ended_at"]),
        machine_id=row["machine_id"],
        core_version=row["core_version"],
        core_path=row["core_path"],
    )


class SqlUpdateStore(UpdateStore):
    """Update store over one SQLAlchemy engine and a statement cache.

    Engines that hand every thread the same DBAPI connection (in-memory
    SQLite) get one lock around each unit of work so transactions from the
    request threadpool and the retention sweeper never interleave.
    """

    def __init__(
        self, *, engine: Engine, statements: StatementCache | None = None
    ) -> None:
        self._engine = engine
        self._statements = statements or StatementCache()
        self._dialect = engine.dialect.name
        self._guard: AbstractContextManager[Any] = (
            threading.RLock() if shares_one_connection(engine) else nullcontext()
        )

    @classmethod
    def open(cls, settings: DatabaseSettings) -> "SqlUpdateStore":
        """Build the engine and verify connectivity before returning."""
        try:
            engine = create_database_engine(settings)
        except Exception as exc:
            raise DatabaseConnectionError(f"database engine setup failed: {exc}") from exc

        try:
            probe(engine, timeout_seconds=settings.health_timeout_seconds)
        except Exception as exc:
            engine.dispose()
            raise DatabaseConnectionError(f"database ping failed: {exc}") from exc

        _LOGGER.info("database opened", extra={"dialect": engine.dialect.name})
        return cls(engine=engine)

    @property
    def engine(self) -> Engine:
        """Return the underlying engine."""
        return self._engine

    @property
    def statements(self) -> StatementCache:
        """Return the prepared statement cache."""
        return self._statements

    def migrate(self, *, reset: bool = False) -> MigrationRunResult:
        """Apply pending schema migrations, optionally from an empty schema."""
        with self._guard:
            return run_migrations(self._engine, reset=reset)

    def seed(self, path: Path) -> None:
        """Execute one raw SQL script; driver errors are not wrapped."""
        script = Path(path).read_text(encoding="utf-8")
        if self._dialect == "sqlite":
            with self._guard:
                raw = self._engine.raw_connection()
                try:
                    raw.driver_connection.executescript(script)
                    raw.commit()
                finally:
                    raw.close()
        else:
            with self._begin() as conn:
                conn.exec_driver_sql(script)
        _LOGGER.info("database seeded", extra={"seed_path": str(path)})

    def count(self, module_name: str, account_id: str) -> int:
        statement = self._statement(
            _COUNT_SQL,
            lambda clause: clause.columns(membership_count=Integer()),
        )
        try:
            with self._connect() as conn:
                value = conn.execute(
                    statement,
                    {"module_name": module_name, "account_id": account_id},
                ).scalar_one()
        except Exception as exc:
            raise QueryError("count memberships", exc) from exc
        return int(value)

    def insert_membership(self, module_name: str, account_id: str) -> None:
        statement = self._statement(_INSERT_MEMBERSHIP_SQL)
        try:
            with self._begin() as conn:
                conn.execute(
                    statement,
                    {"module_name": module_name, "account_id": account_id},
                )
        except Exception as exc:
            raise QueryError("insert membership", exc) from exc

    def insert_event(
        self,
        *,
        phase: str,
        started_at: datetime,
        exit: int,
        exception: str | None,
        ended_at: datetime,
        machine_id: str,
        core_version: str,
        core_path: str | None,
    ) -> None:
        statement = self._statement(
            _INSERT_EVENT_SQL,
            lambda clause: clause.bindparams(
                bindparam("started_at", type_=DateTime(timezone=True)),
                bindparam("ended_at", type_=DateTime(timezone=True)),
                bindparam("exit", type_=Integer()),
            ),
        )
        params = {
            "event_id": str(uuid.uuid4()),
            "phase": phase,
            "started_at": _as_utc(started_at),
            "exit": exit,
            "exception": exception or None,
            "ended_at": _as_utc(ended_at),
            "machine_id": machine_id,
            "core_version": core_version,
            "core_path": core_path,
        }
        try:
            with self._begin() as conn:
                conn.execute(statement, params)
        except Exception as exc:
            raise QueryError("insert event", exc) from exc

    def list_events(self, limit: int, offset: int = 0) -> list[EventRecord]:
        limit = _require_int("limit", limit)
        offset = _require_int("offset", offset)
        if offset < 0:
            raise ValueError("offset must be >= 0")
        if limit == 0:
            return []

        params: dict[str, int] = {"offset": offset}
        if limit < 0:
            unbounded = _UNBOUNDED_LIMIT.get(self._dialect, "LIMIT -1")
            sql = f"{_SELECT_EVENTS_SQL} {unbounded} OFFSET :offset"
        else:
            sql = f"{_SELECT_EVENTS_SQL} LIMIT :limit OFFSET :offset"
            params["limit"] = limit

        statement = self._statement(sql, _event_page_builder(bounded=limit > 0))
        try:
            with self._connect() as conn:
                rows = conn.execute(statement, params).mappings().all()
        except Exception as exc:
            raise QueryError("list events", exc) from exc
        return [_event_from_row(row) for row in rows]

    def delete_events_older_than(self, cutoff: datetime) -> int:
        statement = self._statement(
            _DELETE_EVENTS_SQL,
            lambda clause: clause.bindparams(
                bindparam("cutoff", type_=DateTime(timezone=True))
            ),
        )
        try:
            with self._begin() as conn:
                result = conn.execute(statement, {"cutoff": _as_utc(cutoff)})
                deleted = int(result.rowcount)
        except Exception as exc:
            raise QueryError("delete events", exc) from exc
        return deleted

    def close(self) -> None:
        self._statements.clear()
        with self._guard:
            self._engine.dispose()
        _LOGGER.info("database closed")

    @contextmanager
    def _begin(self) -> Iterator[Connection]:
        """Open one transaction, holding the guard until it ends."""
        with self._guard, self._engine.begin() as conn:
            yield conn

    @contextmanager
    def _connect(self) -> Iterator[Connection]:
        """Check out one connection, holding the guard until it returns."""
        with self._guard, self._engine.connect() as conn:
            yield conn

    def _statement(
        self, sql: str, build: StatementBuilder | None = None
    ) -> Executable:
        """Return the cached statement for one query text."""
        return self._statements.get(sql, build)
