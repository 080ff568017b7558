"""Behavior tests for the SQL update store over in-memory SQLite."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone
import sqlite3
import threading
from pathlib import Path

import pytest
from sqlalchemy import inspect

from packages.router_shared.config import DatabaseSettings
from resources.substrates.database import DatabaseConnectionError, QueryError
from services.state.update_store import open_update_store
from services.state.update_store.data.repository import SqlUpdateStore

_BASE = datetime(2021, 1, 1, tzinfo=UTC)


def _insert(store: SqlUpdateStore, *, offset_minutes: int, **overrides: object) -> None:
    """Insert one event starting ``offset_minutes`` after the base time."""
    started = _BASE + timedelta(minutes=offset_minutes)
    values: dict[str, object] = {
        "phase": "pre_update",
        "started_at": started,
        "exit": 0,
        "exception": None,
        "ended_at": started + timedelta(seconds=5),
        "machine_id": f"machine-{offset_minutes}",
        "core_version": "3.0.156",
        "core_path": "/var/lib/insights/last_stable.egg",
    }
    values.update(overrides)
    store.insert_event(**values)


def test_migrate_applies_head_once_then_reports_nothing_pending() -> None:
    """Second migration pass should succeed with an empty applied tuple."""
    store = SqlUpdateStore.open(DatabaseSettings(url="sqlite://"))
    try:
        first = store.migrate()
        second = store.migrate()
    finally:
        store.close()

    assert first.applied == ("20260101_0001",)
    assert first.starting_revision is None
    assert second.applied == ()
    assert second.starting_revision == "20260101_0001"


def test_migrate_with_reset_drops_existing_rows(sqlite_store: SqlUpdateStore) -> None:
    """Reset should drop every table and rebuild the schema from scratch."""
    sqlite_store.insert_membership("insights-core", "540155")

    result = sqlite_store.migrate(reset=True)

    assert result.reset is True
    assert result.applied == ("20260101_0001",)
    assert sqlite_store.count("insights-core", "540155") == 0
    tables = set(inspect(sqlite_store.engine).get_table_names())
    assert {"accounts_modules", "events", "alembic_version"} <= tables


def test_count_reflects_membership_rows(sqlite_store: SqlUpdateStore) -> None:
    """Count should be zero for unknown pairs and one after insert."""
    assert sqlite_store.count("insights-core", "540155") == 0

    sqlite_store.insert_membership("insights-core", "540155")

    assert sqlite_store.count("insights-core", "540155") == 1
    assert sqlite_store.count("insights-core", "540156") == 0
    assert sqlite_store.count("other-module", "540155") == 0


def test_insert_membership_is_idempotent(sqlite_store: SqlUpdateStore) -> None:
    """Duplicate membership inserts should be silent no-ops."""
    sqlite_store.insert_membership("insights-core", "540155")
    sqlite_store.insert_membership("insights-core", "540155")

    assert sqlite_store.count("insights-core", "540155") == 1


def test_list_events_orders_by_start_time(sqlite_store: SqlUpdateStore) -> None:
    """Events should come back in ascending started_at order."""
    for minutes in (30, 10, 20):
        _insert(sqlite_store, offset_minutes=minutes)

    events = sqlite_store.list_events(-1)

    assert [event.machine_id for event in events] == [
        "machine-10",
        "machine-20",
        "machine-30",
    ]
    assert all(event.started_at.tzinfo is not None for event in events)
    assert events[0].started_at == _BASE + timedelta(minutes=10)


def test_list_events_limit_and_offset_windows(sqlite_store: SqlUpdateStore) -> None:
    """Zero limit is empty, negative is everything, positive is a window."""
    for minutes in range(5):
        _insert(sqlite_store, offset_minutes=minutes)

    assert sqlite_store.list_events(0) == []
    assert len(sqlite_store.list_events(-1)) == 5
    window = sqlite_store.list_events(2, offset=1)
    assert [event.machine_id for event in window] == ["machine-1", "machine-2"]
    assert [e.machine_id for e in sqlite_store.list_events(-1, offset=3)] == [
        "machine-3",
        "machine-4",
    ]
    assert sqlite_store.list_events(10, offset=10) == []


def test_list_events_rejects_invalid_paging(sqlite_store: SqlUpdateStore) -> None:
    """Negative offsets and non-integer values should be refused."""
    with pytest.raises(ValueError, match="offset"):
        sqlite_store.list_events(1, offset=-1)
    with pytest.raises(ValueError, match="limit"):
        sqlite_store.list_events("1")  # type: ignore[arg-type]
    with pytest.raises(ValueError, match="limit"):
        sqlite_store.list_events(True)  # type: ignore[arg-type]


def test_insert_event_normalizes_to_utc_and_omits_nulls(
    sqlite_store: SqlUpdateStore,
) -> None:
    """Offset timestamps should round-trip as UTC and null fields drop out."""
    eastern = timezone(timedelta(hours=-5))
    sqlite_store.insert_event(
        phase="post_update",
        started_at=datetime(2021, 1, 1, 7, 0, tzinfo=eastern),
        exit=1,
        exception="",
        ended_at=datetime(2021, 1, 1, 7, 1, tzinfo=eastern),
        machine_id="m",
        core_version="3.0.1",
        core_path=None,
    )

    [event] = sqlite_store.list_events(-1)
    body = event.to_json()

    assert event.started_at == datetime(2021, 1, 1, 12, 0, tzinfo=UTC)
    assert event.exception is None
    assert "exception" not in body
    assert "core_path" not in body
    assert body["exit"] == 1
    assert len(body["event_id"]) == 36


def test_event_ids_are_unique(sqlite_store: SqlUpdateStore) -> None:
    """Each insert should get its own generated id."""
    _insert(sqlite_store, offset_minutes=0)
    _insert(sqlite_store, offset_minutes=0)

    ids = {event.event_id for event in sqlite_store.list_events(-1)}

    assert len(ids) == 2


def test_delete_events_older_than_is_strict(sqlite_store: SqlUpdateStore) -> None:
    """Rows exactly at the cutoff should survive deletion."""
    for minutes in (0, 10, 20):
        _insert(sqlite_store, offset_minutes=minutes)

    deleted = sqlite_store.delete_events_older_than(_BASE + timedelta(minutes=10))

    assert deleted == 1
    remaining = [event.machine_id for event in sqlite_store.list_events(-1)]
    assert remaining == ["machine-10", "machine-20"]
    assert sqlite_store.delete_events_older_than(_BASE) == 0


def test_statements_are_cached_per_query_text(sqlite_store: SqlUpdateStore) -> None:
    """Repeated calls should reuse cached statements; close clears them."""
    sqlite_store.count("a", "b")
    cached = len(sqlite_store.statements)
    sqlite_store.count("c", "d")

    assert len(sqlite_store.statements) == cached
    sqlite_store.list_events(5)
    sqlite_store.list_events(-1)
    assert len(sqlite_store.statements) == cached + 2

    sqlite_store.close()
    assert len(sqlite_store.statements) == 0


def test_seed_executes_sql_script(sqlite_store: SqlUpdateStore, tmp_path: Path) -> None:
    """Seed should run every statement in the script."""
    seed = tmp_path / "seed.sql"
    seed.write_text(
        "INSERT INTO accounts_modules (module_name, account_id) "
        "VALUES ('insights-core', '540155');\n"
        "INSERT INTO accounts_modules (module_name, account_id) "
        "VALUES ('insights-core', '000001');\n",
        encoding="utf-8",
    )

    sqlite_store.seed(seed)

    assert sqlite_store.count("insights-core", "540155") == 1
    assert sqlite_store.count("insights-core", "000001") == 1


def test_seed_surfaces_driver_errors(
    sqlite_store: SqlUpdateStore, tmp_path: Path
) -> None:
    """Invalid SQL should raise the driver's own error."""
    seed = tmp_path / "bad.sql"
    seed.write_text("INSERT INTO nowhere VALUES (1);", encoding="utf-8")

    with pytest.raises(sqlite3.OperationalError):
        sqlite_store.seed(seed)


def test_queries_against_missing_schema_raise_query_error() -> None:
    """Statement failures should be wrapped in QueryError."""
    store = SqlUpdateStore.open(DatabaseSettings(url="sqlite://"))
    try:
        with pytest.raises(QueryError, match="count memberships"):
            store.count("insights-core", "540155")
        with pytest.raises(QueryError):
            store.delete_events_older_than(_BASE)
    finally:
        store.close()


def test_open_raises_connection_error_for_unreachable_database(
    tmp_path: Path,
) -> None:
    """Open should fail fast with DatabaseConnectionError."""
    missing = tmp_path / "missing-dir" / "router.db"
    settings = DatabaseSettings(url=f"sqlite:///{missing}")

    with pytest.raises(DatabaseConnectionError) as excinfo:
        open_update_store(settings)

    assert isinstance(excinfo.value, ConnectionError)


def test_open_rejects_unsupported_backend() -> None:
    """Unsupported URLs should surface as connection errors."""
    with pytest.raises(DatabaseConnectionError, match="unsupported database backend"):
        open_update_store(DatabaseSettings(url="mysql://user@localhost/db"))


def test_concurrent_writers_and_readers_share_in_memory_store(
    sqlite_store: SqlUpdateStore,
) -> None:
    """Parallel inserts, counts and deletes should neither fail nor lose rows."""
    writers, per_writer = 4, 50
    errors: list[BaseException] = []
    acknowledged: list[int] = []
    lock = threading.Lock()
    barrier = threading.Barrier(writers + 3)

    def write(index: int) -> None:
        barrier.wait()
        for offset in range(per_writer):
            try:
                _insert(
                    sqlite_store,
                    offset_minutes=offset,
                    machine_id=f"w{index}-{offset}",
                )
            except BaseException as exc:  # noqa: BLE001
                with lock:
                    errors.append(exc)
            else:
                with lock:
                    acknowledged.append(1)

    def read() -> None:
        barrier.wait()
        for _ in range(per_writer):
            try:
                sqlite_store.count("insights-core", "540155")
                sqlite_store.list_events(5)
            except BaseException as exc:  # noqa: BLE001
                with lock:
                    errors.append(exc)

    def sweep() -> None:
        barrier.wait()
        for _ in range(per_writer):
            try:
                sqlite_store.delete_events_older_than(_BASE - timedelta(days=1))
            except BaseException as exc:  # noqa: BLE001
                with lock:
                    errors.append(exc)

    threads = [threading.Thread(target=write, args=(i,)) for i in range(writers)]
    threads += [threading.Thread(target=read) for _ in range(2)]
    threads.append(threading.Thread(target=sweep))
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)

    assert errors == []
    assert len(acknowledged) == writers * per_writer
    assert len(sqlite_store.list_events(-1)) == writers * per_writer
