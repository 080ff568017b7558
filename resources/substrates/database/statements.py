"""Prepared statement cache keyed by normalized query text."""

from __future__ import annotations

import threading
from typing import Callable

from sqlalchemy import Executable, TextClause, text

StatementBuilder = Callable[[TextClause], Executable]


def normalize_sql(sql: str) -> str:
    """Collapse whitespace so formatting differences share one entry."""
    return " ".join(sql.split())


class StatementCache:
    """Compile each distinct query text once and reuse it.

    Entries are never evicted; ``clear`` drops them all. The first writer of
    a given query text wins when callers race.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._statements: dict[str, Executable] = {}

    def get(self, sql: str, build: StatementBuilder | None = None) -> Executable:
        """Return the cached clause for ``sql``, compiling it on first use.

        ``build`` decorates a fresh clause with typed bind parameters and
        result columns before it is cached.
        """
        key = normalize_sql(sql)
        with self._lock:
            cached = self._statements.get(key)
            if cached is not None:
                return cached
            statement = text(key)
            if build is not None:
                statement = build(statement)
            self._statements[key] = statement
            return statement

    def clear(self) -> None:
        """Drop every cached statement."""
        with self._lock:
            self._statements.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._statements)

    def __contains__(self, sql: object) -> bool:
        if not isinstance(sql, str):
            return False
        with self._lock:
            return normalize_sql(sql) in self._statements
