from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from typing import Iterator, Optional

from db import schema
from db.repos.companies_repo import CompaniesRepo
from db.repos.employees_repo import EmployeesRepo
from db.repos.job_history_repo import JobHistoryRepo


def get_connection(db_path: str, timeout: Optional[float] = 30.0) -> sqlite3.Connection:
    """Open a SQLite connection with sane pragmas for local use.

    - autocommit mode; multi-statement writes go through Store.transaction()
    - WAL journal for fewer writer blocks
    - NORMAL synchronous for performance
    - foreign_keys ON to enforce integrity
    - rows addressable by column name
    """
    conn = sqlite3.connect(db_path, timeout=timeout or 30.0, isolation_level=None)
    conn.row_factory = sqlite3.Row
    # Pragmas
    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA synchronous=NORMAL;")
    conn.execute("PRAGMA foreign_keys=ON;")
    return conn


class Store:
    """Explicitly constructed handle on the employee database.

    Components receive a Store instead of reaching for a global connection.
    ``open()`` connects and bootstraps the schema; ``close()`` releases it.
    """

    def __init__(self, db_path: str, timeout: Optional[float] = 30.0) -> None:
        self.db_path = db_path
        self.timeout = timeout
        self._conn: Optional[sqlite3.Connection] = None

    def open(self) -> "Store":
        if self._conn is None:
            self._conn = get_connection(self.db_path, self.timeout)
            schema.bootstrap(self._conn)
        return self

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("Store is not open; call open() first")
        return self._conn

    @property
    def companies(self) -> CompaniesRepo:
        return CompaniesRepo(self.conn)

    @property
    def employees(self) -> EmployeesRepo:
        return EmployeesRepo(self.conn)

    @property
    def job_history(self) -> JobHistoryRepo:
        return JobHistoryRepo(self.conn)

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Run a block atomically; joins an enclosing transaction if one is active."""
        conn = self.conn
        if conn.in_transaction:
            yield conn
            return
        conn.execute("BEGIN IMMEDIATE")
        try:
            yield conn
        except BaseException:
            conn.execute("ROLLBACK")
            raise
        conn.execute("COMMIT")

    def __enter__(self) -> "Store":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
