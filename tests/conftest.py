from __future__ import annotations

import sqlite3
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import Any

import pytest

from ibmi_odbc import OdbcDataAccess
from ibmi_odbc.database import Session


@pytest.fixture(autouse=True)
def app_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """
    Hides any real IBM i connection settings from the host environment.
    Automatically applied to all tests.
    """
    for name in (
        "IBMI_CONNECTION_STRING",
        "IBMI_SYSTEM",
        "IBMI_USER",
        "IBMI_PASSWORD",
        "IBMI_QUERY_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """
    A dedicated temp root directory for each test.
    All filesystem writes in tests should be under this root (or tmp_path directly).
    """
    root = tmp_path / "proj"
    (root / "config").mkdir(parents=True)
    (root / "exports").mkdir(parents=True)
    (root / "data" / "out").mkdir(parents=True)
    return root


@pytest.fixture(autouse=True)
def chdir_to_project_root(project_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """
    Automatically change working directory to project_root for all tests.
    This ensures relative-path operations go into the temp directory by default.
    """
    monkeypatch.chdir(project_root)


@pytest.fixture
def sqlite_path(project_root: Path) -> Path:
    """
    On-disk SQLite DB under the temp project root (more realistic than :memory:).
    """
    return project_root / "data" / "out" / "test.sqlite"


@pytest.fixture
def db_conn(sqlite_path: Path, project_root: Path) -> Iterator[sqlite3.Connection]:
    """
    A SQLite connection that is always closed after each test.

    Safety enforcement:
    - Path assertion: DB must be under project_root (prevents touching real DBs)
    - busy_timeout: helps avoid flaky "database is locked" errors
    """
    try:
        sqlite_path.resolve().relative_to(project_root.resolve())
    except ValueError:
        raise AssertionError(
            f"SQLite path {sqlite_path} is not under project_root {project_root}. "
            "This prevents accidental writes to real databases."
        )

    conn = sqlite3.connect(sqlite_path)
    try:
        conn.execute("PRAGMA busy_timeout = 2000;")
        yield conn
    finally:
        conn.close()


@pytest.fixture
def customers_db(db_conn: sqlite3.Connection, sqlite_path: Path) -> Path:
    """
    SQLite database with a small CUSTOMERS table standing in for an IBM i file.
    """
    db_conn.execute("CREATE TABLE customers (ID INTEGER, NAME TEXT, NOTE TEXT);")
    db_conn.executemany(
        "INSERT INTO customers (ID, NAME, NOTE) VALUES (?, ?, ?);",
        [(1, "Smith", "first"), (2, "O'Brien", None), (3, "Jones", "line1\nline2")],
    )
    db_conn.commit()
    return sqlite_path


@pytest.fixture
def sqlite_connect(customers_db: Path) -> Any:
    """Connect factory that ignores the connection string and opens SQLite."""
    return lambda _connection_string: sqlite3.connect(customers_db)


@pytest.fixture
def sqlite_session(sqlite_connect: Any) -> Iterator[Session]:
    session = Session("DSN=TEST", connect=sqlite_connect)
    session.open()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sqlite_access(sqlite_connect: Any) -> Iterator[OdbcDataAccess]:
    access = OdbcDataAccess("DSN=TEST", connect=sqlite_connect)
    access.open().unwrap()
    try:
        yield access
    finally:
        access.close()


class FakeCursor:
    """DB-API cursor double driven by its FakeConnection's script."""

    def __init__(self, conn: FakeConnection) -> None:
        self.conn = conn
        self.description: list[tuple[Any, ...]] | None = None
        self.rowcount = -1
        self.closed = False
        self._rows: list[tuple[Any, ...]] = []

    def execute(self, sql: str) -> FakeCursor:
        self.conn.executed.append(sql)
        self.conn.timeouts_seen.append(self.conn.timeout)
        if self.conn.error is not None:
            raise self.conn.error
        self.description = [
            (name, type_code, None, None, None, None, True) for name, type_code in self.conn.columns
        ]
        self._rows = list(self.conn.rows)
        self.rowcount = self.conn.rowcount
        return self

    def fetchone(self) -> tuple[Any, ...] | None:
        return self._rows.pop(0) if self._rows else None

    def fetchmany(self, size: int) -> list[tuple[Any, ...]]:
        batch, self._rows = self._rows[:size], self._rows[size:]
        return batch

    def fetchall(self) -> list[tuple[Any, ...]]:
        rows, self._rows = self._rows, []
        return rows

    def close(self) -> None:
        self.closed = True


class FakeConnection:
    """pyodbc-like connection double.

    Set ``columns``/``rows``/``rowcount`` for the next statement, or
    ``error`` to make ``execute`` raise it.
    """

    def __init__(self) -> None:
        self.timeout = 0
        self.columns: Sequence[tuple[str, type]] = ()
        self.rows: Sequence[tuple[Any, ...]] = ()
        self.rowcount = 0
        self.error: Exception | None = None
        self.executed: list[str] = []
        self.timeouts_seen: list[int] = []
        self.cursors: list[FakeCursor] = []
        self.closed = False

    def cursor(self) -> FakeCursor:
        cursor = FakeCursor(self)
        self.cursors.append(cursor)
        return cursor

    def close(self) -> None:
        self.closed = True


class FakeDriver:
    """Connect factory handing out one FakeConnection and recording strings."""

    def __init__(self) -> None:
        self.connection = FakeConnection()
        self.connection_strings: list[str] = []
        self.error: Exception | None = None

    def connect(self, connection_string: str) -> FakeConnection:
        self.connection_strings.append(connection_string)
        if self.error is not None:
            raise self.error
        return self.connection


@pytest.fixture
def fake_driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture
def fake_conn(fake_driver: FakeDriver) -> FakeConnection:
    return fake_driver.connection


@pytest.fixture
def fake_session(fake_driver: FakeDriver) -> Iterator[Session]:
    session = Session("DSN=FAKE", connect=fake_driver.connect)
    session.open()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def fake_access(fake_driver: FakeDriver) -> Iterator[OdbcDataAccess]:
    access = OdbcDataAccess("DSN=FAKE", connect=fake_driver.connect)
    access.open().unwrap()
    try:
        yield access
    finally:
        access.close()
