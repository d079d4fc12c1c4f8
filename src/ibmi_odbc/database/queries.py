"""Query execution helpers.

These wrap DB-API cursor operations with the SELECT gate, per-call
timeouts, logging and the typed result handles from `results`. Every
cursor opened here is closed before returning, except the one handed to
the caller inside a `CursorResult`.
"""

from __future__ import annotations

import contextlib
import logging
from typing import Any

from .. import global_config as g
from .connection import Session, query_timeout
from .errors import InvalidStatementError, from_driver_error
from .results import CursorResult, TabularResult, columns_from_description

logger = logging.getLogger(__name__)


def is_select_statement(sql: str) -> bool:
    """True if the text starts with SELECT (case-insensitive).

    A plain prefix check: leading whitespace or comments defeat it.
    """
    return sql.upper().startswith("SELECT")


def _require_select(sql: str) -> None:
    if not is_select_statement(sql):
        raise InvalidStatementError("Only SELECT queries can be run.")


def _fetch_range(cursor: Any, offset: int, limit: int) -> list[tuple[Any, ...]]:
    """Fetch rows, skipping ``offset`` rows and keeping at most ``limit``.

    ``limit=0`` keeps every row after the offset.
    """
    if offset == 0 and limit == 0:
        return [tuple(row) for row in cursor.fetchall()]

    skipped = 0
    while skipped < offset:
        if cursor.fetchone() is None:
            return []
        skipped += 1

    rows = cursor.fetchall() if limit == 0 else cursor.fetchmany(limit)
    return [tuple(row) for row in rows]


def query_to_table(
    session: Session,
    sql: str,
    *,
    offset: int = 0,
    limit: int = 0,
    timeout: int = g.DEFAULT_TIMEOUT,
    table_name: str = g.DEFAULT_TABLE_NAME,
) -> TabularResult:
    """Run a SELECT and buffer its rows into a TabularResult.

    Args:
        session: Open session.
        sql: SELECT statement text.
        offset: Rows to skip before buffering.
        limit: Maximum rows to buffer; 0 buffers all remaining rows.
        timeout: Query timeout in seconds (-1 driver default, 0 none).
        table_name: Name given to the result (used by the XML export).

    Returns:
        The buffered result.

    Raises:
        NotConnectedError: If the session is not open.
        InvalidStatementError: If the text is not a SELECT.
        DatabaseError: If the driver fails.

    Logs:
        - DEBUG: "Executed query: {sql[:80]}" on success.
        - DEBUG: "Buffered {rows} rows x {columns} columns".
    """
    conn = session.require_connection()
    _require_select(sql)
    session.last_sql = sql

    try:
        with query_timeout(conn, timeout), contextlib.closing(conn.cursor()) as cursor:
            cursor.execute(sql)
            logger.debug("Executed query: %s", sql[:80])
            rows = _fetch_range(cursor, offset, limit)
            columns = columns_from_description(cursor.description, rows[0] if rows else None)
    except Exception as exc:
        raise from_driver_error(exc) from exc

    result = TabularResult(columns=columns, rows=rows, name=table_name)
    logger.debug("Buffered %s rows x %s columns", result.row_count, result.column_count)
    return result


def query_to_cursor(
    session: Session,
    sql: str,
    *,
    timeout: int = g.DEFAULT_TIMEOUT,
) -> CursorResult:
    """Run a SELECT and return a forward-only cursor over its rows.

    The caller owns the returned handle and must close it (or use it as a
    context manager). On failure the cursor is closed before raising.

    Raises:
        NotConnectedError: If the session is not open.
        InvalidStatementError: If the text is not a SELECT.
        DatabaseError: If the driver fails.
    """
    conn = session.require_connection()
    _require_select(sql)
    session.last_sql = sql

    cursor = None
    try:
        with query_timeout(conn, timeout):
            cursor = conn.cursor()
            cursor.execute(sql)
        logger.debug("Opened cursor for query: %s", sql[:80])
        return CursorResult(cursor, sql=sql)
    except Exception as exc:
        if cursor is not None:
            cursor.close()
        raise from_driver_error(exc) from exc


def execute_non_query(
    session: Session,
    sql: str,
    *,
    timeout: int = g.DEFAULT_TIMEOUT,
    allow_select: bool = False,
) -> int:
    """Run INSERT/UPDATE/DELETE/DDL or other text and return affected rows.

    SELECT text is rejected before the driver is contacted unless
    ``allow_select`` is set.

    Returns:
        The row count reported by the driver (-1 when it reports none).

    Logs:
        - DEBUG: "Statement affected {rowcount} rows" on success.
    """
    conn = session.require_connection()
    if not allow_select and is_select_statement(sql):
        raise InvalidStatementError("SELECT queries are not allowed here.")
    session.last_sql = sql

    try:
        with query_timeout(conn, timeout), contextlib.closing(conn.cursor()) as cursor:
            cursor.execute(sql)
            rowcount = cursor.rowcount
    except Exception as exc:
        raise from_driver_error(exc) from exc

    logger.debug("Statement affected %s rows", rowcount)
    return rowcount
