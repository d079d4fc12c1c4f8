"""Public interface for the database package.

This module exposes the main primitives needed by the rest of the
project: the connection session, query execution into result handles,
table helpers, and the error taxonomy.
"""

from .connection import (
    Session,
    build_connection_string,
    open_session,
    query_timeout,
    quote_connection_value,
)
from .errors import (
    ColumnNotFoundError,
    DatabaseError,
    DriverError,
    ErrorKind,
    ExportError,
    InvalidArgumentError,
    InvalidStatementError,
    NotConnectedError,
    from_driver_error,
)
from .outcome import Outcome
from .queries import execute_non_query, is_select_statement, query_to_cursor, query_to_table
from .results import Column, CursorResult, TabularResult, to_text
from .tables import drop_table, exec_system_command, system_command_sql, table_exists

__all__ = [
    "Session",
    "open_session",
    "build_connection_string",
    "quote_connection_value",
    "query_timeout",
    "ErrorKind",
    "DatabaseError",
    "NotConnectedError",
    "InvalidStatementError",
    "InvalidArgumentError",
    "ColumnNotFoundError",
    "DriverError",
    "ExportError",
    "from_driver_error",
    "Outcome",
    "is_select_statement",
    "query_to_table",
    "query_to_cursor",
    "execute_non_query",
    "Column",
    "TabularResult",
    "CursorResult",
    "to_text",
    "table_exists",
    "drop_table",
    "exec_system_command",
    "system_command_sql",
]
