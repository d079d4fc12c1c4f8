"""Table introspection and DDL helpers for IBM i libraries.

These functions build their statements from schema (library) and table
names and run them through `queries`. Names are validated as plain system
identifiers before they are interpolated into SQL text.
"""

from __future__ import annotations

import logging
import re

from .connection import Session
from .errors import DriverError, InvalidArgumentError
from .queries import execute_non_query, query_to_table

logger = logging.getLogger(__name__)

# IBM i system names may also contain $, # and @
_IDENTIFIER = re.compile(r"^[A-Za-z_$#@][A-Za-z0-9_$#@]*$")

SYSTEM_COMMAND_LIBRARIES = ("QSYS", "QSYS2")


def _validate_identifier(name: str) -> str:
    """Validate an unquoted SQL identifier to prevent injection.

    Raises:
        InvalidArgumentError: If the name is blank or has unsafe characters.
    """
    stripped = name.strip() if name else ""
    if not _IDENTIFIER.match(stripped):
        raise InvalidArgumentError(f"Unsafe SQL identifier: {name!r}")
    return stripped


def qualified_name(schema: str, table: str) -> str:
    return f"{_validate_identifier(schema)}.{_validate_identifier(table)}"


def table_exists(session: Session, schema: str, table: str) -> bool:
    """Probe for a table by fetching at most one of its rows.

    A successful check means the table exists, even when it returned no
    rows. A driver error reporting an undefined object means it does not.

    Raises:
        DriverError: For any other driver failure (privileges, lost
            connection), so it is not mistaken for a missing table.

    Logs:
        - INFO: "Table {name} exists ({rows} rows checked)" or
          "Table {name} does not exist".
    """
    name = qualified_name(schema, table)
    sql = f"SELECT * FROM {name} FETCH FIRST 1 ROWS ONLY"  # noqa: S608

    try:
        check = query_to_table(session, sql)
    except DriverError as exc:
        if exc.is_undefined_object:
            session.status = f"Table {name} does not exist."
            logger.info("Table %s does not exist", name)
            return False
        raise

    if check.row_count > 0:
        session.status = f"{check.row_count} rows were returned. Table {name} exists."
    else:
        session.status = f"No rows were returned, but it appears table {name} exists."
    logger.info("Table %s exists (%s rows checked)", name, check.row_count)
    return True


def drop_table(session: Session, schema: str, table: str) -> bool:
    """Drop a table.

    Success is the driver completing the statement. The affected-row count
    drivers report for DDL differs (0 or -1) and is only logged.

    Raises:
        DatabaseError: If the driver rejects the statement.
    """
    name = qualified_name(schema, table)
    rowcount = execute_non_query(session, f"DROP TABLE {name}")
    session.status = f"Table {name} was dropped/deleted."
    logger.info("Dropped table %s (driver reported %s)", name, rowcount)
    return True


def system_command_sql(command: str, library: str = "QSYS2") -> str:
    """Build the CALL statement that runs a CL command through QCMDEXC.

    QSYS.QCMDEXC takes the command length as DECIMAL(15, 5);
    QSYS2.QCMDEXC takes the command alone.
    """
    library = library.strip().upper()
    if library not in SYSTEM_COMMAND_LIBRARIES:
        raise InvalidArgumentError(f"QCMDEXC is not available in library {library}.")

    text = command.strip()
    if not text:
        raise InvalidArgumentError("CL command is required.")

    literal = text.replace("'", "''")
    if library == "QSYS":
        return f"CALL QSYS.QCMDEXC('{literal}', {len(text):016.5f})"
    return f"CALL QSYS2.QCMDEXC('{literal}')"


def exec_system_command(session: Session, command: str, library: str = "QSYS2") -> int:
    """Run a CL command and return the driver's completion code."""
    sql = system_command_sql(command, library)
    result = execute_non_query(session, sql)
    session.status = f"CL command completed: {command.strip()}"
    return result
