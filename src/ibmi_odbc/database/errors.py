"""Database-specific exception types and the error taxonomy."""

from __future__ import annotations

from enum import Enum

# SQLSTATE values reported for an undefined table or view
UNDEFINED_OBJECT_STATES = frozenset({"42704", "42S02"})


class ErrorKind(str, Enum):
    """Closed set of failure categories surfaced by the facade."""

    NOT_CONNECTED = "not-connected"
    INVALID_STATEMENT = "invalid-statement"
    INVALID_ARGUMENT = "invalid-argument"
    NOT_FOUND = "not-found"
    DRIVER_ERROR = "driver-error"
    IO_ERROR = "io-error"


class DatabaseError(Exception):
    """Base exception for database-related errors."""

    kind: ErrorKind = ErrorKind.DRIVER_ERROR


class NotConnectedError(DatabaseError):
    """Raised when an operation needs an open connection and there is none."""

    kind = ErrorKind.NOT_CONNECTED

    def __init__(self, message: str = "Database connection not open.") -> None:
        super().__init__(message)


class InvalidStatementError(DatabaseError):
    """Raised when statement text is the wrong kind for the operation."""

    kind = ErrorKind.INVALID_STATEMENT


class InvalidArgumentError(DatabaseError):
    """Raised when a required argument is missing or blank."""

    kind = ErrorKind.INVALID_ARGUMENT


class ColumnNotFoundError(DatabaseError):
    """Raised when a column name is not part of a result's schema."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, name: str) -> None:
        super().__init__(f"{name} was not found in the field list.")
        self.name = name


class DriverError(DatabaseError):
    """Raised when the ODBC driver reports a failure."""

    kind = ErrorKind.DRIVER_ERROR

    def __init__(self, message: str, sqlstate: str | None = None) -> None:
        super().__init__(message)
        self.sqlstate = sqlstate

    @property
    def is_undefined_object(self) -> bool:
        return self.sqlstate in UNDEFINED_OBJECT_STATES


class ExportError(DatabaseError):
    """Raised when an export destination cannot be written."""

    kind = ErrorKind.IO_ERROR


def _sqlstate(error: Exception) -> str | None:
    """Pull the SQLSTATE out of a DB-API error, if the driver supplied one.

    pyodbc puts the five character state in ``args[0]`` and the message in
    ``args[1]``.
    """
    args = getattr(error, "args", ())
    if len(args) >= 2 and isinstance(args[0], str) and len(args[0]) == 5:
        return args[0]
    return None


def _message(error: Exception) -> str:
    args = getattr(error, "args", ())
    if len(args) >= 2 and _sqlstate(error) is not None:
        return str(args[1])
    return str(error)


def from_driver_error(error: Exception) -> DatabaseError:
    """Map a raw driver or OS error to a project-level DatabaseError.

    Project errors pass through unchanged, OS errors become ExportError,
    bad positions or values become InvalidArgumentError and anything else
    is treated as a driver failure.

    Args:
        error: Exception raised below the facade.

    Returns:
        DatabaseError subclass instance carrying the original message.
    """
    if isinstance(error, DatabaseError):
        return error
    if isinstance(error, OSError):
        return ExportError(str(error))
    if isinstance(error, (IndexError, ValueError)):
        return InvalidArgumentError(str(error))
    return DriverError(_message(error), sqlstate=_sqlstate(error))
