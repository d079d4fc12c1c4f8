"""Database connection helpers.

This module provides a small, synchronous API for opening ODBC connections
to an IBM i system. A `Session` owns at most one connection plus the status
of the last lifecycle operation; it is not safe to share across threads.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Callable, Iterator
from typing import Any

from .. import global_config as g
from .errors import InvalidArgumentError, NotConnectedError

logger = logging.getLogger(__name__)

ConnectFactory = Callable[[str], Any]

_SPECIAL_CHARS = (";", "{", "}")


def _pyodbc_connect(connection_string: str) -> Any:
    """Open a pyodbc connection in autocommit mode.

    The driver is imported lazily so the package can be imported (and its
    exporters used) on machines without an ODBC driver manager.
    """
    import pyodbc  # noqa: PLC0415

    return pyodbc.connect(connection_string, autocommit=True)


def quote_connection_value(value: str) -> str:
    """Return a connection string attribute value safe for substitution.

    Values without ODBC special characters are returned unchanged. Others
    are wrapped in braces with closing braces doubled, as the ODBC
    connection string grammar requires.
    """
    if not any(char in value for char in _SPECIAL_CHARS):
        return value
    return "{" + value.replace("}", "}}") + "}"


def build_connection_string(
    template: str,
    system: str,
    user: str,
    password: str,
) -> str:
    """Fill the IBM i connection string template.

    Args:
        template: Template containing @@SYSTEM, @@USERID and @@PASS.
        system: IBM i host name or IP address.
        user: IBM i user profile.
        password: Password for the user profile.

    Returns:
        Connection string with all placeholders replaced.

    Raises:
        InvalidArgumentError: If any credential is blank.
    """
    for label, value in (
        ("System name/host ip address", system),
        ("User id", user),
        ("Password", password),
    ):
        if not value or not value.strip():
            raise InvalidArgumentError(f"{label} is required.")

    return (
        template.replace(g.SYSTEM_PLACEHOLDER, quote_connection_value(system.strip()))
        .replace(g.USER_PLACEHOLDER, quote_connection_value(user.strip()))
        .replace(g.PASSWORD_PLACEHOLDER, quote_connection_value(password.strip()))
    )


@contextlib.contextmanager
def query_timeout(conn: Any, seconds: int) -> Iterator[None]:
    """Apply a per-call query timeout to a pyodbc connection.

    Args:
        conn: Open driver connection.
        seconds: -1 keeps the driver default, 0 disables the timeout,
            anything else is the timeout in seconds.

    Side Effects:
        - Sets ``conn.timeout`` for the duration of the block and restores
          the previous value afterwards.
    """
    if seconds < 0:
        yield
        return

    previous = conn.timeout
    conn.timeout = seconds
    try:
        yield
    finally:
        conn.timeout = previous


class Session:
    """One ODBC connection plus its last-operation status."""

    def __init__(
        self,
        connection_string: str = "",
        *,
        template: str = g.DEFAULT_CONNECTION_TEMPLATE,
        connect: ConnectFactory | None = None,
    ) -> None:
        self.connection_string = connection_string
        self.template = template
        self.connection: Any = None
        self.last_sql = ""
        self.status = ""
        self._connect = connect or _pyodbc_connect
        self._open = False

    def is_open(self) -> bool:
        return self._open

    def open(self, connection_string: str | None = None) -> None:
        """Open the connection.

        Args:
            connection_string: Connection string to use. When blank, the one
                set earlier (constructor or ``connection_string`` attribute)
                is used.

        Raises:
            InvalidArgumentError: If no connection string is available.
            Exception: Whatever the driver raises when the connect fails.

        Logs:
            - INFO: "Connection opened" on success.
        """
        if connection_string and connection_string.strip():
            self.connection_string = connection_string

        if not self.connection_string.strip():
            self._open = False
            raise InvalidArgumentError("No database connection string has been set.")

        try:
            self.connection = self._connect(self.connection_string)
        except Exception:
            self._open = False
            raise

        self._open = True
        self.status = "Connection opened successfully."
        logger.info("Connection opened")

    def open_with_credentials(self, system: str, user: str, password: str) -> None:
        """Open the connection by filling the template with credentials."""
        try:
            connection_string = build_connection_string(self.template, system, user, password)
        except InvalidArgumentError:
            self._open = False
            raise
        self.open(connection_string)

    def close(self) -> None:
        """Release the connection handle; safe to call when already closed.

        Logs:
            - INFO: "Connection closed" when a handle was released.
        """
        try:
            if self.connection is not None:
                self.connection.close()
                logger.info("Connection closed")
            self.status = "Connection closed successfully."
        finally:
            self.connection = None
            self._open = False

    def require_connection(self) -> Any:
        """Return the open connection or raise NotConnectedError."""
        if not self._open or self.connection is None:
            raise NotConnectedError()
        return self.connection


@contextlib.contextmanager
def open_session(
    connection_string: str = "",
    *,
    connect: ConnectFactory | None = None,
) -> Iterator[Session]:
    """Context manager for a session that is always closed on exit.

    Logs:
        - DEBUG: "Session closed" on exit.
    """
    session = Session(connection_string, connect=connect)
    session.open()
    try:
        yield session
    finally:
        session.close()
        logger.debug("Session closed")
