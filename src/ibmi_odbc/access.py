"""Data-access facade over one IBM i ODBC session.

`OdbcDataAccess` groups connection lifecycle, query execution, field
accessors, exports and table helpers behind methods that never raise.
Every call returns an `Outcome`; on failure its ``value`` is the sentinel
of the sentinel-style API (None, False, -2, "**ERROR" or "") and the
message is also kept in ``last_error``.

Results are handed back to the caller rather than kept on the instance, so
the same result can be read and exported any number of times. An instance
still owns one connection and must not be shared across threads.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

from . import global_config as g
from .database import queries, tables
from .database.connection import ConnectFactory, Session
from .database.errors import InvalidArgumentError, from_driver_error
from .database.outcome import Outcome
from .database.results import CursorResult, TabularResult
from .export import csv_file, delimited, json_doc, xml_doc
from .export.delimited import DelimitedOptions

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _require_result(result: Any) -> None:
    if result is None:
        raise InvalidArgumentError("Result has no data. Export cancelled.")


class OdbcDataAccess:
    """Never-raising wrapper around a `Session` and the exporters."""

    def __init__(
        self,
        connection_string: str = "",
        *,
        template: str = g.DEFAULT_CONNECTION_TEMPLATE,
        connect: ConnectFactory | None = None,
    ) -> None:
        self.session = Session(connection_string, template=template, connect=connect)
        self.last_error = ""
        self.last_export_count = 0

    def __enter__(self) -> OdbcDataAccess:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def last_sql(self) -> str:
        return self.session.last_sql

    def _call(
        self,
        operation: str,
        sentinel: T,
        op_callable: Callable[[], T],
        *,
        status: Callable[[T], str] | None = None,
    ) -> Outcome[T]:
        """Run ``op_callable`` and fold any exception into a failed Outcome.

        Logs:
            - ERROR: "{operation} failed: {message}" on failure, with the
              traceback at DEBUG level.
        """
        self.last_error = ""
        try:
            value = op_callable()
        except Exception as exc:  # noqa: BLE001
            error = from_driver_error(exc)
            message = str(error)
            self.last_error = message
            logger.error("%s failed: %s", operation, message)
            logger.debug("Traceback for %s", operation, exc_info=True)
            return Outcome.failure(error.kind, message, sentinel)

        if status is not None:
            self.last_error = status(value)
        return Outcome.success(value, self.last_error)

    # Connection lifecycle

    def set_connection_string(self, connection_string: str) -> None:
        self.last_error = ""
        self.session.connection_string = connection_string

    def set_connection_template(self, template: str) -> None:
        """Override the @@SYSTEM/@@USERID/@@PASS connection string template."""
        self.last_error = ""
        self.session.template = template

    def is_open(self) -> bool:
        return self.session.is_open()

    def open(self, connection_string: str | None = None) -> Outcome[bool]:
        def _open() -> bool:
            self.session.open(connection_string)
            return True

        return self._call("open", False, _open, status=lambda _: self.session.status)

    def open_with_credentials(self, system: str, user: str, password: str) -> Outcome[bool]:
        def _open() -> bool:
            self.session.open_with_credentials(system, user, password)
            return True

        return self._call("open", False, _open, status=lambda _: self.session.status)

    def close(self) -> Outcome[bool]:
        def _close() -> bool:
            self.session.close()
            return True

        return self._call("close", False, _close, status=lambda _: self.session.status)

    # Query execution

    def query_to_table(
        self,
        sql: str,
        *,
        offset: int = 0,
        limit: int = 0,
        timeout: int = g.DEFAULT_TIMEOUT,
        table_name: str = g.DEFAULT_TABLE_NAME,
    ) -> Outcome[TabularResult | None]:
        """Run a SELECT into a buffered result; value is None on failure."""
        return self._call(
            "query",
            None,
            lambda: queries.query_to_table(
                self.session,
                sql,
                offset=offset,
                limit=limit,
                timeout=timeout,
                table_name=table_name,
            ),
        )

    def query_to_cursor(
        self,
        sql: str,
        *,
        timeout: int = g.DEFAULT_TIMEOUT,
    ) -> Outcome[CursorResult | None]:
        """Run a SELECT into a forward-only cursor the caller must close."""
        return self._call(
            "query",
            None,
            lambda: queries.query_to_cursor(self.session, sql, timeout=timeout),
        )

    def execute_non_query(
        self,
        sql: str,
        *,
        timeout: int = g.DEFAULT_TIMEOUT,
        allow_select: bool = False,
    ) -> Outcome[int]:
        """Run a statement without a result set; value is -2 on failure."""
        return self._call(
            "execute",
            g.ERROR_COUNT,
            lambda: queries.execute_non_query(
                self.session,
                sql,
                timeout=timeout,
                allow_select=allow_select,
            ),
        )

    # Row and field accessors

    def get_value(self, result: TabularResult, row: int, column: int) -> Outcome[str]:
        return self._call("get value", g.ERROR_VALUE, lambda: result.value(row, column))

    def get_value_by_name(self, result: TabularResult, row: int, name: str) -> Outcome[str]:
        return self._call("get value", g.ERROR_VALUE, lambda: result.value_by_name(row, name))

    def get_row_delimited(
        self,
        result: TabularResult,
        row: int,
        delimiter: str = ",",
    ) -> Outcome[str]:
        return self._call("get row", "", lambda: result.row_delimited(row, delimiter))

    def get_column_names(
        self,
        result: TabularResult | CursorResult,
        delimiter: str = ",",
    ) -> Outcome[str]:
        return self._call("get column names", "", lambda: result.column_names_delimited(delimiter))

    def next_row(self, cursor: CursorResult) -> Outcome[bool]:
        return self._call("read row", False, cursor.advance)

    def close_cursor(self, cursor: CursorResult | None) -> Outcome[bool]:
        def _close() -> bool:
            if cursor is not None:
                cursor.close()
            return True

        return self._call("close cursor", False, _close)

    def get_cursor_value(self, cursor: CursorResult, column: int) -> Outcome[str]:
        return self._call("get value", "", lambda: cursor.value(column))

    def get_cursor_value_by_name(self, cursor: CursorResult, name: str) -> Outcome[str]:
        return self._call("get value", g.ERROR_VALUE, lambda: cursor.value_by_name(name))

    def get_column_ordinal(self, cursor: CursorResult, name: str) -> Outcome[int]:
        return self._call("get ordinal", g.ERROR_ORDINAL, lambda: cursor.ordinal(name))

    def get_cursor_row_delimited(self, cursor: CursorResult, delimiter: str = ",") -> Outcome[str]:
        return self._call("get row", "", lambda: cursor.row_delimited(delimiter))

    # Exports

    def _export(
        self,
        operation: str,
        op_callable: Callable[[], int],
        describe: Callable[[int], str],
    ) -> Outcome[bool]:
        self.last_export_count = 0

        def _run() -> bool:
            self.last_export_count = op_callable()
            return True

        return self._call(
            operation,
            False,
            _run,
            status=lambda _: describe(self.last_export_count),
        )

    def to_delimited_string(
        self,
        result: TabularResult,
        options: DelimitedOptions | None = None,
    ) -> Outcome[str]:
        def _render() -> str:
            _require_result(result)
            return delimited.to_delimited_string(result, options)

        return self._call("delimited export", "", _render)

    def export_delimited(
        self,
        result: TabularResult | CursorResult,
        output_file: str | Path,
        options: DelimitedOptions | None = None,
        *,
        replace: bool = False,
    ) -> Outcome[bool]:
        """Write a result to a delimited file (appending unless ``replace``)."""

        def _write() -> int:
            _require_result(result)
            return delimited.export_delimited(result, output_file, options, replace=replace)

        return self._export(
            "delimited export",
            _write,
            lambda count: f"{count} rows were exported to delimited file {output_file}",
        )

    def query_and_export_delimited(
        self,
        sql: str,
        output_file: str | Path,
        options: DelimitedOptions | None = None,
        *,
        replace: bool = False,
        stream: bool = False,
        timeout: int = g.DEFAULT_TIMEOUT,
    ) -> Outcome[bool]:
        """Run a SELECT and export its rows in one call.

        With ``stream`` the rows are read through a cursor and written as
        they arrive instead of being buffered first.
        """
        if stream:
            query = self.query_to_cursor(sql, timeout=timeout)
        else:
            query = self.query_to_table(sql, timeout=timeout)
        if not query.ok:
            self.last_error = f"Query failed. Error: {query.message}"
            return Outcome.failure(query.kind, self.last_error, False)

        result = query.value
        try:
            return self.export_delimited(result, output_file, options, replace=replace)
        finally:
            if isinstance(result, CursorResult):
                result.close()

    def export_csv(
        self,
        result: TabularResult | CursorResult,
        output_file: str | Path,
        *,
        separator: str = ",",
        headings: bool = True,
        replace: bool = False,
    ) -> Outcome[bool]:
        def _write() -> int:
            _require_result(result)
            return csv_file.export_csv(
                result,
                output_file,
                separator=separator,
                headings=headings,
                replace=replace,
            )

        return self._export(
            "CSV export",
            _write,
            lambda count: f"{count} rows were exported to CSV file {output_file}",
        )

    def to_xml(
        self,
        result: TabularResult,
        *,
        root_name: str = xml_doc.DEFAULT_ROOT_NAME,
        include_schema: bool = False,
    ) -> Outcome[str]:
        def _render() -> str:
            _require_result(result)
            return xml_doc.to_xml_string(result, root_name=root_name, include_schema=include_schema)

        return self._call("XML export", "", _render)

    def export_xml(
        self,
        result: TabularResult,
        output_file: str | Path,
        *,
        root_name: str = xml_doc.DEFAULT_ROOT_NAME,
        include_schema: bool = False,
    ) -> Outcome[bool]:
        def _write() -> int:
            _require_result(result)
            return xml_doc.export_xml(
                result,
                output_file,
                root_name=root_name,
                include_schema=include_schema,
            )

        return self._export(
            "XML export",
            _write,
            lambda count: f"{count} rows were exported to XML file {output_file}",
        )

    def to_json(
        self,
        result: TabularResult,
        *,
        wrap: bool = False,
        key: str = json_doc.DEFAULT_WRAP_KEY,
        indent: bool = True,
    ) -> Outcome[str]:
        def _render() -> str:
            _require_result(result)
            return json_doc.to_json_string(result, wrap=wrap, key=key, indent=indent)

        return self._call("JSON export", "", _render)

    def export_json(
        self,
        result: TabularResult,
        output_file: str | Path,
        *,
        wrap: bool = False,
        key: str = json_doc.DEFAULT_WRAP_KEY,
        indent: bool = True,
    ) -> Outcome[bool]:
        def _write() -> int:
            _require_result(result)
            return json_doc.export_json(result, output_file, wrap=wrap, key=key, indent=indent)

        return self._export(
            "JSON export",
            _write,
            lambda count: f"{count} rows were exported to JSON file {output_file}",
        )

    # Table helpers

    def table_exists(self, schema: str, table: str) -> Outcome[bool]:
        """Report whether ``schema.table`` exists.

        A missing table is a successful outcome with value False; any other
        failure (privileges, lost connection) is a failed outcome.
        """
        return self._call(
            "table exists",
            False,
            lambda: tables.table_exists(self.session, schema, table),
            status=lambda _: self.session.status,
        )

    def drop_table(self, schema: str, table: str) -> Outcome[bool]:
        return self._call(
            "drop table",
            False,
            lambda: tables.drop_table(self.session, schema, table),
            status=lambda _: self.session.status,
        )

    def exec_system_command(self, command: str, library: str = "QSYS2") -> Outcome[int]:
        """Run a CL command through QCMDEXC; value is -2 on failure."""
        return self._call(
            "system command",
            g.ERROR_COUNT,
            lambda: tables.exec_system_command(self.session, command, library),
            status=lambda _: self.session.status,
        )
