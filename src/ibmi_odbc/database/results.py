"""Result handles returned by query execution.

`TabularResult` is a fully buffered, randomly accessible result.
`CursorResult` wraps a live driver cursor and reads forward only. Neither is
stored on the session: each query hands back its own handle.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import Any

from .. import global_config as g
from .errors import ColumnNotFoundError, InvalidArgumentError

logger = logging.getLogger(__name__)


def to_text(value: Any) -> str:
    """Render a driver value the way the delimited exports read it.

    None becomes an empty string and binary values become upper-case hex.
    Everything else uses ``str``.
    """
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex().upper()
    return str(value)


@dataclass(frozen=True)
class Column:
    """A named result column and the Python type inferred for it."""

    name: str
    type: type = str


def find_ordinal(columns: Sequence[Column], name: str) -> int:
    """Return the ordinal of ``name`` (case-insensitive, trimmed, first match).

    Raises:
        ColumnNotFoundError: If no column has that name.
    """
    wanted = name.strip().lower()
    for ordinal, column in enumerate(columns):
        if column.name.strip().lower() == wanted:
            return ordinal
    raise ColumnNotFoundError(name)


def columns_from_description(
    description: Sequence[Sequence[Any]] | None,
    sample: Sequence[Any] | None = None,
) -> list[Column]:
    """Build the column list from a DB-API ``cursor.description``.

    pyodbc reports a Python type as the type code. Drivers that do not
    (sqlite3 reports None) fall back to the type of the sample row value.
    """
    if not description:
        return []

    columns = []
    for index, entry in enumerate(description):
        type_code = entry[1] if len(entry) > 1 else None
        if not isinstance(type_code, type):
            value = sample[index] if sample is not None and index < len(sample) else None
            type_code = type(value) if value is not None else str
        columns.append(Column(name=str(entry[0]), type=type_code))
    return columns


def _join(values: Sequence[Any], delimiter: str) -> str:
    return delimiter.join(to_text(value) for value in values)


@dataclass
class TabularResult:
    """Buffered query result: ordered columns plus ordered rows."""

    columns: list[Column]
    rows: list[tuple[Any, ...]] = field(default_factory=list)
    name: str = g.DEFAULT_TABLE_NAME

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return len(self.columns)

    @property
    def column_names(self) -> list[str]:
        return [column.name for column in self.columns]

    def ordinal(self, name: str) -> int:
        return find_ordinal(self.columns, name)

    def value(self, row: int, column: int) -> str:
        """Return the text of the field at (row, column)."""
        if row < 0 or column < 0:
            raise IndexError(f"There is no row at position {row}, column {column}.")
        return to_text(self.rows[row][column])

    def value_by_name(self, row: int, name: str) -> str:
        return self.value(row, self.ordinal(name))

    def row_delimited(self, row: int, delimiter: str = ",") -> str:
        if row < 0:
            raise IndexError(f"There is no row at position {row}.")
        return _join(self.rows[row], delimiter)

    def column_names_delimited(self, delimiter: str = ",") -> str:
        return delimiter.join(self.column_names)

    def records(self) -> list[dict[str, Any]]:
        """Return rows as dicts keyed by column name, values untouched."""
        names = self.column_names
        return [dict(zip(names, row)) for row in self.rows]


class CursorResult:
    """Forward-only, single-pass view over an open driver cursor.

    Created positioned before the first row; call `advance` to move to the
    next one. Iterating yields each remaining row and advances as it goes.
    """

    def __init__(self, cursor: Any, *, sql: str = "") -> None:
        self._cursor = cursor
        self.sql = sql
        self.columns = columns_from_description(cursor.description)
        self.rows_read = 0
        self._row: tuple[Any, ...] | None = None
        self._exhausted = False
        self._closed = False

    def __enter__(self) -> CursorResult:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __iter__(self) -> Iterator[tuple[Any, ...]]:
        while self.advance():
            assert self._row is not None
            yield self._row

    @property
    def column_count(self) -> int:
        return len(self.columns)

    @property
    def column_names(self) -> list[str]:
        return [column.name for column in self.columns]

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def current(self) -> tuple[Any, ...]:
        if self._row is None:
            raise InvalidArgumentError("No current row. Call advance() first.")
        return self._row

    def advance(self) -> bool:
        """Read the next row. Returns False once the cursor is exhausted."""
        if self._closed:
            raise InvalidArgumentError("Cursor result is closed.")
        if self._exhausted:
            return False

        row = self._cursor.fetchone()
        if row is None:
            self._exhausted = True
            self._row = None
            return False

        self._row = tuple(row)
        self.rows_read += 1
        return True

    def ordinal(self, name: str) -> int:
        return find_ordinal(self.columns, name)

    def value(self, column: int) -> str:
        if column < 0:
            raise IndexError(f"There is no column at position {column}.")
        return to_text(self.current[column])

    def value_by_name(self, name: str) -> str:
        return self.value(self.ordinal(name))

    def row_delimited(self, delimiter: str = ",") -> str:
        return _join(self.current, delimiter)

    def column_names_delimited(self, delimiter: str = ",") -> str:
        return delimiter.join(self.column_names)

    def close(self) -> None:
        """Close the underlying cursor; safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._row = None
        self._cursor.close()
        logger.debug("Cursor closed after %s rows", self.rows_read)
