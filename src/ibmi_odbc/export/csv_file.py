"""Strict CSV export.

Unlike the delimited export, every field (header included) is quoted by
the ``csv`` module and values are written raw: embedded CR/LF are kept and
embedded quotes are doubled, never replaced with placeholders.
"""

from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import TextIO

from ..database.results import CursorResult, TabularResult, to_text
from ._files import open_for_export, resolve_output_path

logger = logging.getLogger(__name__)


def _write_rows(
    handle: TextIO,
    result: TabularResult | CursorResult,
    *,
    separator: str,
    headings: bool,
    newline: str,
) -> int:
    writer = csv.writer(
        handle,
        delimiter=separator,
        quoting=csv.QUOTE_ALL,
        lineterminator=newline,
    )
    if headings:
        writer.writerow(result.column_names)

    count = 0
    rows = result.rows if isinstance(result, TabularResult) else iter(result)
    for row in rows:
        writer.writerow([to_text(value) for value in row])
        count += 1
    return count


def to_csv_string(
    result: TabularResult,
    *,
    separator: str = ",",
    headings: bool = True,
    newline: str = "\n",
) -> str:
    buffer = io.StringIO(newline="")
    _write_rows(buffer, result, separator=separator, headings=headings, newline=newline)
    return buffer.getvalue()


def export_csv(
    result: TabularResult | CursorResult,
    output_file: str | Path,
    *,
    separator: str = ",",
    headings: bool = True,
    replace: bool = False,
    newline: str = "\n",
) -> int:
    """Write a result to a CSV file, every field double-quoted.

    Appends without a header when the file already exists, unless
    ``replace`` is set.

    Returns:
        Number of data rows written.

    Logs:
        - INFO: "{rows} rows were exported to CSV file {path}".
    """
    with open_for_export(output_file, replace=replace) as (handle, has_data):
        count = _write_rows(
            handle,
            result,
            separator=separator,
            headings=headings and not has_data,
            newline=newline,
        )
    logger.info("%s rows were exported to CSV file %s", count, resolve_output_path(output_file))
    return count
