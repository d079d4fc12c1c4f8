"""Delimited text export of query results.

One logical record per physical line: when ``remove_line_feeds`` is set,
CR/LF sequences inside names and values are replaced with the literal
placeholders ``<CRLF>``, ``<CR>`` and ``<LF>``. Exports to an existing file
append without repeating the header, so several calls accumulate one
dataset unless ``replace`` is requested.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .. import global_config as g
from ..database.results import CursorResult, TabularResult, to_text
from ._files import open_for_export, resolve_output_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DelimitedOptions:
    """Formatting switches for delimited exports.

    Attributes:
        delimiter: Field separator.
        quote: Wrap every data field in double quotes.
        remove_line_feeds: Replace CR/LF with placeholder tokens.
        pad_delimiter: Follow each delimiter with a single space.
        headings: Emit a header line of column names.
        newline: Record terminator.
    """

    delimiter: str = ","
    quote: bool = True
    remove_line_feeds: bool = True
    pad_delimiter: bool = True
    headings: bool = True
    newline: str = "\n"

    @property
    def separator(self) -> str:
        return self.delimiter + " " if self.pad_delimiter else self.delimiter


def replace_line_feeds(text: str) -> str:
    """Replace CRLF, CR and LF (in that order) with placeholder tokens."""
    for sequence, placeholder in g.LINE_FEED_PLACEHOLDERS:
        text = text.replace(sequence, placeholder)
    return text


def format_header(names: Sequence[str], options: DelimitedOptions) -> str:
    """Join trimmed column names; headers are never quoted."""
    fields = []
    for name in names:
        name = name.strip()
        if options.remove_line_feeds:
            name = replace_line_feeds(name)
        fields.append(name)
    return options.separator.join(fields)


def format_row(values: Sequence[Any], options: DelimitedOptions) -> str:
    quote = '"' if options.quote else ""
    fields = []
    for value in values:
        text = to_text(value)
        if options.remove_line_feeds:
            text = replace_line_feeds(text)
        fields.append(f"{quote}{text}{quote}")
    return options.separator.join(fields)


def iter_lines(
    names: Sequence[str],
    rows: Iterable[Sequence[Any]],
    options: DelimitedOptions,
) -> Iterator[str]:
    """Yield terminated lines: an optional header, then one line per row."""
    if options.headings:
        yield format_header(names, options) + options.newline
    for row in rows:
        yield format_row(row, options) + options.newline


def to_delimited_string(
    result: TabularResult,
    options: DelimitedOptions | None = None,
) -> str:
    """Render a buffered result as delimited text."""
    options = options or DelimitedOptions()
    return "".join(iter_lines(result.column_names, result.rows, options))


def export_delimited(
    result: TabularResult | CursorResult,
    output_file: str | Path,
    options: DelimitedOptions | None = None,
    *,
    replace: bool = False,
) -> int:
    """Write a result to a delimited file.

    Cursor results are streamed: each remaining row is read once and
    written as it arrives.

    Args:
        result: Buffered or cursor result.
        output_file: Destination path.
        options: Formatting switches.
        replace: Replace an existing file instead of appending to it.

    Returns:
        Number of data rows written.

    Raises:
        InvalidArgumentError: If the output file name is blank.
        OSError: If the file cannot be written.

    Logs:
        - INFO: "{rows} rows were exported to delimited file {path}".
    """
    options = options or DelimitedOptions()
    rows_written = 0

    with open_for_export(output_file, replace=replace) as (handle, has_data):
        if options.headings and not has_data:
            handle.write(format_header(result.column_names, options) + options.newline)
        rows = result.rows if isinstance(result, TabularResult) else iter(result)
        for row in rows:
            handle.write(format_row(row, options) + options.newline)
            rows_written += 1

    logger.info(
        "%s rows were exported to delimited file %s",
        rows_written,
        resolve_output_path(output_file),
    )
    return rows_written
