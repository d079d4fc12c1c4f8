"""Serialisation of query results to delimited, CSV, XML and JSON text."""

from .csv_file import export_csv, to_csv_string
from .delimited import (
    DelimitedOptions,
    export_delimited,
    format_header,
    format_row,
    replace_line_feeds,
    to_delimited_string,
)
from .json_doc import export_json, to_json_string
from .xml_doc import export_xml, to_xml_string

__all__ = [
    "DelimitedOptions",
    "replace_line_feeds",
    "format_header",
    "format_row",
    "to_delimited_string",
    "export_delimited",
    "to_csv_string",
    "export_csv",
    "to_xml_string",
    "export_xml",
    "to_json_string",
    "export_json",
]
