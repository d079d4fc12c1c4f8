"""XML export of buffered results.

The document has one element per row, named after the result's table
name, holding one child element per non-null column value. Column names
are used verbatim as element names. Characters XML 1.0 cannot carry (C0
controls other than tab, CR and LF, lone surrogates, U+FFFE and U+FFFF)
are dropped from values. With ``include_schema`` an inline ``xs:schema``
describing the columns precedes the rows.
"""

from __future__ import annotations

import base64
import logging
import re
import xml.etree.ElementTree as ET
from datetime import date, datetime, time
from decimal import Decimal
from pathlib import Path
from typing import Any

from ..database.results import TabularResult, to_text
from ._files import write_text

logger = logging.getLogger(__name__)

XS_NAMESPACE = "http://www.w3.org/2001/XMLSchema"
DEFAULT_ROOT_NAME = "NewDataSet"

ET.register_namespace("xs", XS_NAMESPACE)

_XML_ILLEGAL = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")

_XSD_TYPES: dict[type, str] = {
    str: "xs:string",
    bool: "xs:boolean",
    int: "xs:long",
    float: "xs:double",
    Decimal: "xs:decimal",
    datetime: "xs:dateTime",
    date: "xs:date",
    time: "xs:time",
    bytes: "xs:base64Binary",
    bytearray: "xs:base64Binary",
}


def _xs(tag: str) -> str:
    return f"{{{XS_NAMESPACE}}}{tag}"


def xsd_type(python_type: type) -> str:
    return _XSD_TYPES.get(python_type, "xs:string")


def _xml_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(value)).decode("ascii")
    return _XML_ILLEGAL.sub("", to_text(value))


def _schema_element(result: TabularResult, root_name: str) -> ET.Element:
    schema = ET.Element(_xs("schema"), {"id": root_name})
    dataset = ET.SubElement(schema, _xs("element"), {"name": root_name})
    choice = ET.SubElement(
        ET.SubElement(dataset, _xs("complexType")),
        _xs("choice"),
        {"minOccurs": "0", "maxOccurs": "unbounded"},
    )
    table = ET.SubElement(choice, _xs("element"), {"name": result.name})
    sequence = ET.SubElement(ET.SubElement(table, _xs("complexType")), _xs("sequence"))
    for column in result.columns:
        ET.SubElement(
            sequence,
            _xs("element"),
            {"name": column.name, "type": xsd_type(column.type), "minOccurs": "0"},
        )
    return schema


def build_xml_tree(
    result: TabularResult,
    *,
    root_name: str = DEFAULT_ROOT_NAME,
    include_schema: bool = False,
) -> ET.Element:
    root = ET.Element(root_name)
    if include_schema:
        root.append(_schema_element(result, root_name))

    for row in result.rows:
        record = ET.SubElement(root, result.name)
        for column, value in zip(result.columns, row):
            if value is None:
                continue
            ET.SubElement(record, column.name).text = _xml_text(value)
    return root


def to_xml_string(
    result: TabularResult,
    *,
    root_name: str = DEFAULT_ROOT_NAME,
    include_schema: bool = False,
) -> str:
    """Render a buffered result as an indented XML document."""
    root = build_xml_tree(result, root_name=root_name, include_schema=include_schema)
    ET.indent(root)
    return '<?xml version="1.0" encoding="utf-8"?>\n' + ET.tostring(root, encoding="unicode") + "\n"


def export_xml(
    result: TabularResult,
    output_file: str | Path,
    *,
    root_name: str = DEFAULT_ROOT_NAME,
    include_schema: bool = False,
) -> int:
    """Write a buffered result to an XML file, replacing any existing file.

    Returns:
        Number of rows written.

    Logs:
        - INFO: "{rows} rows were exported to XML file {path}".
    """
    text = to_xml_string(result, root_name=root_name, include_schema=include_schema)
    path = write_text(output_file, text)
    logger.info("%s rows were exported to XML file %s", result.row_count, path)
    return result.row_count
