"""JSON export of buffered results.

A result becomes a list of row objects keyed by column name, optionally
wrapped in a single-key object, and is handed to ``json.dumps``.
"""

from __future__ import annotations

import base64
import json
import logging
import math
from datetime import date, datetime, time
from decimal import Decimal
from pathlib import Path
from typing import Any
from uuid import UUID

from ..database.results import TabularResult
from ._files import write_text

logger = logging.getLogger(__name__)

DEFAULT_WRAP_KEY = "records"


def _json_default(value: Any) -> Any:
    """Convert driver values json cannot serialise on its own.

    Decimals become integers when integral, floats when the float reads back
    as the same number, and strings otherwise so no digits are lost.
    """
    if isinstance(value, Decimal):
        if not value.is_finite():
            return None
        if value == value.to_integral_value():
            return int(value)
        if Decimal(repr(float(value))) == value:
            return float(value)
        return str(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, UUID):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _finite(value: Any) -> Any:
    # NaN and infinity have no JSON literal
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def build_json_tree(
    result: TabularResult,
    *,
    wrap: bool = False,
    key: str = DEFAULT_WRAP_KEY,
) -> list[dict[str, Any]] | dict[str, list[dict[str, Any]]]:
    records = [
        {name: _finite(value) for name, value in record.items()}
        for record in result.records()
    ]
    if wrap:
        return {key: records}
    return records



def to_json_string(
    result: TabularResult,
    *,
    wrap: bool = False,
    key: str = DEFAULT_WRAP_KEY,
    indent: bool = True,
) -> str:
    """Serialise a buffered result.

    Args:
        result: Buffered result.
        wrap: Emit ``{key: [...]}`` instead of a bare array.
        key: Wrapper key when ``wrap`` is set.
        indent: Indented output; compact when False.
    """
    tree = build_json_tree(result, wrap=wrap, key=key)
    if indent:
        return json.dumps(
            tree, default=_json_default, ensure_ascii=False, allow_nan=False, indent=2
        )
    return json.dumps(
        tree,
        default=_json_default,
        ensure_ascii=False,
        allow_nan=False,
        separators=(",", ":"),
    )


def export_json(
    result: TabularResult,
    output_file: str | Path,
    *,
    wrap: bool = False,
    key: str = DEFAULT_WRAP_KEY,
    indent: bool = True,
) -> int:
    """Write a buffered result to a JSON file, replacing any existing file.

    Returns:
        Number of rows written.

    Logs:
        - INFO: "{rows} rows were exported to JSON file {path}".
    """
    text = to_json_string(result, wrap=wrap, key=key, indent=indent)
    path = write_text(output_file, text + "\n")
    logger.info("%s rows were exported to JSON file %s", result.row_count, path)
    return result.row_count
