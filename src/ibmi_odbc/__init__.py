"""
ibmi_odbc core package.

Convenience wrapper around ODBC (via pyodbc) for IBM i data sources:
- `ibmi_odbc.access.OdbcDataAccess`: never-raising facade returning `Outcome`s
- `ibmi_odbc.database`: sessions, query execution, result handles, table helpers
- `ibmi_odbc.export`: delimited, CSV, XML and JSON serialisation
- A Typer-based CLI (`ibmi_odbc.cli`)

Configuration:
- Shared filesystem anchors and constants live in `ibmi_odbc.global_config`.
- Connection settings (YAML profile plus environment) live in `ibmi_odbc.config`.
"""

from .access import OdbcDataAccess
from .database import CursorResult, ErrorKind, Outcome, TabularResult
from .export import DelimitedOptions

__all__ = [
    "OdbcDataAccess",
    "Outcome",
    "ErrorKind",
    "TabularResult",
    "CursorResult",
    "DelimitedOptions",
]
