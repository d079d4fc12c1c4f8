"""Global, project-wide configuration constants.

This module intentionally contains **no business logic** – only simple,
shared filesystem anchors and cross-cutting constants that many modules
can import.

Connection settings that vary per environment live in `ibmi_odbc.config`,
which builds on top of these anchors.
"""

from pathlib import Path

# Core roots
PACKAGE_ROOT: Path = Path(__file__).resolve().parent
# PROJECT_ROOT is the repo root (where pyproject.toml and config/ live)
# From src/ibmi_odbc/global_config.py, go up two levels: src/ibmi_odbc -> src -> repo root
PROJECT_ROOT: Path = PACKAGE_ROOT.parent.parent

# Core Names
PROJECT_NAME = "ibmi-odbc"

# Configuration
CONFIG_DIR: Path = PROJECT_ROOT / "config"
CONNECTION_CONFIG_PATH: Path = CONFIG_DIR / "connection.yaml"

# Per-run CLI log files
LOGS_DIR: Path = PROJECT_ROOT / "logs"

# IBM i Access ODBC connection string template.
# @@SYSTEM, @@USERID and @@PASS are replaced when opening with credentials.
SYSTEM_PLACEHOLDER = "@@SYSTEM"
USER_PLACEHOLDER = "@@USERID"
PASSWORD_PLACEHOLDER = "@@PASS"
DEFAULT_CONNECTION_TEMPLATE = (
    "Driver={IBM i Access ODBC Driver};"
    "System=@@SYSTEM;Uid=@@USERID;Pwd=@@PASS;CommitMode=0;EXTCOLINFO=1"
)

# Sentinel values returned by the data-access facade on failure
ERROR_COUNT = -2
ERROR_ORDINAL = -2
ERROR_VALUE = "**ERROR"

# Query timeout: -1 keeps the driver default, 0 disables the timeout
DEFAULT_TIMEOUT = -1
DEFAULT_TABLE_NAME = "Table1"

# Line feed placeholders used by delimited exports
LINE_FEED_PLACEHOLDERS: tuple[tuple[str, str], ...] = (
    ("\r\n", "<CRLF>"),
    ("\r", "<CR>"),
    ("\n", "<LF>"),
)
