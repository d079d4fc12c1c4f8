"""Connection settings for the IBM i data source.

Settings come from a YAML profile (``config/connection.yaml`` by default)
and are then overridden by environment variables:

- ``IBMI_CONNECTION_STRING``: full ODBC connection string
- ``IBMI_SYSTEM``, ``IBMI_USER``, ``IBMI_PASSWORD``: template credentials
- ``IBMI_QUERY_TIMEOUT``: default query timeout in seconds

Example profile::

    connection:
      system: myibmi.example.com
      user: QUSER
      template: "Driver={IBM i Access ODBC Driver};System=@@SYSTEM;Uid=@@USERID;Pwd=@@PASS"
      timeout: 60
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import yaml

from . import global_config as g
from .database.connection import build_connection_string
from .database.errors import InvalidArgumentError

logger = logging.getLogger(__name__)

ENV_PREFIX = "IBMI_"

_ENV_FIELDS = {
    "CONNECTION_STRING": "connection_string",
    "SYSTEM": "system",
    "USER": "user",
    "PASSWORD": "password",
    "QUERY_TIMEOUT": "timeout",
}


@dataclass(frozen=True)
class ConnectionSettings:
    """Everything needed to open a session."""

    system: str = ""
    user: str = ""
    password: str = ""
    connection_string: str = ""
    template: str = g.DEFAULT_CONNECTION_TEMPLATE
    timeout: int = g.DEFAULT_TIMEOUT

    def resolve_connection_string(self) -> str:
        """Return the explicit connection string, or fill the template.

        Raises:
            InvalidArgumentError: If neither a connection string nor a full
                set of credentials is configured.
        """
        if self.connection_string.strip():
            return self.connection_string
        return build_connection_string(self.template, self.system, self.user, self.password)


def load_profile(path: Path) -> dict[str, Any]:
    """Load a YAML connection profile.

    The settings may sit at the top level or under a ``connection`` key.
    A missing file yields an empty mapping.

    Raises:
        InvalidArgumentError: If the file does not hold a mapping.
        yaml.YAMLError: If the YAML is invalid.
    """
    if not path.exists():
        logger.debug("No connection profile at %s", path)
        return {}

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidArgumentError(f"Connection profile {path} must be a mapping")

    section = data.get("connection", data)
    if not isinstance(section, dict):
        raise InvalidArgumentError(f"'connection' in {path} must be a mapping")
    return section


def _coerce_timeout(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as err:
        raise InvalidArgumentError(f"Invalid query timeout: {value!r}") from err


def load_settings(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> ConnectionSettings:
    """Build connection settings from the profile and the environment.

    Args:
        path: Profile path. Defaults to global_config.CONNECTION_CONFIG_PATH.
        environ: Environment mapping. Defaults to ``os.environ``.

    Returns:
        Merged settings; environment values win over the profile.
    """
    profile = load_profile(path or g.CONNECTION_CONFIG_PATH)
    environ = os.environ if environ is None else environ

    values: dict[str, Any] = {}
    for key in ("system", "user", "password", "connection_string", "template"):
        if profile.get(key) is not None:
            values[key] = str(profile[key])
    if profile.get("timeout") is not None:
        values["timeout"] = _coerce_timeout(profile["timeout"])

    for suffix, field_name in _ENV_FIELDS.items():
        raw = environ.get(ENV_PREFIX + suffix)
        if raw is None or raw == "":
            continue
        values[field_name] = _coerce_timeout(raw) if field_name == "timeout" else raw

    return replace(ConnectionSettings(), **values)
