"""Typer option aliases shared by the command groups."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Connection profile (defaults to config/connection.yaml)",
    ),
]

TimeoutOption = Annotated[
    int | None,
    typer.Option("--timeout", help="Query timeout in seconds (-1 driver default, 0 none)"),
]

LogOption = Annotated[
    bool,
    typer.Option("--log", help="Write a run log under logs/"),
]
