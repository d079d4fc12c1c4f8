"""CLI command for running IBM i CL commands through QCMDEXC."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

import typer

from ...config import load_settings
from ...database.tables import SYSTEM_COMMAND_LIBRARIES
from ..base import BaseCLI
from ..options import ConfigOption, LogOption

system_app = typer.Typer(help="IBM i system (CL) commands.")


class SystemCLI(BaseCLI):
    """CLI helpers for CL command execution."""

    def __init__(self) -> None:
        super().__init__("system")

    def run_command(
        self,
        *,
        command: str,
        library: str,
        config_path: Path | None,
        log: bool,
    ) -> dict[str, Any]:
        """Run a CL command using QCMDEXC from ``library``.

        Logs:
            - Per-run log file under LOGS_DIR when ``log`` is set.
        """
        return self.handle_cli_operation(
            operation="system command",
            op_callable=lambda: self._command_operation(
                command=command, library=library, config_path=config_path
            ),
            log_module="system_command" if log else None,
            log_context={"command": command, "library": library},
        )

    def _command_operation(
        self,
        *,
        command: str,
        library: str,
        config_path: Path | None,
    ) -> dict[str, Any]:
        with self.connected(load_settings(config_path)) as access:
            outcome = access.exec_system_command(command, library)
            code = outcome.unwrap()
        return {"success": True, "code": code, "message": outcome.message}


cli = SystemCLI()


@system_app.command("command")
def command_command(
    command: Annotated[str, typer.Argument(help="CL command text, e.g. 'CRTLIB LIB(TEMP)'")],
    library: Annotated[
        str,
        typer.Option(
            "--library",
            "-l",
            help=f"Library holding QCMDEXC ({', '.join(SYSTEM_COMMAND_LIBRARIES)})",
        ),
    ] = "QSYS2",
    config_path: ConfigOption = None,
    log: LogOption = False,
) -> None:
    """Run a CL command on the connected IBM i system."""
    cli.run_command(command=command, library=library, config_path=config_path, log=log)


app = system_app
