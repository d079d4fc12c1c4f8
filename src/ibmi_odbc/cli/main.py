from __future__ import annotations

import typer

from .base import configure_logging
from .commands.export import app as export_app
from .commands.query import app as query_app
from .commands.system import app as system_app
from .commands.table import app as table_app

configure_logging()
app = typer.Typer(
    help="IBM i ODBC data access CLI",
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.add_typer(query_app, name="query")
app.add_typer(export_app, name="export")
app.add_typer(table_app, name="table")
app.add_typer(system_app, name="system")


def main() -> None:
    """Main entry point for package CLI.

    Invokes the Typer application, which handles command parsing and
    execution.

    Side Effects:
        - Processes CLI arguments and executes commands.
        - May exit with non-zero code on errors.
    """
    app()


if __name__ == "__main__":
    main()
