"""CLI commands for table existence checks and drops."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

import typer

from ...config import load_settings
from ..base import BaseCLI
from ..options import ConfigOption

table_app = typer.Typer(help="Table helpers (exists, drop).")


class TableCLI(BaseCLI):
    """CLI helpers for table management."""

    def __init__(self) -> None:
        super().__init__("table")

    def exists(self, *, schema: str, table: str, config_path: Path | None) -> dict[str, Any]:
        """Check whether ``schema.table`` exists.

        Returns:
            Result dictionary; ``exists`` holds the answer and ``success``
            is False when the table is missing.
        """
        return self.handle_cli_operation(
            operation=f"table exists {schema}.{table}",
            op_callable=lambda: self._exists_operation(
                schema=schema, table=table, config_path=config_path
            ),
        )

    def drop(self, *, schema: str, table: str, config_path: Path | None) -> dict[str, Any]:
        return self.handle_cli_operation(
            operation=f"table drop {schema}.{table}",
            op_callable=lambda: self._drop_operation(
                schema=schema, table=table, config_path=config_path
            ),
            pre_message=f"Dropping {schema}.{table}...",
            success_message=f"Dropped {schema}.{table}",
        )

    def _exists_operation(
        self,
        *,
        schema: str,
        table: str,
        config_path: Path | None,
    ) -> dict[str, Any]:
        with self.connected(load_settings(config_path)) as access:
            outcome = access.table_exists(schema, table)
            exists = outcome.unwrap()
        return {"success": exists, "exists": exists, "message": outcome.message}

    def _drop_operation(
        self,
        *,
        schema: str,
        table: str,
        config_path: Path | None,
    ) -> dict[str, Any]:
        with self.connected(load_settings(config_path)) as access:
            outcome = access.drop_table(schema, table)
            outcome.unwrap()
        return {"success": True, "message": outcome.message}


cli = TableCLI()

SchemaArgument = Annotated[str, typer.Argument(help="Schema (library) name")]
TableArgument = Annotated[str, typer.Argument(help="Table (file) name")]


@table_app.command("exists")
def exists_command(
    schema: SchemaArgument,
    table: TableArgument,
    config_path: ConfigOption = None,
) -> None:
    """Check whether a table exists.

    Exits with code 1 if the table does not exist or the check fails, so
    the command can be used in shell conditions.
    """
    result = cli.exists(schema=schema, table=table, config_path=config_path)
    if not result.get("exists"):
        raise typer.Exit(1)


@table_app.command("drop")
def drop_command(
    schema: SchemaArgument,
    table: TableArgument,
    config_path: ConfigOption = None,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask for confirmation")] = False,
) -> None:
    """Drop a table.

    Exits with code 1 if the driver rejects the DROP TABLE statement.
    """
    if not yes:
        typer.confirm(f"Drop table {schema}.{table}?", abort=True)
    cli.drop(schema=schema, table=table, config_path=config_path)


app = table_app
