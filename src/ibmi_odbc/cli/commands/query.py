"""CLI commands for running SQL against the configured IBM i system."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.table import Table

from ...config import load_settings
from ...database.results import TabularResult, to_text
from ...export import DelimitedOptions, to_csv_string
from ..base import BaseCLI
from ..options import ConfigOption, TimeoutOption

query_app = typer.Typer(help="Run SELECT queries and other statements.")


class OutputFormat(str, Enum):
    table = "table"
    delimited = "delimited"
    csv = "csv"
    json = "json"
    xml = "xml"


def render_table(result: TabularResult, console: Console | None = None) -> None:
    """Print a buffered result as a rich table."""
    console = console or Console()
    table = Table(title=result.name, show_lines=False)
    for name in result.column_names:
        table.add_column(name.strip())
    for row in result.rows:
        table.add_row(*(to_text(value) for value in row))
    console.print(table)


class QueryCLI(BaseCLI):
    """CLI helpers for query execution."""

    def __init__(self) -> None:
        super().__init__("query")

    def run_query(
        self,
        *,
        sql: str,
        config_path: Path | None,
        offset: int,
        limit: int,
        output_format: OutputFormat,
        timeout: int | None,
    ) -> dict[str, Any]:
        """Run a SELECT and print its rows in the requested format.

        User Output:
            - The rendered rows on stdout, followed by nothing else so the
              output can be piped.
        """
        return self.handle_cli_operation(
            operation="query run",
            op_callable=lambda: self._run_operation(
                sql=sql,
                config_path=config_path,
                offset=offset,
                limit=limit,
                output_format=output_format,
                timeout=timeout,
            ),
            quiet=True,
        )

    def exec_statement(
        self,
        *,
        sql: str,
        config_path: Path | None,
        allow_select: bool,
        timeout: int | None,
    ) -> dict[str, Any]:
        return self.handle_cli_operation(
            operation="query exec",
            op_callable=lambda: self._exec_operation(
                sql=sql,
                config_path=config_path,
                allow_select=allow_select,
                timeout=timeout,
            ),
        )

    def _run_operation(
        self,
        *,
        sql: str,
        config_path: Path | None,
        offset: int,
        limit: int,
        output_format: OutputFormat,
        timeout: int | None,
    ) -> dict[str, Any]:
        settings = load_settings(config_path)
        with self.connected(settings) as access:
            result = access.query_to_table(
                sql,
                offset=offset,
                limit=limit,
                timeout=settings.timeout if timeout is None else timeout,
            ).unwrap()

            if output_format is OutputFormat.table:
                render_table(result)
            elif output_format is OutputFormat.delimited:
                typer.echo(access.to_delimited_string(result, DelimitedOptions()).unwrap(), nl=False)
            elif output_format is OutputFormat.csv:
                typer.echo(to_csv_string(result), nl=False)
            elif output_format is OutputFormat.json:
                typer.echo(access.to_json(result).unwrap())
            else:
                typer.echo(access.to_xml(result).unwrap())

        return {"success": True, "rows": result.row_count, "columns": result.column_count}

    def _exec_operation(
        self,
        *,
        sql: str,
        config_path: Path | None,
        allow_select: bool,
        timeout: int | None,
    ) -> dict[str, Any]:
        settings = load_settings(config_path)
        with self.connected(settings) as access:
            affected = access.execute_non_query(
                sql,
                timeout=settings.timeout if timeout is None else timeout,
                allow_select=allow_select,
            ).unwrap()
        return {"success": True, "affected": affected}


cli = QueryCLI()


@query_app.command("run")
def run_command(
    sql: Annotated[str, typer.Argument(help="SELECT statement to run")],
    config_path: ConfigOption = None,
    offset: Annotated[int, typer.Option("--offset", min=0, help="Rows to skip")] = 0,
    limit: Annotated[int, typer.Option("--limit", min=0, help="Maximum rows (0 = all)")] = 0,
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format"),
    ] = OutputFormat.table,
    timeout: TimeoutOption = None,
) -> None:
    """Run a SELECT query and print the result.

    Only statements starting with SELECT are accepted. Exits with code 1 if
    the connection or the query fails.
    """
    cli.run_query(
        sql=sql,
        config_path=config_path,
        offset=offset,
        limit=limit,
        output_format=output_format,
        timeout=timeout,
    )


@query_app.command("exec")
def exec_command(
    sql: Annotated[str, typer.Argument(help="Statement to execute")],
    config_path: ConfigOption = None,
    allow_select: Annotated[
        bool,
        typer.Option("--allow-select", help="Permit SELECT text (rows are discarded)"),
    ] = False,
    timeout: TimeoutOption = None,
) -> None:
    """Execute an INSERT, UPDATE, DELETE, DDL or CALL statement.

    Prints the affected row count reported by the driver.
    """
    cli.exec_statement(
        sql=sql,
        config_path=config_path,
        allow_select=allow_select,
        timeout=timeout,
    )


app = query_app
