"""CLI commands that run a SELECT and write the rows to a file."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Annotated, Any

import typer

from ...access import OdbcDataAccess
from ...config import ConnectionSettings, load_settings
from ...database import CursorResult, Outcome, TabularResult
from ...export import DelimitedOptions
from ..base import BaseCLI
from ..options import ConfigOption, LogOption, TimeoutOption

export_app = typer.Typer(help="Export query results to delimited, CSV, XML or JSON files.")


class ExportCLI(BaseCLI):
    """CLI helpers for the file exports."""

    def __init__(self) -> None:
        super().__init__("export")

    def export(
        self,
        *,
        fmt: str,
        sql: str,
        output: Path,
        config_path: Path | None,
        timeout: int | None,
        stream: bool,
        log: bool,
        writer: Callable[[OdbcDataAccess, TabularResult | CursorResult], Outcome[bool]],
    ) -> dict[str, Any]:
        """Run ``sql`` and hand its result to ``writer``.

        Args:
            fmt: Format label used in messages and the log file name.
            sql: SELECT statement.
            output: Destination file.
            config_path: Connection profile path.
            timeout: Query timeout override.
            stream: Read rows through a cursor instead of buffering them.
            log: Write a per-run log file under LOGS_DIR.
            writer: Facade call that performs the export.

        Returns:
            Result dictionary with the exported row count and output path.
        """
        return self.handle_cli_operation(
            operation=f"export {fmt}",
            op_callable=lambda: self._export_operation(
                sql=sql,
                settings=load_settings(config_path),
                timeout=timeout,
                stream=stream,
                writer=writer,
                output=output,
            ),
            pre_message=f"Exporting to {output}...",
            log_module=f"export_{fmt}" if log else None,
            log_context={"sql": sql, "output": output, "stream": stream},
        )

    def _export_operation(
        self,
        *,
        sql: str,
        settings: ConnectionSettings,
        timeout: int | None,
        stream: bool,
        writer: Callable[[OdbcDataAccess, TabularResult | CursorResult], Outcome[bool]],
        output: Path,
    ) -> dict[str, Any]:
        query_timeout = settings.timeout if timeout is None else timeout
        with self.connected(settings) as access:
            if stream:
                with access.query_to_cursor(sql, timeout=query_timeout).unwrap() as cursor:
                    outcome = writer(access, cursor)
            else:
                table = access.query_to_table(sql, timeout=query_timeout).unwrap()
                outcome = writer(access, table)
            outcome.unwrap()
            return {
                "success": True,
                "rows": access.last_export_count,
                "message": outcome.message,
                "output": str(output),
            }


cli = ExportCLI()

OutputArgument = Annotated[Path, typer.Argument(help="Output file")]
SqlArgument = Annotated[str, typer.Argument(help="SELECT statement to run")]
ReplaceOption = Annotated[
    bool,
    typer.Option("--replace", help="Overwrite the file instead of appending"),
]
StreamOption = Annotated[
    bool,
    typer.Option("--stream", help="Write rows as they are read instead of buffering"),
]


@export_app.command("delimited")
def delimited_command(
    sql: SqlArgument,
    output: OutputArgument,
    config_path: ConfigOption = None,
    delimiter: Annotated[str, typer.Option("--delimiter", "-d", help="Field delimiter")] = ",",
    quote: Annotated[bool, typer.Option("--quote/--no-quote", help="Quote data fields")] = True,
    remove_line_feeds: Annotated[
        bool,
        typer.Option(
            "--remove-line-feeds/--keep-line-feeds",
            help="Replace CR/LF in values with <CR>/<LF> placeholders",
        ),
    ] = True,
    pad: Annotated[
        bool,
        typer.Option("--pad/--no-pad", help="Follow each delimiter with a space"),
    ] = True,
    headings: Annotated[
        bool,
        typer.Option("--headings/--no-headings", help="Write a header line"),
    ] = True,
    replace: ReplaceOption = False,
    stream: StreamOption = False,
    timeout: TimeoutOption = None,
    log: LogOption = False,
) -> None:
    """Export a query to a delimited text file.

    Appends to an existing file without repeating the header unless
    --replace is given.
    """
    options = DelimitedOptions(
        delimiter=delimiter,
        quote=quote,
        remove_line_feeds=remove_line_feeds,
        pad_delimiter=pad,
        headings=headings,
    )
    cli.export(
        fmt="delimited",
        sql=sql,
        output=output,
        config_path=config_path,
        timeout=timeout,
        stream=stream,
        log=log,
        writer=lambda access, result: access.export_delimited(
            result, output, options, replace=replace
        ),
    )


@export_app.command("csv")
def csv_command(
    sql: SqlArgument,
    output: OutputArgument,
    config_path: ConfigOption = None,
    separator: Annotated[str, typer.Option("--separator", "-s", help="Field separator")] = ",",
    headings: Annotated[
        bool,
        typer.Option("--headings/--no-headings", help="Write a header line"),
    ] = True,
    replace: ReplaceOption = False,
    stream: StreamOption = False,
    timeout: TimeoutOption = None,
    log: LogOption = False,
) -> None:
    """Export a query to a CSV file with every field quoted."""
    cli.export(
        fmt="csv",
        sql=sql,
        output=output,
        config_path=config_path,
        timeout=timeout,
        stream=stream,
        log=log,
        writer=lambda access, result: access.export_csv(
            result, output, separator=separator, headings=headings, replace=replace
        ),
    )


@export_app.command("xml")
def xml_command(
    sql: SqlArgument,
    output: OutputArgument,
    config_path: ConfigOption = None,
    root_name: Annotated[str, typer.Option("--root", help="Root element name")] = "NewDataSet",
    include_schema: Annotated[
        bool,
        typer.Option("--schema", help="Embed an inline XML schema"),
    ] = False,
    timeout: TimeoutOption = None,
    log: LogOption = False,
) -> None:
    """Export a query to an XML document (always rewrites the file)."""
    cli.export(
        fmt="xml",
        sql=sql,
        output=output,
        config_path=config_path,
        timeout=timeout,
        stream=False,
        log=log,
        writer=lambda access, result: access.export_xml(
            result, output, root_name=root_name, include_schema=include_schema
        ),
    )


@export_app.command("json")
def json_command(
    sql: SqlArgument,
    output: OutputArgument,
    config_path: ConfigOption = None,
    wrap: Annotated[
        bool,
        typer.Option("--wrap", help="Wrap the array in an object under --key"),
    ] = False,
    key: Annotated[str, typer.Option("--key", help="Key used with --wrap")] = "records",
    compact: Annotated[bool, typer.Option("--compact", help="No indentation")] = False,
    timeout: TimeoutOption = None,
    log: LogOption = False,
) -> None:
    """Export a query to a JSON array of row objects (always rewrites the file)."""
    cli.export(
        fmt="json",
        sql=sql,
        output=output,
        config_path=config_path,
        timeout=timeout,
        stream=False,
        log=log,
        writer=lambda access, result: access.export_json(
            result, output, wrap=wrap, key=key, indent=not compact
        ),
    )


app = export_app
