"""Tests for the Typer CLI."""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path

import pytest
from typer.testing import CliRunner

from ibmi_odbc.cli.main import app

runner = CliRunner()


@pytest.fixture
def missing_config(project_root: Path) -> str:
    return str(project_root / "config" / "connection.yaml")


@pytest.fixture
def sqlite_cli(customers_db: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Route CLI connections to the SQLite customers database."""
    monkeypatch.setenv("IBMI_CONNECTION_STRING", "DSN=TEST")
    monkeypatch.setattr(
        "ibmi_odbc.database.connection._pyodbc_connect",
        lambda _connection_string: sqlite3.connect(customers_db),
    )
    return customers_db


@pytest.fixture
def fake_cli(fake_driver, monkeypatch: pytest.MonkeyPatch):
    """Route CLI connections to the fake driver."""
    monkeypatch.setenv("IBMI_CONNECTION_STRING", "DSN=FAKE")
    monkeypatch.setattr("ibmi_odbc.database.connection._pyodbc_connect", fake_driver.connect)
    return fake_driver


@pytest.mark.integration
class TestQueryCommands:
    def test_run_json(self, sqlite_cli: Path, missing_config: str) -> None:
        result = runner.invoke(
            app,
            ["query", "run", "SELECT ID, NAME FROM customers ORDER BY ID", "-c", missing_config, "-f", "json"],
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert [row["NAME"] for row in data] == ["Smith", "O'Brien", "Jones"]

    def test_run_table(self, sqlite_cli: Path, missing_config: str) -> None:
        result = runner.invoke(
            app, ["query", "run", "SELECT ID, NAME FROM customers", "-c", missing_config]
        )
        assert result.exit_code == 0, result.output
        assert "Smith" in result.stdout
        assert "NAME" in result.stdout

    def test_run_delimited_with_limit(self, sqlite_cli: Path, missing_config: str) -> None:
        result = runner.invoke(
            app,
            [
                "query", "run", "SELECT ID, NAME FROM customers ORDER BY ID",
                "-c", missing_config, "--format", "delimited", "--offset", "1", "--limit", "1",
            ],
        )
        assert result.exit_code == 0, result.output
        assert result.stdout == 'ID, NAME\n"2", "O\'Brien"\n'

    def test_run_rejects_non_select(self, sqlite_cli: Path, missing_config: str) -> None:
        result = runner.invoke(app, ["query", "run", "DELETE FROM customers", "-c", missing_config])
        assert result.exit_code == 1

    def test_exec(self, sqlite_cli: Path, missing_config: str) -> None:
        result = runner.invoke(
            app, ["query", "exec", "UPDATE customers SET NOTE = 'x'", "-c", missing_config]
        )
        assert result.exit_code == 0, result.output
        assert "affected: 3" in result.stdout

    def test_exec_rejects_select(self, sqlite_cli: Path, missing_config: str) -> None:
        result = runner.invoke(app, ["query", "exec", "SELECT 1", "-c", missing_config])
        assert result.exit_code == 1

    def test_missing_credentials(self, missing_config: str) -> None:
        result = runner.invoke(app, ["query", "run", "SELECT 1", "-c", missing_config])
        assert result.exit_code == 1


@pytest.mark.integration
class TestExportCommands:
    def test_delimited(self, sqlite_cli: Path, missing_config: str, project_root: Path) -> None:
        out = project_root / "exports" / "customers.txt"
        result = runner.invoke(
            app,
            ["export", "delimited", "SELECT ID, NAME FROM customers ORDER BY ID", str(out), "-c", missing_config],
        )
        assert result.exit_code == 0, result.output
        assert "rows: 3" in result.stdout
        assert out.read_text(encoding="utf-8").splitlines()[0] == "ID, NAME"

    def test_delimited_stream_options(
        self, sqlite_cli: Path, missing_config: str, project_root: Path
    ) -> None:
        out = project_root / "exports" / "customers.txt"
        result = runner.invoke(
            app,
            [
                "export", "delimited", "SELECT ID FROM customers ORDER BY ID", str(out),
                "-c", missing_config, "--no-quote", "--no-headings", "--stream",
            ],
        )
        assert result.exit_code == 0, result.output
        assert out.read_text(encoding="utf-8") == "1\n2\n3\n"

    def test_csv(self, sqlite_cli: Path, missing_config: str, project_root: Path) -> None:
        out = project_root / "exports" / "customers.csv"
        result = runner.invoke(
            app, ["export", "csv", "SELECT ID FROM customers ORDER BY ID", str(out), "-c", missing_config]
        )
        assert result.exit_code == 0, result.output
        assert out.read_text(encoding="utf-8") == '"ID"\n"1"\n"2"\n"3"\n'

    def test_json_wrapped(self, sqlite_cli: Path, missing_config: str, project_root: Path) -> None:
        out = project_root / "exports" / "customers.json"
        result = runner.invoke(
            app,
            ["export", "json", "SELECT ID FROM customers", str(out), "-c", missing_config, "--wrap"],
        )
        assert result.exit_code == 0, result.output
        assert len(json.loads(out.read_text(encoding="utf-8"))["records"]) == 3

    def test_xml_with_log(
        self,
        sqlite_cli: Path,
        missing_config: str,
        project_root: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        logs_dir = project_root / "logs"
        monkeypatch.setattr("ibmi_odbc.cli.base.LOGS_DIR", logs_dir)
        out = project_root / "exports" / "customers.xml"
        result = runner.invoke(
            app,
            ["export", "xml", "SELECT ID FROM customers", str(out), "-c", missing_config, "--log"],
        )
        assert result.exit_code == 0, result.output
        assert out.read_text(encoding="utf-8").startswith("<?xml")
        log_files = list(logs_dir.glob("*_export_xml.log"))
        assert len(log_files) == 1
        assert "sql: SELECT ID FROM customers" in log_files[0].read_text(encoding="utf-8")


@pytest.mark.unit
class TestTableAndSystemCommands:
    def test_exists(self, fake_cli, missing_config: str) -> None:
        fake_cli.connection.columns = [("ID", int)]
        result = runner.invoke(app, ["table", "exists", "MYLIB", "T", "-c", missing_config])
        assert result.exit_code == 0, result.output
        assert "exists" in result.stdout

    def test_exists_missing_exits_nonzero(self, fake_cli, missing_config: str) -> None:
        fake_cli.connection.error = Exception("42704", "not found")
        result = runner.invoke(app, ["table", "exists", "MYLIB", "T", "-c", missing_config])
        assert result.exit_code == 1
        assert "Table MYLIB.T does not exist." in result.stdout

    def test_drop(self, fake_cli, missing_config: str) -> None:
        result = runner.invoke(app, ["table", "drop", "MYLIB", "T", "--yes", "-c", missing_config])
        assert result.exit_code == 0, result.output
        assert fake_cli.connection.executed == ["DROP TABLE MYLIB.T"]

    def test_drop_aborts_without_confirmation(self, fake_cli, missing_config: str) -> None:
        result = runner.invoke(
            app, ["table", "drop", "MYLIB", "T", "-c", missing_config], input="n\n"
        )
        assert result.exit_code == 1
        assert fake_cli.connection.executed == []

    def test_system_command(self, fake_cli, missing_config: str) -> None:
        result = runner.invoke(
            app, ["system", "command", "CRTLIB LIB(TEMP)", "-l", "QSYS", "-c", missing_config]
        )
        assert result.exit_code == 0, result.output
        assert fake_cli.connection.executed == [
            "CALL QSYS.QCMDEXC('CRTLIB LIB(TEMP)', 0000000016.00000)"
        ]
        assert fake_cli.connection.closed
