"""Tests for connection string building and session lifecycle."""

from __future__ import annotations

import pytest

from ibmi_odbc.database import (
    InvalidArgumentError,
    NotConnectedError,
    Session,
    build_connection_string,
    open_session,
    query_timeout,
    quote_connection_value,
)
from ibmi_odbc.global_config import DEFAULT_CONNECTION_TEMPLATE

TEMPLATE = "Driver={IBM i Access ODBC Driver};System=@@SYSTEM;Uid=@@USERID;Pwd=@@PASS"


@pytest.mark.unit
class TestBuildConnectionString:
    def test_fills_all_placeholders(self) -> None:
        result = build_connection_string(TEMPLATE, "myibmi", "QUSER", "secret")
        assert result == "Driver={IBM i Access ODBC Driver};System=myibmi;Uid=QUSER;Pwd=secret"

    def test_default_template_has_no_placeholders_left(self) -> None:
        result = build_connection_string(DEFAULT_CONNECTION_TEMPLATE, "10.0.0.1", "QUSER", "pw")
        assert "@@" not in result
        assert "System=10.0.0.1" in result

    def test_values_are_trimmed(self) -> None:
        result = build_connection_string(TEMPLATE, " myibmi ", " QUSER", "secret ")
        assert "System=myibmi;" in result
        assert "Uid=QUSER;" in result
        assert result.endswith("Pwd=secret")

    def test_special_characters_are_brace_quoted(self) -> None:
        result = build_connection_string(TEMPLATE, "myibmi", "QUSER", "p;w}d")
        assert result.endswith("Pwd={p;w}}d}")

    @pytest.mark.parametrize(
        ("system", "user", "password", "message"),
        [
            ("", "QUSER", "pw", "System name/host ip address is required."),
            ("myibmi", "  ", "pw", "User id is required."),
            ("myibmi", "QUSER", "", "Password is required."),
        ],
    )
    def test_blank_credentials_are_rejected(
        self, system: str, user: str, password: str, message: str
    ) -> None:
        with pytest.raises(InvalidArgumentError, match=message):
            build_connection_string(TEMPLATE, system, user, password)


@pytest.mark.unit
def test_quote_connection_value_leaves_plain_values_alone() -> None:
    assert quote_connection_value("plain-value") == "plain-value"
    assert quote_connection_value("a{b") == "{a{b}"


@pytest.mark.unit
class TestSession:
    def test_open_and_close_update_status(self, fake_driver) -> None:
        session = Session("DSN=FAKE", connect=fake_driver.connect)
        assert not session.is_open()

        session.open()
        assert session.is_open()
        assert session.status == "Connection opened successfully."
        assert fake_driver.connection_strings == ["DSN=FAKE"]

        session.close()
        assert not session.is_open()
        assert session.status == "Connection closed successfully."
        assert fake_driver.connection.closed

    def test_close_is_idempotent(self, fake_driver) -> None:
        session = Session("DSN=FAKE", connect=fake_driver.connect)
        session.close()
        session.open()
        session.close()
        session.close()
        assert not session.is_open()

    def test_open_without_connection_string_fails(self, fake_driver) -> None:
        session = Session(connect=fake_driver.connect)
        with pytest.raises(InvalidArgumentError, match="No database connection string has been set."):
            session.open()
        assert not session.is_open()
        assert fake_driver.connection_strings == []

    def test_open_argument_replaces_stored_string(self, fake_driver) -> None:
        session = Session("DSN=OLD", connect=fake_driver.connect)
        session.open("DSN=NEW")
        assert session.connection_string == "DSN=NEW"
        assert fake_driver.connection_strings == ["DSN=NEW"]

    def test_open_with_credentials_uses_template(self, fake_driver) -> None:
        session = Session(template=TEMPLATE, connect=fake_driver.connect)
        session.open_with_credentials("myibmi", "QUSER", "secret")
        assert fake_driver.connection_strings == [
            "Driver={IBM i Access ODBC Driver};System=myibmi;Uid=QUSER;Pwd=secret"
        ]

    def test_open_with_blank_credentials_never_contacts_driver(self, fake_driver) -> None:
        session = Session(template=TEMPLATE, connect=fake_driver.connect)
        with pytest.raises(InvalidArgumentError):
            session.open_with_credentials("myibmi", "", "secret")
        assert fake_driver.connection_strings == []

    def test_driver_failure_leaves_session_closed(self, fake_driver) -> None:
        fake_driver.error = RuntimeError("communication link failure")
        session = Session("DSN=FAKE", connect=fake_driver.connect)
        with pytest.raises(RuntimeError):
            session.open()
        assert not session.is_open()

    def test_require_connection_when_closed(self) -> None:
        with pytest.raises(NotConnectedError, match="Database connection not open."):
            Session("DSN=FAKE").require_connection()


@pytest.mark.unit
def test_open_session_closes_on_exit(fake_driver) -> None:
    with open_session("DSN=FAKE", connect=fake_driver.connect) as session:
        assert session.is_open()
    assert not session.is_open()
    assert fake_driver.connection.closed


@pytest.mark.unit
class TestQueryTimeout:
    def test_sets_and_restores(self, fake_conn) -> None:
        fake_conn.timeout = 5
        with query_timeout(fake_conn, 30):
            assert fake_conn.timeout == 30
        assert fake_conn.timeout == 5

    def test_restores_after_error(self, fake_conn) -> None:
        fake_conn.timeout = 5
        with pytest.raises(RuntimeError), query_timeout(fake_conn, 0):
            assert fake_conn.timeout == 0
            raise RuntimeError("boom")
        assert fake_conn.timeout == 5

    def test_negative_keeps_driver_default(self, fake_conn) -> None:
        fake_conn.timeout = 5
        with query_timeout(fake_conn, -1):
            assert fake_conn.timeout == 5
        assert fake_conn.timeout == 5
