"""Unit tests for MySQL adapter behavior."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from lazytables.adapters import (
    ConnectionFailedError,
    InvalidParametersError,
    MySQLParams,
    QueryFailedError,
    QueryKind,
    SQLiteParams,
    SessionState,
)
from lazytables.adapters.mysql import MySQLAdapter, quote_identifier


@pytest.fixture
def adapter(settings, pymysql_driver):
    adapter = MySQLAdapter(settings)
    yield adapter
    adapter.disconnect()


class TestMySQLConnect:
    def test_connect_kwargs(self, adapter, pymysql_driver) -> None:
        adapter.connect(MySQLParams(host="db", user="root", password=None, database=""))

        kwargs = pymysql_driver.connect_calls[0]
        assert kwargs["host"] == "db"
        assert kwargs["port"] == 3306
        assert kwargs["user"] == "root"
        assert kwargs["password"] == ""
        assert kwargs["database"] is None
        assert kwargs["autocommit"] is True
        assert kwargs["charset"] == "utf8mb4"
        assert adapter.state is SessionState.CONNECTED

    def test_connect_failure(self, adapter, pymysql_driver) -> None:
        pymysql_driver.fail_connect("(1045, \"Access denied for user 'root'\")")

        with pytest.raises(ConnectionFailedError):
            adapter.connect(MySQLParams(user="root", database="app"))

        assert adapter.get_current_database() == ""
        assert not adapter.is_connected


class TestMySQLCatalog:
    def test_get_databases_hides_system_schemas(self, adapter, pymysql_driver) -> None:
        pymysql_driver.on(
            "SHOW DATABASES",
            columns=["Database"],
            rows=[("app",), ("information_schema",), ("mysql",), ("performance_schema",), ("Sys",), ("shop",)],
        )
        adapter.connect(MySQLParams())

        assert adapter.get_databases() == ["app", "shop"]

    def test_get_table_info_filters_by_current_database(self, adapter, pymysql_driver) -> None:
        pymysql_driver.on(
            "SELECT column_name",
            columns=["column_name", "data_type", "is_nullable", "column_default", "cml", "np", "ns"],
            rows=[("amount", "decimal", "YES", None, None, 12, 4), ("code", "varchar", "NO", "", 16, None, None)],
        )
        adapter.connect(MySQLParams(database="shop"))

        amount, code = adapter.get_table_info("orders")

        assert amount.display_type == "decimal(12,4)"
        assert code.default == ""
        assert code.nullable is False
        _, args, _ = pymysql_driver.executed[-1]
        assert args == ("shop", "orders")

    def test_get_table_info_unrecognized_nullability_is_none(self, adapter, pymysql_driver) -> None:
        pymysql_driver.on(
            "SELECT column_name",
            columns=["column_name", "data_type", "is_nullable", "column_default", "cml", "np", "ns"],
            rows=[("a", "int", "yes", None, None, 10, 0), ("b", "int", "", None, None, 10, 0)],
        )
        adapter.connect(MySQLParams(database="shop"))

        assert [col.nullable for col in adapter.get_table_info("orders")] == [True, None]

    def test_connect_rejects_other_engine_params(self, adapter, pymysql_driver) -> None:
        with pytest.raises(InvalidParametersError, match="expected MySQLParams, got SQLiteParams"):
            adapter.connect(SQLiteParams(database="app.db"))  # type: ignore[arg-type]

        assert pymysql_driver.connect_calls == []


class TestMySQLUseDatabase:
    def test_switch_is_in_place(self, adapter, pymysql_driver) -> None:
        adapter.connect(MySQLParams(database="app"))

        adapter.use_database("shop")

        assert adapter.get_current_database() == "shop"
        assert "USE `shop`" in pymysql_driver.statements()
        assert len(pymysql_driver.connect_calls) == 1

    def test_failed_switch_keeps_previous_database(self, adapter, pymysql_driver) -> None:
        pymysql_driver.on("USE", error="(1049, \"Unknown database 'nope'\")")
        adapter.connect(MySQLParams(database="app"))

        with pytest.raises(QueryFailedError):
            adapter.use_database("nope")

        assert adapter.get_current_database() == "app"
        assert adapter.is_connected

    def test_use_statement_updates_current_database(self, adapter, pymysql_driver) -> None:
        adapter.connect(MySQLParams())

        result = adapter.execute_query("USE `shop`;")

        assert result.kind is QueryKind.USE
        assert result.message == "Database changed to shop"
        assert adapter.get_current_database() == "shop"

    def test_checkout_resyncs_stale_connection(self, adapter, pymysql_driver) -> None:
        adapter.connect(MySQLParams(database="app"))
        adapter.use_database("shop")
        dbapi_conn = pymysql_driver.connect(host="db")
        pooled = SimpleNamespace(info={"lazytables.database": "app"}, dbapi_connection=dbapi_conn)

        adapter._prepare_checkout(pooled)

        assert dbapi_conn.selected_databases == ["shop"]
        assert pooled.info["lazytables.database"] == "shop"

    def test_checkout_skips_in_sync_connection(self, adapter, pymysql_driver) -> None:
        adapter.connect(MySQLParams(database="app"))
        dbapi_conn = pymysql_driver.connect(host="db")
        pooled = SimpleNamespace(info={"lazytables.database": "app"}, dbapi_connection=dbapi_conn)

        adapter._prepare_checkout(pooled)

        assert dbapi_conn.selected_databases == []


class TestMySQLQueries:
    def test_insert_reports_last_insert_id(self, adapter, pymysql_driver) -> None:
        pymysql_driver.on("INSERT", rowcount=1, lastrowid=42)
        adapter.connect(MySQLParams(database="app"))

        result = adapter.execute_query("INSERT INTO t (name) VALUES ('x')")

        assert result.message == "1 rows affected, last insert ID: 42"

    def test_update_omits_last_insert_id(self, adapter, pymysql_driver) -> None:
        pymysql_driver.on("UPDATE", rowcount=5, lastrowid=42)
        adapter.connect(MySQLParams(database="app"))

        assert adapter.execute_query("UPDATE t SET x = 1").message == "5 rows affected"

    def test_describe_returns_rows(self, adapter, pymysql_driver) -> None:
        pymysql_driver.on("DESC", columns=["Field", "Type"], rows=[("id", "int")])
        adapter.connect(MySQLParams(database="app"))

        result = adapter.execute_query("DESC t")

        assert result.kind is QueryKind.DESCRIBE
        assert result.rows == [["id", "int"]]

    def test_cancel_kills_query_from_side_connection(self, adapter, pymysql_driver) -> None:
        params = MySQLParams(host="db", database="app")
        adapter.connect(params)
        running = pymysql_driver.connections[0]

        adapter._cancel_statement(running, params)

        killer = pymysql_driver.connections[-1]
        assert killer is not running
        assert killer.kwargs["database"] is None
        assert killer.closed
        assert f"KILL QUERY {running.thread_id()}" in pymysql_driver.statements()


def test_quote_identifier() -> None:
    assert quote_identifier("my`table") == "`my``table`"
