"""End-to-end tests for the SQLite adapter against real database files."""

from __future__ import annotations

from pathlib import Path

import pytest

from lazytables.adapters import (
    NULL,
    ConnectionFailedError,
    InvalidParametersError,
    NotConnectedError,
    QueryFailedError,
    QueryKind,
    QueryTimeoutError,
    SessionState,
    SQLiteParams,
)
from lazytables.adapters.base import RESULT_COLUMN
from lazytables.adapters.sqlite import SQLiteAdapter, parse_declared_type


@pytest.fixture
def adapter(settings, sqlite_db_path: Path):
    adapter = SQLiteAdapter(settings)
    adapter.connect(SQLiteParams(database=str(sqlite_db_path)))
    adapter.execute_query(
        "CREATE TABLE products ("
        " id INTEGER PRIMARY KEY,"
        " name VARCHAR(255) NOT NULL DEFAULT 'unnamed',"
        " price NUMERIC(10,2),"
        " notes TEXT)"
    )
    yield adapter
    adapter.disconnect()


class TestLifecycle:
    def test_connect_selects_main(self, adapter: SQLiteAdapter) -> None:
        assert adapter.state is SessionState.DATABASE_SELECTED
        assert adapter.get_current_database() == "main"

    def test_disconnect_is_idempotent(self, adapter: SQLiteAdapter) -> None:
        adapter.disconnect()
        adapter.disconnect()
        assert adapter.state is SessionState.UNCONNECTED
        assert adapter.get_current_database() == ""

    def test_disconnect_without_connect(self, settings) -> None:
        SQLiteAdapter(settings).disconnect()

    def test_operations_require_connection(self, settings) -> None:
        adapter = SQLiteAdapter(settings)
        with pytest.raises(NotConnectedError):
            adapter.execute_query("SELECT 1")
        with pytest.raises(NotConnectedError):
            adapter.get_databases()
        with pytest.raises(NotConnectedError):
            adapter.get_tables()

    def test_unopenable_file_fails_to_connect(self, settings, tmp_path: Path) -> None:
        adapter = SQLiteAdapter(settings)
        with pytest.raises(ConnectionFailedError):
            adapter.connect(SQLiteParams(database=str(tmp_path / "missing" / "dir" / "x.db")))
        assert adapter.get_current_database() == ""
        assert adapter.state is SessionState.UNCONNECTED

    def test_wrong_params_type_is_rejected(self, settings) -> None:
        from lazytables.adapters import PostgresParams

        with pytest.raises(InvalidParametersError):
            SQLiteAdapter(settings).connect(PostgresParams(database="x"))

    def test_context_manager_disconnects(self, settings, sqlite_db_path: Path) -> None:
        with SQLiteAdapter(settings) as adapter:
            adapter.connect(SQLiteParams(database=str(sqlite_db_path)))
            assert adapter.is_connected
        assert not adapter.is_connected

    def test_reconnect_replaces_session(self, adapter: SQLiteAdapter, tmp_path: Path) -> None:
        other = tmp_path / "other.db"
        adapter.connect(SQLiteParams(database=str(other)))
        assert adapter.params is not None
        assert adapter.params.database == str(other)
        assert adapter.get_tables() == []


class TestQueries:
    def test_effect_statement_returns_message_row(self, adapter: SQLiteAdapter) -> None:
        result = adapter.execute_query("INSERT INTO products (name, price) VALUES ('widget', 9.99)")
        assert result.kind is QueryKind.INSERT
        assert result.columns == [RESULT_COLUMN]
        assert result.rows == [["1 rows affected, last insert ID: 1"]]
        assert result.message == "1 rows affected, last insert ID: 1"

    def test_delete_does_not_report_insert_id(self, adapter: SQLiteAdapter) -> None:
        adapter.execute_query("INSERT INTO products (name) VALUES ('a')")
        result = adapter.execute_query("DELETE FROM products")
        assert result.message == "1 rows affected"

    def test_select_returns_normalized_rows(self, adapter: SQLiteAdapter) -> None:
        adapter.execute_query("INSERT INTO products (name, price) VALUES ('widget', 2.5)")
        result = adapter.execute_query("SELECT id, name, price, notes FROM products")
        assert result.columns == ["id", "name", "price", "notes"]
        assert result.rows == [[1, "widget", 2.5, NULL]]
        assert result.message == "1 rows returned"
        assert result.row_count == 1

    def test_empty_select(self, adapter: SQLiteAdapter) -> None:
        result = adapter.execute_query("SELECT * FROM products")
        assert result.rows == []
        assert result.message == "0 rows returned"
        assert result.columns == ["id", "name", "price", "notes"]

    def test_blobs(self, adapter: SQLiteAdapter) -> None:
        result = adapter.execute_query("SELECT zeroblob(10) AS raw, CAST('hello' AS BLOB) AS text_blob")
        assert result.rows == [["[BINARY DATA 10 bytes]", "hello"]]

    def test_syntax_error_is_query_failed(self, adapter: SQLiteAdapter) -> None:
        with pytest.raises(QueryFailedError) as exc_info:
            adapter.execute_query("SELECT * FROM no_such_table")
        assert "no_such_table" in (exc_info.value.engine_message or "")

    def test_session_survives_failed_query(self, adapter: SQLiteAdapter) -> None:
        with pytest.raises(QueryFailedError):
            adapter.execute_query("INSERT INTO nope VALUES (1)")
        assert adapter.execute_query("SELECT 1").rows == [[1]]

    def test_long_query_times_out(self, fast_timeout_settings, sqlite_db_path: Path) -> None:
        adapter = SQLiteAdapter(fast_timeout_settings)
        adapter.connect(SQLiteParams(database=str(sqlite_db_path)))
        try:
            with pytest.raises(QueryTimeoutError):
                adapter.execute_query(
                    "SELECT max(x) FROM (WITH RECURSIVE c(x) AS "
                    "(SELECT 1 UNION ALL SELECT x + 1 FROM c LIMIT 500000000) SELECT x FROM c)"
                )
            assert adapter.execute_query("SELECT 1").rows == [[1]]
        finally:
            adapter.disconnect()


class TestCatalog:
    def test_tables_include_views(self, adapter: SQLiteAdapter) -> None:
        adapter.execute_query("CREATE VIEW cheap AS SELECT * FROM products WHERE price < 5")
        assert adapter.get_tables() == ["cheap", "products"]

    def test_table_info(self, adapter: SQLiteAdapter) -> None:
        columns = {col.name: col for col in adapter.get_table_info("products")}

        price = columns["price"]
        assert price.data_type == "NUMERIC"
        assert price.type_info == "(10,2)"
        assert price.nullable is True
        assert price.default is None

        name = columns["name"]
        assert name.data_type == "VARCHAR"
        assert name.type_info == "(255)"
        assert name.nullable is False
        assert name.default == "'unnamed'"

        assert columns["notes"].type_info is None

    def test_empty_table_name_is_rejected(self, adapter: SQLiteAdapter) -> None:
        with pytest.raises(InvalidParametersError):
            adapter.get_table_info("")

    def test_databases_are_attached_schemas(self, adapter: SQLiteAdapter, tmp_path: Path) -> None:
        assert adapter.get_databases() == ["main"]
        adapter.execute_query(f"ATTACH DATABASE '{tmp_path / 'extra.db'}' AS extra")
        assert adapter.get_databases() == ["main", "extra"]

    def test_use_database_switches_schema(self, adapter: SQLiteAdapter, tmp_path: Path) -> None:
        adapter.execute_query(f"ATTACH DATABASE '{tmp_path / 'extra.db'}' AS extra")
        adapter.execute_query("CREATE TABLE extra.events (id INTEGER)")

        adapter.use_database("extra")

        assert adapter.get_current_database() == "extra"
        assert adapter.get_tables() == ["events"]

    def test_use_statement_routes_through_use_database(self, adapter: SQLiteAdapter) -> None:
        result = adapter.execute_query("USE main")
        assert result.message == "Database changed to main"
        assert adapter.get_current_database() == "main"

    def test_use_unknown_database_keeps_selection(self, adapter: SQLiteAdapter) -> None:
        with pytest.raises(QueryFailedError):
            adapter.use_database("nope")
        assert adapter.get_current_database() == "main"

    def test_use_empty_database_is_rejected(self, adapter: SQLiteAdapter) -> None:
        with pytest.raises(InvalidParametersError):
            adapter.use_database("  ")


class TestMemoryDatabase:
    def test_data_persists_across_calls(self, settings) -> None:
        with SQLiteAdapter(settings) as adapter:
            adapter.connect(SQLiteParams(database=":memory:"))
            adapter.execute_query("CREATE TABLE t (x INTEGER)")
            adapter.execute_query("INSERT INTO t VALUES (1), (2)")
            assert adapter.execute_query("SELECT count(*) FROM t").rows == [[2]]


@pytest.mark.parametrize(
    ("declared", "expected"),
    [
        ("NUMERIC(10,2)", ("NUMERIC", "(10,2)")),
        ("DECIMAL(10, 0)", ("DECIMAL", "(10)")),
        ("VARCHAR(255)", ("VARCHAR", "(255)")),
        ("NVARCHAR(40)", ("NVARCHAR", "(40)")),
        ("INTEGER", ("INTEGER", None)),
        ("", ("TEXT", None)),
        (None, ("TEXT", None)),
    ],
)
def test_parse_declared_type(declared, expected) -> None:
    assert parse_declared_type(declared) == expected
