"""MySQL adapter using PyMySQL (pure Python)."""

from __future__ import annotations

import logging
from typing import Any, cast

from lazytables.adapters.base import ColumnInfo, CursorBasedAdapter, format_type_info, parse_nullable
from lazytables.adapters.driver import DriverDescriptor
from lazytables.adapters.params import ConnectionParams, MySQLParams

logger = logging.getLogger(__name__)

COLUMNS_QUERY = (
    "SELECT column_name, data_type, is_nullable, column_default, "
    "character_maximum_length, numeric_precision, numeric_scale "
    "FROM information_schema.columns "
    "WHERE table_schema = %s AND table_name = %s "
    "ORDER BY ordinal_position"
)

# Pooled connection info key holding the database the connection is using.
_DATABASE_INFO_KEY = "lazytables.database"


def quote_identifier(name: str) -> str:
    """Quote identifier using backticks for MySQL.

    Escapes embedded backticks by doubling them.
    """
    escaped = name.replace("`", "``")
    return f"`{escaped}`"


class MySQLAdapter(CursorBasedAdapter):
    """Adapter for MySQL using PyMySQL.

    MySQL switches databases in place with ``USE``. The switch runs on one
    pooled connection; the others pick up the new database the next time
    they are checked out.
    """

    params_type = MySQLParams
    reports_last_insert_id = True

    @property
    def name(self) -> str:
        return "MySQL"

    @property
    def driver(self) -> DriverDescriptor:
        return DriverDescriptor(
            driver_name=self.name,
            import_name="pymysql",
            extra_name="mysql",
            package_name="PyMySQL",
        )

    @property
    def system_databases(self) -> frozenset[str]:
        return frozenset({"information_schema", "performance_schema", "mysql", "sys"})

    def _open_connection(self, dbapi: Any, connection_params: ConnectionParams) -> Any:
        params = cast(MySQLParams, connection_params)
        kwargs: dict[str, Any] = {
            "host": params.host or "localhost",
            "port": params.effective_port(),
            "user": params.user or None,
            "password": params.password or "",
            "database": params.database or None,
            "connect_timeout": self.settings.connection_timeout,
            "autocommit": True,
            "charset": params.charset or "utf8mb4",
        }
        kwargs.update(params.options)
        return dbapi.connect(**kwargs)

    def _cancel_statement(self, dbapi_connection: Any, params: ConnectionParams) -> None:
        # KILL QUERY must come from a separate connection to the same server.
        thread_id = int(dbapi_connection.thread_id())
        killer = self._open_connection(self._dbapi, params.with_database(""))
        try:
            cursor = killer.cursor()
            try:
                cursor.execute(f"KILL QUERY {thread_id}")
            finally:
                cursor.close()
        finally:
            killer.close()

    def _prepare_checkout(self, conn: Any) -> None:
        wanted = self._current_database
        if wanted and conn.info.get(_DATABASE_INFO_KEY) != wanted:
            conn.dbapi_connection.select_db(wanted)
            conn.info[_DATABASE_INFO_KEY] = wanted

    def _fetch_database_names(self) -> list[str]:
        _, rows = self._fetch("SHOW DATABASES")
        return [row[0] for row in rows]

    def _fetch_table_names(self) -> list[str]:
        _, rows = self._fetch("SHOW TABLES")
        return [row[0] for row in rows]

    def _fetch_columns(self, table: str) -> list[ColumnInfo]:
        _, rows = self._fetch(COLUMNS_QUERY, (self._current_database, table))
        return [
            ColumnInfo(
                name=row[0],
                data_type=row[1],
                nullable=parse_nullable(row[2]),
                default=row[3],
                type_info=format_type_info(row[4], row[5], row[6]),
            )
            for row in rows
        ]

    def use_database(self, database: str) -> None:
        """Switch the active database in place.

        On failure the previous selection stays in effect.
        """
        name = self._check_database_name(database)
        with self._lock:
            self._require_connection()
            logger.debug(f"Switching to MySQL database: {name}")

            def operation(conn: Any) -> None:
                cursor = conn.cursor()
                try:
                    cursor.execute(f"USE {quote_identifier(name)}")
                finally:
                    cursor.close()
                conn.info[_DATABASE_INFO_KEY] = name

            try:
                self._with_connection(operation)
            except Exception as e:
                logger.error(f"Failed to switch to database {name}: {e}")
                raise
            self._current_database = name
            logger.info(f"Switched to MySQL database: {name}")
