"""PostgreSQL adapter using psycopg2."""

from __future__ import annotations

import logging
import math
from typing import Any, cast

from lazytables.adapters.base import ColumnInfo, CursorBasedAdapter, format_type_info, parse_nullable
from lazytables.adapters.driver import DriverDescriptor
from lazytables.adapters.exceptions import ConnectionFailedError
from lazytables.adapters.params import ConnectionParams, PostgresParams

logger = logging.getLogger(__name__)

# Maintenance database used when the session is opened at server level.
MAINTENANCE_DATABASE = "postgres"

DATABASES_QUERY = "SELECT datname FROM pg_database WHERE datistemplate = false ORDER BY datname"

TABLES_QUERY = (
    "SELECT table_name FROM information_schema.tables "
    "WHERE table_schema = %s AND table_type = 'BASE TABLE' "
    "ORDER BY table_name"
)

COLUMNS_QUERY = (
    "SELECT column_name, data_type, is_nullable, column_default, "
    "character_maximum_length, numeric_precision, numeric_scale "
    "FROM information_schema.columns "
    "WHERE table_schema = %s AND table_name = %s "
    "ORDER BY ordinal_position"
)


class PostgreSQLAdapter(CursorBasedAdapter):
    """Adapter for PostgreSQL using psycopg2.

    A PostgreSQL connection is bound to one database for its lifetime, so
    switching databases closes the pool and reconnects with a copy of the
    original parameters.
    """

    params_type = PostgresParams
    default_schema = "public"

    @property
    def name(self) -> str:
        return "PostgreSQL"

    @property
    def driver(self) -> DriverDescriptor:
        return DriverDescriptor(
            driver_name=self.name,
            import_name="psycopg2",
            extra_name="postgres",
            package_name="psycopg2-binary",
        )

    @property
    def system_databases(self) -> frozenset[str]:
        return frozenset({"template0", "template1"})

    def _open_connection(self, dbapi: Any, connection_params: ConnectionParams) -> Any:
        params = cast(PostgresParams, connection_params)
        kwargs: dict[str, Any] = {
            "database": params.database or MAINTENANCE_DATABASE,
            "sslmode": params.sslmode or "disable",
            "connect_timeout": max(1, math.ceil(self.settings.connection_timeout)),
        }
        # Empty host/port/user fall through to libpq defaults (peer auth, sockets).
        if params.host:
            kwargs["host"] = params.host
        if params.host or params.port:
            kwargs["port"] = params.effective_port()
        if params.user:
            kwargs["user"] = params.user
        if params.password is not None:
            kwargs["password"] = params.password
        kwargs.update(params.options)

        conn = dbapi.connect(**kwargs)
        # Autocommit avoids "current transaction is aborted" after a failed statement
        conn.autocommit = True
        return conn

    def _cancel_statement(self, dbapi_connection: Any, params: ConnectionParams) -> None:
        dbapi_connection.cancel()

    def _fetch_database_names(self) -> list[str]:
        _, rows = self._fetch(DATABASES_QUERY)
        return [row[0] for row in rows]

    def _fetch_table_names(self) -> list[str]:
        _, rows = self._fetch(TABLES_QUERY, (self.default_schema,))
        return [row[0] for row in rows]

    def _fetch_columns(self, table: str) -> list[ColumnInfo]:
        _, rows = self._fetch(COLUMNS_QUERY, (self.default_schema, table))
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
        """Reconnect to ``database`` with the session's original parameters.

        If the reconnect fails the adapter is left Unconnected; callers must
        open a fresh session.
        """
        name = self._check_database_name(database)
        with self._lock:
            params = self._require_connection()
            logger.debug(f"Switching to PostgreSQL database: {name}")
            self.disconnect()
            try:
                self.connect(params.with_database(name))
            except ConnectionFailedError as e:
                logger.error(f"Failed to connect to database {name}: {e}")
                raise ConnectionFailedError(
                    f"Failed to switch to database {name}", engine_message=e.engine_message
                ) from e
            logger.info(f"Switched to PostgreSQL database: {name}")
