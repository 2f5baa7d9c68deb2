"""SQLite adapter using built-in sqlite3."""

from __future__ import annotations

import logging
import re
from typing import Any, cast

from lazytables.adapters.base import ColumnInfo, CursorBasedAdapter, format_type_info, resolve_file_path
from lazytables.adapters.driver import DriverDescriptor
from lazytables.adapters.exceptions import QueryFailedError
from lazytables.adapters.params import ConnectionParams, SQLiteParams
from lazytables.adapters.pool import DEFAULT_POOL_LIMITS, SINGLE_CONNECTION_LIMITS, PoolLimits

logger = logging.getLogger(__name__)

MAIN_SCHEMA = "main"

# Declared type with an optional size annotation: VARCHAR(255), NUMERIC(10, 2)
_DECLARED_TYPE = re.compile(r"^\s*(?P<name>[^(]*?)\s*(?:\(\s*(?P<first>\d+)\s*(?:,\s*(?P<second>\d+)\s*)?\))?\s*$")
_CHARACTER_TYPES = ("CHAR", "CLOB", "TEXT")


def quote_identifier(name: str) -> str:
    escaped = name.replace('"', '""')
    return f'"{escaped}"'


def parse_declared_type(declared: str | None) -> tuple[str, str | None]:
    """Split a declared column type into (type name, size annotation)."""
    declared = (declared or "").strip()
    if not declared:
        return "TEXT", None
    match = _DECLARED_TYPE.match(declared)
    if match is None:
        return declared, None
    type_name = match.group("name") or declared
    first, second = match.group("first"), match.group("second")
    if first is None:
        return type_name, None
    if second is None and any(marker in type_name.upper() for marker in _CHARACTER_TYPES):
        return type_name, format_type_info(int(first), None, None)
    return type_name, format_type_info(None, int(first), int(second) if second is not None else None)


class SQLiteAdapter(CursorBasedAdapter):
    """Adapter for SQLite using built-in sqlite3.

    The "databases" of a SQLite session are the schemas attached to it
    (``main`` plus any ATTACHed files). A session always starts on ``main``
    and switches in place between attached schemas.
    """

    params_type = SQLiteParams
    reports_last_insert_id = True
    # sqlite3 interrupt() leaves the connection reusable; discarding it
    # would also discard an in-memory database.
    discard_after_cancel = False

    @property
    def name(self) -> str:
        return "SQLite"

    @property
    def driver(self) -> DriverDescriptor:
        return DriverDescriptor(driver_name=self.name, import_name="sqlite3", extra_name=None, package_name=None)

    @property
    def system_databases(self) -> frozenset[str]:
        return frozenset({"temp"})

    def _pool_limits_for(self, params: ConnectionParams) -> PoolLimits:
        return SINGLE_CONNECTION_LIMITS if cast(SQLiteParams, params).is_memory else DEFAULT_POOL_LIMITS

    def _initial_database(self, params: ConnectionParams) -> str:
        return MAIN_SCHEMA

    def _open_connection(self, dbapi: Any, params: ConnectionParams) -> Any:
        path = ":memory:" if cast(SQLiteParams, params).is_memory else str(resolve_file_path(params.database))
        # check_same_thread=False lets the watchdog thread call interrupt()
        return dbapi.connect(
            path,
            timeout=self.settings.connection_timeout,
            check_same_thread=False,
            isolation_level=None,
            **dict(params.options),
        )

    def _cancel_statement(self, dbapi_connection: Any, params: ConnectionParams) -> None:
        dbapi_connection.interrupt()

    def _attached_schemas(self) -> list[str]:
        _, rows = self._fetch("PRAGMA database_list")
        # PRAGMA database_list returns: seq, name, file
        return [row[1] for row in rows]

    def _fetch_database_names(self) -> list[str]:
        return self._attached_schemas()

    def _fetch_table_names(self) -> list[str]:
        schema = quote_identifier(self._current_database)
        _, rows = self._fetch(
            f"SELECT name FROM {schema}.sqlite_master "
            "WHERE type IN ('table', 'view') AND name NOT LIKE 'sqlite_%' "
            "ORDER BY name"
        )
        return [row[0] for row in rows]

    def _fetch_columns(self, table: str) -> list[ColumnInfo]:
        schema = quote_identifier(self._current_database)
        _, rows = self._fetch(f"PRAGMA {schema}.table_info({quote_identifier(table)})")
        columns = []
        # PRAGMA table_info returns: cid, name, type, notnull, dflt_value, pk
        for row in rows:
            data_type, type_info = parse_declared_type(row[2])
            columns.append(
                ColumnInfo(
                    name=row[1],
                    data_type=data_type,
                    nullable=not row[3],
                    default=None if row[4] is None else str(row[4]),
                    type_info=type_info,
                )
            )
        return columns

    def use_database(self, database: str) -> None:
        name = self._check_database_name(database)
        with self._lock:
            self._require_connection()
            logger.debug(f"Switching to SQLite schema: {name}")
            if name not in self._attached_schemas():
                logger.error(f"Failed to switch to database {name}: not attached")
                raise QueryFailedError(f"Failed to switch to database {name}", engine_message="no such database")
            self._current_database = name
            logger.info(f"Switched to SQLite schema: {name}")
