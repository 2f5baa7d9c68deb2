"""Base class and common types for database adapters."""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import TracebackType
from typing import Any, ClassVar, TypeVar, cast

from sqlalchemy import exc as sa_exc
from sqlalchemy.pool import Pool

from lazytables.adapters.classifier import QueryKind, classify_query, parse_use_statement
from lazytables.adapters.driver import DriverDescriptor, load_driver
from lazytables.adapters.exceptions import (
    AdapterError,
    ConnectionFailedError,
    InvalidParametersError,
    NoDatabaseSelectedError,
    NotConnectedError,
    QueryFailedError,
    QueryTimeoutError,
)
from lazytables.adapters.normalize import Cell, normalize_row
from lazytables.adapters.params import ConnectionParams
from lazytables.adapters.pool import DEFAULT_POOL_LIMITS, PING_TIMEOUT, PoolLimits, create_pool
from lazytables.adapters.watchdog import StatementWatchdog
from lazytables.settings import AdapterSettings, load_adapter_settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

RESULT_COLUMN = "Result"


def resolve_file_path(path_str: str) -> Path:
    """Resolve a file path for file-based databases.

    Expands ~ and adds a missing leading slash when only the absolute
    variant exists.
    """
    path_str = path_str.strip()
    file_path = Path(path_str).expanduser()

    if not file_path.exists() and not path_str.startswith(("/", "~")):
        absolute_path = Path("/" + path_str)
        if absolute_path.exists():
            file_path = absolute_path

    return file_path.resolve()


def format_type_info(
    char_length: int | None,
    precision: int | None,
    scale: int | None,
) -> str | None:
    """Build the size annotation shown next to a column type.

    Character length takes priority over numeric precision; a zero scale is
    omitted. Returns None when neither applies.
    """
    if char_length is not None:
        return f"({int(char_length)})"
    if precision is not None:
        if scale is not None and int(scale) > 0:
            return f"({int(precision)},{int(scale)})"
        return f"({int(precision)})"
    return None


def parse_nullable(value: Any) -> bool | None:
    """Read an information_schema ``is_nullable`` value (YES/NO)."""
    if isinstance(value, str):
        flag = value.strip().upper()
        if flag == "YES":
            return True
        if flag == "NO":
            return False
    return None


@dataclass
class ColumnInfo:
    """Information about a table column.

    ``default`` is None when the column has no default; an empty string is
    a real empty-string default. ``nullable`` is None when the catalog does
    not say.
    """

    name: str
    data_type: str
    nullable: bool | None = None
    default: str | None = None
    type_info: str | None = None

    @property
    def display_type(self) -> str:
        return f"{self.data_type}{self.type_info or ''}"


@dataclass
class QueryResult:
    """Normalized output of one executed statement."""

    columns: list[str]
    rows: list[list[Cell]] = field(default_factory=list)
    message: str = ""
    kind: QueryKind = QueryKind.UNKNOWN

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @classmethod
    def from_message(cls, message: str, kind: QueryKind = QueryKind.UNKNOWN) -> QueryResult:
        """Wrap a summary message as a one-row, one-column result."""
        return cls(columns=[RESULT_COLUMN], rows=[[message]], message=message, kind=kind)


class SessionState(Enum):
    UNCONNECTED = "unconnected"
    CONNECTED = "connected"
    DATABASE_SELECTED = "database_selected"


class DatabaseAdapter(ABC):
    """Abstract contract shared by every engine adapter.

    One adapter instance is one logical session against one engine. Callers
    depend on this interface only, never on a concrete engine class.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this database type."""

    @property
    def system_databases(self) -> frozenset[str]:
        """Lowercase names of engine-internal databases hidden from listings."""
        return frozenset()

    @property
    @abstractmethod
    def state(self) -> SessionState:
        """Current session state."""

    @property
    def is_connected(self) -> bool:
        return self.state is not SessionState.UNCONNECTED

    @abstractmethod
    def connect(self, params: ConnectionParams) -> None:
        """Open a session using engine-specific parameters."""

    @abstractmethod
    def disconnect(self) -> None:
        """Release the session. Safe to call more than once."""

    @abstractmethod
    def get_current_database(self) -> str:
        """Return the selected database name, or an empty string."""

    @abstractmethod
    def get_databases(self) -> list[str]:
        """List user databases on the server, system databases excluded."""

    @abstractmethod
    def use_database(self, database: str) -> None:
        """Select the active database."""

    @abstractmethod
    def get_tables(self) -> list[str]:
        """List tables in the selected database."""

    @abstractmethod
    def get_table_info(self, table: str) -> list[ColumnInfo]:
        """Describe the columns of a table in the selected database."""

    @abstractmethod
    def execute_query(self, query: str) -> QueryResult:
        """Execute raw SQL and return a normalized result."""

    def __enter__(self) -> DatabaseAdapter:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.disconnect()


class CursorBasedAdapter(DatabaseAdapter):
    """Base class for adapters backed by a pooled DB-API 2.0 driver.

    Owns the pool, the remembered connection parameters and the selected
    database name. Subclasses supply the driver, the connect call, the
    statement cancel hook, the catalog queries and the database switching
    strategy.
    """

    params_type: ClassVar[type[ConnectionParams]] = ConnectionParams

    # Whether a connection whose statement was cancelled is dropped instead
    # of returned to the pool.
    discard_after_cancel: ClassVar[bool] = True

    # Whether effect-only results report the driver's lastrowid.
    reports_last_insert_id: ClassVar[bool] = False

    def __init__(self, settings: AdapterSettings | None = None):
        self._settings = settings or load_adapter_settings()
        self._lock = threading.RLock()
        self._dbapi: Any = None
        self._pool: Pool | None = None
        self._params: ConnectionParams | None = None
        self._current_database = ""

    @property
    @abstractmethod
    def driver(self) -> DriverDescriptor:
        """Describe the DB-API module this adapter imports."""

    @abstractmethod
    def _open_connection(self, dbapi: Any, params: ConnectionParams) -> Any:
        """Create one physical DB-API connection."""

    @abstractmethod
    def _cancel_statement(self, dbapi_connection: Any, params: ConnectionParams) -> None:
        """Abort whatever statement is running on ``dbapi_connection``."""

    @abstractmethod
    def _fetch_database_names(self) -> list[str]:
        """Run the engine's database catalog query."""

    @abstractmethod
    def _fetch_table_names(self) -> list[str]:
        """Run the engine's table catalog query for the selected database."""

    @abstractmethod
    def _fetch_columns(self, table: str) -> list[ColumnInfo]:
        """Run the engine's column catalog query for ``table``."""

    def _pool_limits_for(self, params: ConnectionParams) -> PoolLimits:
        return DEFAULT_POOL_LIMITS

    def _prepare_checkout(self, conn: Any) -> None:
        """Bring a freshly checked-out pooled connection in line with the session."""

    def _initial_database(self, params: ConnectionParams) -> str:
        return params.database

    @property
    def settings(self) -> AdapterSettings:
        return self._settings

    @property
    def params(self) -> ConnectionParams | None:
        """The parameters the current session was opened with."""
        return self._params

    @property
    def state(self) -> SessionState:
        if self._pool is None:
            return SessionState.UNCONNECTED
        if self._current_database:
            return SessionState.DATABASE_SELECTED
        return SessionState.CONNECTED

    @property
    def current_database(self) -> str:
        return self._current_database

    def get_current_database(self) -> str:
        return self._current_database

    def _validate_params(self, params: Any) -> None:
        if not isinstance(params, self.params_type):
            raise InvalidParametersError(
                f"Invalid connection parameters for {self.name}: "
                f"expected {self.params_type.__name__}, got {type(params).__name__}"
            )
        port = params.port
        if port is not None and (not isinstance(port, int) or isinstance(port, bool) or not 0 < port < 65536):
            raise InvalidParametersError(f"Invalid port for {self.name}: {port!r}")

    def _check_database_name(self, database: str) -> str:
        name = database.strip() if isinstance(database, str) else ""
        if not name:
            raise InvalidParametersError("Database name must not be empty")
        return name

    def _load_driver(self) -> Any:
        if self._dbapi is None:
            self._dbapi = load_driver(self.driver)
        return self._dbapi

    def connect(self, params: ConnectionParams) -> None:
        """Open a pooled session and verify it with a ping.

        On failure nothing is retained and the adapter stays Unconnected.
        """
        self._validate_params(params)
        with self._lock:
            if self._pool is not None:
                logger.info(f"Replacing existing {self.name} session")
                self.disconnect()

            dbapi = self._load_driver()
            logger.debug(f"Connecting to {self.name} server: {params.redacted()}")

            pool = create_pool(
                lambda: self._open_connection(dbapi, params),
                self._pool_limits_for(params),
                checkout_timeout=self._settings.connection_timeout,
            )
            try:
                self._with_connection(self._ping, timeout=PING_TIMEOUT, pool=pool, params=params)
            except Exception as e:
                pool.dispose()
                logger.error(f"Failed to connect to {self.name} server: {e}")
                engine_message = e.engine_message if isinstance(e, AdapterError) else str(e)
                raise ConnectionFailedError(
                    f"Failed to connect to {self.name} server", engine_message=engine_message
                ) from e

            self._pool = pool
            self._params = params
            self._current_database = self._initial_database(params)
            logger.info(f"Successfully connected to {self.name} server")

    def disconnect(self) -> None:
        with self._lock:
            pool = self._pool
            self._pool = None
            self._params = None
            self._current_database = ""
            if pool is None:
                return
            logger.debug(f"Disconnecting from {self.name} server")
            pool.dispose()
            logger.info(f"Disconnected from {self.name} server")

    def get_databases(self) -> list[str]:
        self._require_connection()
        logger.debug(f"Retrieving list of {self.name} databases")
        system = self.system_databases
        databases = [name for name in self._fetch_database_names() if name.lower() not in system]
        logger.debug(f"Retrieved {len(databases)} {self.name} databases")
        return databases

    def get_tables(self) -> list[str]:
        self._require_database()
        logger.debug(f"Retrieving tables from database: {self._current_database}")
        tables = self._fetch_table_names()
        logger.debug(f"Retrieved {len(tables)} tables from database: {self._current_database}")
        return tables

    def get_table_info(self, table: str) -> list[ColumnInfo]:
        self._require_database()
        if not table:
            raise InvalidParametersError("Table name must not be empty")
        logger.debug(f"Retrieving column info for table: {table}")
        columns = self._fetch_columns(table)
        logger.debug(f"Retrieved {len(columns)} columns for table: {table}")
        return columns

    def execute_query(self, query: str) -> QueryResult:
        self._require_connection()
        kind = classify_query(query)
        logger.debug(f"Executing {kind.value} query: {query}")

        if kind is QueryKind.USE:
            database = parse_use_statement(query)
            if database:
                # Keep the remembered database in step with the connection.
                self.use_database(database)
                return QueryResult.from_message(f"Database changed to {database}", kind)

        if kind.returns_rows:
            columns, rows = self._fetch(query)
            normalized = [normalize_row(row) for row in rows]
            message = f"{len(normalized)} rows returned"
            logger.info(f"Query executed successfully, {len(normalized)} rows returned")
            return QueryResult(columns=columns, rows=normalized, message=message, kind=kind)

        affected, last_id = self._execute_effect(query)
        message = f"{affected} rows affected"
        if last_id and kind is QueryKind.INSERT:
            message = f"{message}, last insert ID: {last_id}"
        logger.info(f"Query executed successfully, {affected} rows affected")
        return QueryResult.from_message(message, kind)

    def _require_connection(self) -> ConnectionParams:
        params = self._params
        if self._pool is None or params is None:
            raise NotConnectedError(f"Not connected to {self.name} server")
        return params

    def _require_database(self) -> None:
        self._require_connection()
        if not self._current_database:
            raise NoDatabaseSelectedError("No database selected")

    def _checkout(self, pool: Pool) -> Any:
        try:
            return pool.connect()
        except sa_exc.TimeoutError as e:
            raise QueryTimeoutError(
                f"Timed out waiting for a pooled {self.name} connection", engine_message=str(e)
            ) from e
        except self._dbapi.Error as e:
            raise ConnectionFailedError(f"Could not open {self.name} connection", engine_message=str(e)) from e

    def _with_connection(
        self,
        operation: Callable[[Any], T],
        *,
        timeout: float | None = None,
        pool: Pool | None = None,
        params: ConnectionParams | None = None,
    ) -> T:
        """Run ``operation`` on a pooled connection under a statement watchdog.

        A connection whose statement was cancelled is invalidated rather than
        returned to the pool, unless the engine leaves it reusable.
        """
        if pool is None or params is None:
            params = self._require_connection()
            pool = cast(Pool, self._pool)

        conn = self._checkout(pool)
        dbapi_connection = conn.dbapi_connection
        watchdog = StatementWatchdog(
            self._settings.query_timeout if timeout is None else timeout,
            lambda: self._cancel_statement(dbapi_connection, params),
        )
        try:
            with watchdog:
                self._prepare_checkout(conn)
                return operation(conn)
        except self._dbapi.Error as e:
            if watchdog.expired:
                raise QueryTimeoutError(
                    f"Query exceeded {watchdog.timeout}s and was cancelled", engine_message=str(e)
                ) from e
            logger.error(f"{self.name} query failed: {e}")
            raise QueryFailedError("Query failed", engine_message=str(e)) from e
        finally:
            if watchdog.expired and self.discard_after_cancel:
                conn.invalidate()
            else:
                conn.close()

    @staticmethod
    def _execute(cursor: Any, sql: str, args: Sequence[Any] | None) -> None:
        # No args means no placeholder interpolation, so literal % is safe.
        if args is None:
            cursor.execute(sql)
        else:
            cursor.execute(sql, args)

    def _ping(self, conn: Any) -> None:
        cursor = conn.cursor()
        try:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        finally:
            cursor.close()

    def _fetch(
        self,
        sql: str,
        args: Sequence[Any] | None = None,
        *,
        timeout: float | None = None,
    ) -> tuple[list[str], list[Sequence[Any]]]:
        """Execute a row-returning statement and return (columns, raw rows)."""

        def operation(conn: Any) -> tuple[list[str], list[Sequence[Any]]]:
            cursor = conn.cursor()
            try:
                self._execute(cursor, sql, args)
                if not cursor.description:
                    return [], []
                columns = [col[0] for col in cursor.description]
                return columns, list(cursor.fetchall())
            finally:
                cursor.close()

        return self._with_connection(operation, timeout=timeout)

    def _execute_effect(self, sql: str, args: Sequence[Any] | None = None) -> tuple[int, int | None]:
        """Execute an effect-only statement and return (rows affected, last insert id)."""

        def operation(conn: Any) -> tuple[int, int | None]:
            cursor = conn.cursor()
            try:
                self._execute(cursor, sql, args)
                affected = max(int(cursor.rowcount), 0)
                last_id = getattr(cursor, "lastrowid", None) if self.reports_last_insert_id else None
                conn.commit()
                return affected, last_id
            finally:
                cursor.close()

        return self._with_connection(operation)


__all__ = [
    "ColumnInfo",
    "CursorBasedAdapter",
    "DatabaseAdapter",
    "QueryResult",
    "RESULT_COLUMN",
    "SessionState",
    "format_type_info",
    "parse_nullable",
    "resolve_file_path",
]
