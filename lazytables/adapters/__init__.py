"""Database adapters: one contract over PostgreSQL, MySQL and SQLite."""

from lazytables.adapters.base import (
    ColumnInfo,
    CursorBasedAdapter,
    DatabaseAdapter,
    QueryResult,
    SessionState,
)
from lazytables.adapters.classifier import QueryKind, classify_query, parse_use_statement
from lazytables.adapters.exceptions import (
    AdapterError,
    ConnectionFailedError,
    InvalidParametersError,
    MissingDriverError,
    NoDatabaseSelectedError,
    NotConnectedError,
    QueryFailedError,
    QueryTimeoutError,
)
from lazytables.adapters.normalize import NULL, is_binary, normalize_value
from lazytables.adapters.params import ConnectionParams, MySQLParams, PostgresParams, SQLiteParams
from lazytables.adapters.registry import get_adapter, get_adapter_class, get_supported_db_types

__all__ = [
    "AdapterError",
    "ColumnInfo",
    "ConnectionFailedError",
    "ConnectionParams",
    "CursorBasedAdapter",
    "DatabaseAdapter",
    "InvalidParametersError",
    "MissingDriverError",
    "MySQLParams",
    "NULL",
    "NoDatabaseSelectedError",
    "NotConnectedError",
    "PostgresParams",
    "QueryFailedError",
    "QueryKind",
    "QueryResult",
    "QueryTimeoutError",
    "SQLiteParams",
    "SessionState",
    "classify_query",
    "get_adapter",
    "get_adapter_class",
    "get_supported_db_types",
    "is_binary",
    "normalize_value",
    "parse_use_statement",
]
