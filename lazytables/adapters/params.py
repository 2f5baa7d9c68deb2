"""Connection parameter records for each supported engine."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, ClassVar, Mapping


@dataclass(frozen=True)
class ConnectionParams:
    """Engine-neutral connection parameters.

    An empty ``database`` means the session is opened at server level with
    no database selected. ``options`` holds extra keyword arguments passed
    verbatim to the driver's connect call.
    """

    db_type: ClassVar[str] = ""
    default_port: ClassVar[int | None] = None
    host_optional: ClassVar[bool] = False

    host: str = "localhost"
    port: int | None = None
    user: str = ""
    password: str | None = None
    database: str = ""
    options: Mapping[str, Any] = field(default_factory=dict)

    def effective_port(self) -> int | None:
        """Return the configured port, or the engine default when unset."""
        return self.port if self.port else self.default_port

    def with_database(self, database: str) -> ConnectionParams:
        """Return a copy identical to this one except for the database."""
        return replace(self, database=database)

    def redacted(self) -> str:
        """Describe the target without exposing credentials."""
        target = f"{self.host}:{self.effective_port()}"
        if self.user:
            target = f"{self.user}@{target}"
        if self.database:
            target = f"{target}/{self.database}"
        return target


@dataclass(frozen=True)
class PostgresParams(ConnectionParams):
    db_type: ClassVar[str] = "postgresql"
    default_port: ClassVar[int | None] = 5432
    # libpq falls back to the local socket when no host is given
    host_optional: ClassVar[bool] = True

    sslmode: str = "disable"


@dataclass(frozen=True)
class MySQLParams(ConnectionParams):
    db_type: ClassVar[str] = "mysql"
    default_port: ClassVar[int | None] = 3306

    charset: str = "utf8mb4"


@dataclass(frozen=True)
class SQLiteParams(ConnectionParams):
    """SQLite parameters; ``database`` is the file path or ``:memory:``."""

    db_type: ClassVar[str] = "sqlite"

    host: str = ""

    def redacted(self) -> str:
        return self.database or ":memory:"

    @property
    def is_memory(self) -> bool:
        return self.database in ("", ":memory:")


__all__ = [
    "ConnectionParams",
    "MySQLParams",
    "PostgresParams",
    "SQLiteParams",
]
