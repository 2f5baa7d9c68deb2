"""Keyword-based statement classification.

This is a syntactic heuristic used only to pick an execution path; it does
not parse SQL. Statements that return rows without starting with a known
keyword (``WITH ...`` common table expressions, bare ``VALUES (...)``)
classify as UNKNOWN and take the effect-only path.
"""

from __future__ import annotations

import re
from enum import Enum


class QueryKind(str, Enum):
    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    CREATE = "CREATE"
    ALTER = "ALTER"
    DROP = "DROP"
    SHOW = "SHOW"
    EXPLAIN = "EXPLAIN"
    DESCRIBE = "DESCRIBE"
    USE = "USE"
    UNKNOWN = "UNKNOWN"

    @property
    def returns_rows(self) -> bool:
        """Whether statements of this kind produce a result set."""
        return self in _ROW_RETURNING


_ROW_RETURNING = frozenset({QueryKind.SELECT, QueryKind.SHOW, QueryKind.EXPLAIN, QueryKind.DESCRIBE})

# Order matters: DELETE must be tested before the DESC shorthand.
_PREFIXES: tuple[tuple[str, QueryKind], ...] = (
    ("SELECT", QueryKind.SELECT),
    ("INSERT", QueryKind.INSERT),
    ("UPDATE", QueryKind.UPDATE),
    ("DELETE", QueryKind.DELETE),
    ("CREATE", QueryKind.CREATE),
    ("ALTER", QueryKind.ALTER),
    ("DROP", QueryKind.DROP),
    ("SHOW", QueryKind.SHOW),
    ("EXPLAIN", QueryKind.EXPLAIN),
    ("DESCRIBE", QueryKind.DESCRIBE),
    ("DESC", QueryKind.DESCRIBE),
    ("USE", QueryKind.USE),
)


def classify_query(query: str) -> QueryKind:
    """Map raw SQL text to a coarse statement kind."""
    upper = query.strip().upper()
    for prefix, kind in _PREFIXES:
        if upper.startswith(prefix):
            return kind
    return QueryKind.UNKNOWN


# Matches: USE dbname, USE [dbname], USE `dbname`, USE "dbname"
_USE_PATTERN = re.compile(
    r"^\s*USE\s+"
    r"(?:"
    r"\[([^\]]+)\]"
    r"|`([^`]+)`"
    r"|\"([^\"]+)\""
    r"|(\w+)"
    r")"
    r"\s*;?\s*$",
    re.IGNORECASE,
)


def parse_use_statement(query: str) -> str | None:
    """Parse a USE database statement and return the database name.

    Returns:
        The database name if this is a USE statement, None otherwise.
    """
    match = _USE_PATTERN.match(query)
    if not match:
        return None
    return next((g for g in match.groups() if g is not None), None)


__all__ = ["QueryKind", "classify_query", "parse_use_statement"]
