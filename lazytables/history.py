"""History store for managing query history per connection."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime

from lazytables.store import JSONFileStore


@dataclass
class QueryHistoryEntry:
    """A query history entry."""

    query: str
    timestamp: str  # ISO format
    connection_name: str
    db_type: str = ""
    database: str = ""
    duration_ms: float = 0.0
    success: bool = True
    error: str | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> QueryHistoryEntry:
        """Create from dictionary."""
        return cls(
            query=data["query"],
            timestamp=data["timestamp"],
            connection_name=data["connection_name"],
            db_type=data.get("db_type", ""),
            database=data.get("database", ""),
            duration_ms=float(data.get("duration_ms", 0.0)),
            success=bool(data.get("success", True)),
            error=data.get("error"),
        )


class HistoryStore(JSONFileStore):
    """Store for managing query history.

    History is stored as a JSON array in ~/.lazytables/query_history.json
    Each entry includes query text, timestamp, connection name and the
    outcome of the run.
    """

    filename = "query_history.json"
    document_type = list

    MAX_ENTRIES_PER_CONNECTION = 100

    def _load_all_entries(self) -> list[dict]:
        """Load all history entries as raw dictionaries."""
        return [entry for entry in self._read_document() if isinstance(entry, dict)]

    def load_for_connection(self, connection_name: str) -> list[QueryHistoryEntry]:
        """Load query history for a specific connection.

        Returns:
            List of QueryHistoryEntry objects, sorted by most recent first.
        """
        all_entries = self._load_all_entries()
        try:
            entries = [
                QueryHistoryEntry.from_dict(entry)
                for entry in all_entries
                if entry.get("connection_name") == connection_name
            ]
        except (KeyError, TypeError, ValueError):
            return []
        entries.sort(key=lambda e: e.timestamp, reverse=True)
        return entries

    def save_query(
        self,
        connection_name: str,
        query: str,
        *,
        db_type: str = "",
        database: str = "",
        duration_ms: float = 0.0,
        success: bool = True,
        error: str | None = None,
    ) -> QueryHistoryEntry:
        """Save a query run to history.

        If the exact query already exists for this connection, the entry is
        refreshed with the new outcome. Keeps only MAX_ENTRIES_PER_CONNECTION
        entries per connection.
        """
        all_entries = self._load_all_entries()
        query_stripped = query.strip()
        entry = QueryHistoryEntry(
            query=query_stripped,
            timestamp=datetime.now().isoformat(timespec="microseconds"),
            connection_name=connection_name,
            db_type=db_type,
            database=database,
            duration_ms=round(duration_ms, 3),
            success=success,
            error=error,
        )

        all_entries = [
            e
            for e in all_entries
            if not (e.get("connection_name") == connection_name and e.get("query", "").strip() == query_stripped)
        ]
        all_entries.append(entry.to_dict())

        # Limit entries per connection
        connection_entries = [e for e in all_entries if e.get("connection_name") == connection_name]
        other_entries = [e for e in all_entries if e.get("connection_name") != connection_name]

        connection_entries.sort(key=lambda e: e.get("timestamp", ""), reverse=True)
        connection_entries = connection_entries[: self.MAX_ENTRIES_PER_CONNECTION]

        self._write_document(other_entries + connection_entries)
        return entry

    def clear(self, connection_name: str | None = None) -> int:
        """Clear history for one connection, or all history when no name is given.

        Returns:
            Number of entries deleted.
        """
        all_entries = self._load_all_entries()
        original_count = len(all_entries)

        if connection_name is None:
            remaining: list[dict] = []
        else:
            remaining = [e for e in all_entries if e.get("connection_name") != connection_name]

        deleted = original_count - len(remaining)
        if deleted > 0:
            self._write_document(remaining)
        return deleted


__all__ = ["HistoryStore", "QueryHistoryEntry"]
