"""Connection store for managing saved connection profiles."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Any

from lazytables.adapters.params import ConnectionParams
from lazytables.adapters.registry import get_params_class
from lazytables.store import JSONFileStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SavedConnection:
    """A named set of connection parameters."""

    name: str
    params: ConnectionParams

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "db_type": self.params.db_type}
        for f in fields(self.params):
            value = getattr(self.params, f.name)
            data[f.name] = dict(value) if f.name == "options" else value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SavedConnection:
        """Create from dictionary.

        Raises:
            KeyError: If the name or db_type is missing.
            ValueError: If the db_type is not supported.
        """
        params_class = get_params_class(data["db_type"])
        known = {f.name for f in fields(params_class)}
        values = {k: v for k, v in data.items() if k in known}
        if "options" in values:
            values["options"] = dict(values["options"] or {})
        return cls(name=data["name"], params=params_class(**values))


class ConnectionStore(JSONFileStore):
    """Store for managing saved connections.

    Connections are stored as a JSON array in ~/.lazytables/connections.json.
    Passwords are kept in the same owner-only file.
    """

    filename = "connections.json"
    document_type = list

    def load_all(self) -> list[SavedConnection]:
        """Load all saved connections, skipping entries that cannot be read."""
        connections = []
        for entry in self._read_document():
            try:
                connections.append(SavedConnection.from_dict(entry))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping unreadable saved connection {entry!r}: {e}")
        return connections

    def save_all(self, connections: list[SavedConnection]) -> None:
        self._write_document([c.to_dict() for c in connections])

    def get(self, name: str) -> ConnectionParams | None:
        for conn in self.load_all():
            if conn.name == name:
                return conn.params
        return None

    def add(self, name: str, params: ConnectionParams) -> None:
        """Add a new connection.

        Raises:
            ValueError: If the name is empty or a connection with the same
                name already exists.
        """
        if not name.strip():
            raise ValueError("Connection name must not be empty")
        connections = self.load_all()
        if any(c.name == name for c in connections):
            raise ValueError(f"Connection '{name}' already exists")
        connections.append(SavedConnection(name, params))
        self.save_all(connections)
        logger.info(f"Saved connection '{name}' ({params.db_type})")

    def update(self, name: str, params: ConnectionParams) -> None:
        """Replace the parameters of an existing connection.

        Raises:
            ValueError: If connection doesn't exist.
        """
        connections = self.load_all()
        for i, c in enumerate(connections):
            if c.name == name:
                connections[i] = SavedConnection(name, params)
                self.save_all(connections)
                logger.info(f"Updated connection '{name}'")
                return
        raise ValueError(f"Connection '{name}' not found")

    def remove(self, name: str) -> bool:
        """Delete a connection by name.

        Returns:
            True if deleted, False if not found.
        """
        connections = self.load_all()
        remaining = [c for c in connections if c.name != name]
        if len(remaining) == len(connections):
            return False
        self.save_all(remaining)
        logger.info(f"Removed connection '{name}'")
        return True

    def list_names(self) -> list[str]:
        return [c.name for c in self.load_all()]


__all__ = ["ConnectionStore", "SavedConnection"]
