"""Settings store and the timeout settings consumed by adapters."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from lazytables.store import CONFIG_DIR, JSONFileStore

logger = logging.getLogger(__name__)

DEFAULT_QUERY_TIMEOUT = 30.0
DEFAULT_CONNECTION_TIMEOUT = 10.0

# Settings read by adapters; each must be a positive number of seconds.
TIMEOUT_KEYS = ("query_timeout", "connection_timeout")


def _resolve_settings_path() -> Path:
    override = os.environ.get("LAZYTABLES_SETTINGS_PATH", "").strip()
    if override:
        return Path(override).expanduser()
    return CONFIG_DIR / "settings.json"


class SettingsStore(JSONFileStore):
    """Store for managing application settings.

    Settings are stored as a JSON object in ~/.lazytables/settings.json
    """

    def __init__(self, file_path: Path | None = None) -> None:
        super().__init__(file_path or _resolve_settings_path())

    def load_all(self) -> dict[str, Any]:
        """Load all settings, or an empty dict if none exist."""
        return self._read_document()

    def save_all(self, settings: dict[str, Any]) -> None:
        """Save all settings, replacing existing."""
        self._write_document(settings)

    def get(self, key: str, default: Any = None) -> Any:
        return self.load_all().get(key, default)

    def set(self, key: str, value: Any) -> None:
        settings = self.load_all()
        settings[key] = value
        self.save_all(settings)

    def delete(self, key: str) -> bool:
        """Delete a specific setting.

        Returns:
            True if key existed and was deleted, False otherwise.
        """
        settings = self.load_all()
        if key in settings:
            del settings[key]
            self.save_all(settings)
            return True
        return False


@dataclass(frozen=True)
class AdapterSettings:
    """Timeouts that bound every adapter call, in seconds.

    Read once when an adapter is constructed; changing the settings file
    does not affect sessions that are already open.
    """

    query_timeout: float = DEFAULT_QUERY_TIMEOUT
    connection_timeout: float = DEFAULT_CONNECTION_TIMEOUT


def _positive_float(value: Any, key: str, default: float) -> float:
    if value is None:
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.warning(f"Invalid {key} setting {value!r}, using {default}")
        return default
    if number <= 0:
        logger.warning(f"Non-positive {key} setting {value!r}, using {default}")
        return default
    return number


def parse_setting_value(key: str, raw: str) -> Any:
    """Convert a command-line value for ``key`` into what the settings file stores.

    Timeout keys must be positive numbers. Other values are read as JSON
    when they parse, and kept as plain strings otherwise.
    """
    if key in TIMEOUT_KEYS:
        try:
            number = float(raw)
        except ValueError:
            raise ValueError(f"{key} must be a number of seconds, got {raw!r}") from None
        if not number > 0:
            raise ValueError(f"{key} must be positive, got {raw!r}")
        return number
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def load_adapter_settings(store: SettingsStore | None = None) -> AdapterSettings:
    """Build AdapterSettings from the settings file, falling back to defaults."""
    settings = (store or SettingsStore()).load_all()
    return AdapterSettings(
        query_timeout=_positive_float(settings.get("query_timeout"), "query_timeout", DEFAULT_QUERY_TIMEOUT),
        connection_timeout=_positive_float(
            settings.get("connection_timeout"), "connection_timeout", DEFAULT_CONNECTION_TIMEOUT
        ),
    )


__all__ = [
    "AdapterSettings",
    "DEFAULT_CONNECTION_TIMEOUT",
    "DEFAULT_QUERY_TIMEOUT",
    "SettingsStore",
    "TIMEOUT_KEYS",
    "parse_setting_value",
    "load_adapter_settings",
]
