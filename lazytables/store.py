"""JSON file stores kept under the lazytables config directory."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, ClassVar

logger = logging.getLogger(__name__)

CONFIG_DIR_ENV = "LAZYTABLES_CONFIG_DIR"


def resolve_config_dir() -> Path:
    """Return the config directory, honouring ``LAZYTABLES_CONFIG_DIR``.

    An empty or whitespace-only override is ignored.
    """
    override = os.environ.get(CONFIG_DIR_ENV, "").strip()
    if override:
        return Path(override).expanduser()
    return Path.home() / ".lazytables"


# Resolved once at import; tests set the env var before importing lazytables.
CONFIG_DIR = resolve_config_dir()


class JSONFileStore:
    """Base class for stores persisted as one JSON document.

    Subclasses name their file with ``filename`` (relative to CONFIG_DIR)
    and the top-level JSON type they hold with ``document_type``; a file
    holding anything else reads as empty.
    """

    filename: ClassVar[str] = ""
    document_type: ClassVar[type] = dict

    def __init__(self, file_path: Path | None = None):
        if file_path is None:
            if not self.filename:
                raise ValueError(f"{type(self).__name__} needs a file path")
            file_path = CONFIG_DIR / self.filename
        self._file_path = file_path

    @property
    def file_path(self) -> Path:
        return self._file_path

    def exists(self) -> bool:
        return self._file_path.exists()

    def _empty(self) -> Any:
        return self.document_type()

    def _read_document(self) -> Any:
        """Read the stored document, or an empty one if missing or unreadable."""
        if not self._file_path.exists():
            return self._empty()
        try:
            with open(self._file_path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"Ignoring unreadable store file {self._file_path}: {e}")
            return self._empty()
        if not isinstance(data, self.document_type):
            logger.warning(
                f"Ignoring store file {self._file_path}: expected a JSON "
                f"{self.document_type.__name__}, got {type(data).__name__}"
            )
            return self._empty()
        return data

    def _write_document(self, data: Any) -> None:
        """Replace the stored document atomically with owner-only permissions."""
        directory = self._file_path.parent
        directory.mkdir(parents=True, exist_ok=True)
        if directory == CONFIG_DIR:
            os.chmod(directory, 0o700)

        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=f".{self._file_path.stem}-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, self._file_path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise


__all__ = ["CONFIG_DIR", "CONFIG_DIR_ENV", "JSONFileStore", "resolve_config_dir"]
