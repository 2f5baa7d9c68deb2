"""Pytest fixtures for lazytables tests."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

# Must be set before lazytables.store is imported; CONFIG_DIR is read once.
_TEST_CONFIG_DIR = Path(tempfile.mkdtemp(prefix="lazytables-test-config-"))
os.environ.setdefault("LAZYTABLES_CONFIG_DIR", str(_TEST_CONFIG_DIR))
os.environ.pop("LAZYTABLES_SETTINGS_PATH", None)

from lazytables.settings import AdapterSettings  # noqa: E402
from tests.fakes import FakeDriver  # noqa: E402


@pytest.fixture
def settings() -> AdapterSettings:
    return AdapterSettings(query_timeout=5.0, connection_timeout=2.0)


@pytest.fixture
def fast_timeout_settings() -> AdapterSettings:
    return AdapterSettings(query_timeout=0.2, connection_timeout=2.0)


@pytest.fixture
def psycopg2_driver():
    driver = FakeDriver()
    with patch.dict("sys.modules", {"psycopg2": driver}):
        yield driver


@pytest.fixture
def pymysql_driver():
    driver = FakeDriver()
    with patch.dict("sys.modules", {"pymysql": driver}):
        yield driver


@pytest.fixture
def sqlite_db_path(tmp_path: Path) -> Path:
    return tmp_path / "test.db"
