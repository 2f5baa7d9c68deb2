"""Adapter registry and lazy loading of adapter classes."""

from __future__ import annotations

from dataclasses import dataclass
from importlib import import_module
from typing import TYPE_CHECKING, cast

from lazytables.adapters.params import ConnectionParams, MySQLParams, PostgresParams, SQLiteParams

if TYPE_CHECKING:
    from lazytables.adapters.base import DatabaseAdapter
    from lazytables.settings import AdapterSettings


@dataclass(frozen=True)
class AdapterSpec:
    db_type: str
    display_name: str
    adapter_path: tuple[str, str]
    params_class: type[ConnectionParams]
    url_schemes: tuple[str, ...] = ()
    is_file_based: bool = False


_ADAPTERS: dict[str, AdapterSpec] = {}


def register_adapter(spec: AdapterSpec) -> None:
    """Register an adapter specification."""
    _ADAPTERS[spec.db_type] = spec


register_adapter(
    AdapterSpec(
        db_type="postgresql",
        display_name="PostgreSQL",
        adapter_path=("lazytables.adapters.postgresql", "PostgreSQLAdapter"),
        params_class=PostgresParams,
        url_schemes=("postgresql", "postgres"),
    )
)
register_adapter(
    AdapterSpec(
        db_type="mysql",
        display_name="MySQL",
        adapter_path=("lazytables.adapters.mysql", "MySQLAdapter"),
        params_class=MySQLParams,
        url_schemes=("mysql", "mariadb"),
    )
)
register_adapter(
    AdapterSpec(
        db_type="sqlite",
        display_name="SQLite",
        adapter_path=("lazytables.adapters.sqlite", "SQLiteAdapter"),
        params_class=SQLiteParams,
        url_schemes=("sqlite",),
        is_file_based=True,
    )
)


def get_supported_db_types() -> list[str]:
    return list(_ADAPTERS.keys())


def get_adapter_spec(db_type: str) -> AdapterSpec:
    spec = _ADAPTERS.get(db_type)
    if spec is None:
        raise ValueError(f"Unknown database type: {db_type}")
    return spec


def get_adapter_class(db_type: str) -> type[DatabaseAdapter]:
    module_name, class_name = get_adapter_spec(db_type).adapter_path
    module = import_module(module_name)
    return cast("type[DatabaseAdapter]", getattr(module, class_name))


def get_adapter(db_type: str, settings: AdapterSettings | None = None) -> DatabaseAdapter:
    """Create a fresh, unconnected adapter for ``db_type``."""
    adapter_class = get_adapter_class(db_type)
    return adapter_class(settings)  # type: ignore[call-arg]


def get_params_class(db_type: str) -> type[ConnectionParams]:
    return get_adapter_spec(db_type).params_class


def get_db_type_for_scheme(scheme: str) -> str | None:
    scheme = scheme.lower()
    for spec in _ADAPTERS.values():
        if scheme in spec.url_schemes:
            return spec.db_type
    return None


def get_display_name(db_type: str) -> str:
    spec = _ADAPTERS.get(db_type)
    return spec.display_name if spec else db_type
