"""Driver dependency descriptors and import helpers."""

from __future__ import annotations

import importlib
from dataclasses import dataclass
from typing import Any

from lazytables.adapters.exceptions import MissingDriverError


@dataclass(frozen=True)
class DriverDescriptor:
    driver_name: str
    import_name: str
    extra_name: str | None
    package_name: str | None


def import_driver_module(
    module_name: str,
    *,
    driver_name: str,
    extra_name: str | None,
    package_name: str | None,
) -> Any:
    """Import a driver module, raising MissingDriverError with detail if it fails."""
    if not extra_name or not package_name:
        return importlib.import_module(module_name)

    try:
        return importlib.import_module(module_name)
    except ImportError as e:
        raise MissingDriverError(
            driver_name,
            extra_name,
            package_name,
            module_name=module_name,
            import_error=str(e),
        ) from e


def load_driver(driver: DriverDescriptor) -> Any:
    return import_driver_module(
        driver.import_name,
        driver_name=driver.driver_name,
        extra_name=driver.extra_name,
        package_name=driver.package_name,
    )
