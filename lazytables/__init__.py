"""lazytables - one client contract over PostgreSQL, MySQL and SQLite."""

from typing import TYPE_CHECKING, Any

__all__ = [
    "__version__",
    "main",
    "get_adapter",
    "ConnectionParams",
]

__version__ = "0.3.0"

if TYPE_CHECKING:
    from .adapters import ConnectionParams, get_adapter
    from .cli import main


def __getattr__(name: str) -> Any:
    """Lazy import so importing the package does not load drivers or the CLI."""
    if name == "main":
        from .cli import main

        return main
    if name == "get_adapter":
        from .adapters import get_adapter

        return get_adapter
    if name == "ConnectionParams":
        from .adapters import ConnectionParams

        return ConnectionParams
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
