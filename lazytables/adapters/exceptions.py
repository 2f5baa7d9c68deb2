"""Custom exceptions for the database adapter layer."""

from __future__ import annotations


class AdapterError(Exception):
    """Base class for every error raised by a database adapter.

    Attributes:
        message: Human-readable summary of what failed.
        engine_message: The underlying driver/engine message, if any.
    """

    def __init__(self, message: str, *, engine_message: str | None = None):
        self.message = message
        self.engine_message = engine_message
        if engine_message:
            super().__init__(f"{message}: {engine_message}")
        else:
            super().__init__(message)


class NotConnectedError(AdapterError):
    """Operation requires a live session."""


class NoDatabaseSelectedError(AdapterError):
    """Operation requires a selected database."""


class ConnectionFailedError(AdapterError):
    """Network or authentication failure during connect or reconnect."""


class MissingDriverError(ConnectionFailedError):
    """Exception raised when a required database driver package is not installed."""

    def __init__(
        self,
        driver_name: str,
        extra_name: str,
        package_name: str,
        *,
        module_name: str | None = None,
        import_error: str | None = None,
    ):
        self.driver_name = driver_name
        self.extra_name = extra_name
        self.package_name = package_name
        self.module_name = module_name
        self.import_error = import_error
        super().__init__(
            f"Missing driver for {driver_name} "
            f"(pip install {package_name} or lazytables[{extra_name}])",
            engine_message=import_error,
        )


class QueryFailedError(AdapterError):
    """The engine rejected or failed to execute a statement."""


class QueryTimeoutError(AdapterError):
    """An operation exceeded its time bound and was cancelled."""


class InvalidParametersError(AdapterError):
    """Connection parameters have the wrong shape for the targeted engine."""


__all__ = [
    "AdapterError",
    "ConnectionFailedError",
    "InvalidParametersError",
    "MissingDriverError",
    "NoDatabaseSelectedError",
    "NotConnectedError",
    "QueryFailedError",
    "QueryTimeoutError",
]
