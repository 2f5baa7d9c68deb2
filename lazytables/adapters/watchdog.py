"""Statement timeout enforcement.

A watchdog timer runs alongside a blocking driver call. If the call outlives
its bound, the timer invokes an engine-specific cancel hook from its own
thread, which makes the driver call fail promptly. The caller then checks
``expired`` to tell a timeout apart from an ordinary engine error.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from types import TracebackType

logger = logging.getLogger(__name__)


class StatementWatchdog:
    """Context manager that cancels a statement after ``timeout`` seconds.

    Usage:
        watchdog = StatementWatchdog(5.0, lambda: conn.cancel())
        with watchdog:
            cursor.execute(sql)
        if watchdog.expired:
            ...
    """

    def __init__(self, timeout: float | None, cancel: Callable[[], None]):
        self._timeout = timeout
        self._cancel = cancel
        self._expired = threading.Event()
        self._timer: threading.Timer | None = None

    @property
    def timeout(self) -> float | None:
        return self._timeout

    @property
    def expired(self) -> bool:
        """True once the timer fired, whether or not the cancel succeeded."""
        return self._expired.is_set()

    def _fire(self) -> None:
        self._expired.set()
        logger.warning(f"Statement exceeded {self._timeout}s, cancelling")
        try:
            self._cancel()
        except Exception as e:
            logger.error(f"Failed to cancel statement: {e}")

    def __enter__(self) -> StatementWatchdog:
        if self._timeout is not None and self._timeout > 0:
            self._timer = threading.Timer(self._timeout, self._fire)
            self._timer.daemon = True
            self._timer.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._timer is not None:
            # Join so a cancel already in progress finishes before the
            # caller decides what to do with the connection.
            self._timer.cancel()
            self._timer.join()
            self._timer = None
