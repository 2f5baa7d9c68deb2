"""Connection pool limits and construction.

Pool limits are fixed constants rather than user settings; they bound how
many physical connections one adapter session may hold.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from sqlalchemy.pool import QueuePool

logger = logging.getLogger(__name__)

MAX_OPEN_CONNECTIONS = 5
MAX_IDLE_CONNECTIONS = 3
MAX_CONNECTION_LIFETIME = 30 * 60  # seconds

# Liveness check during connect; independent of the configurable query timeout.
PING_TIMEOUT = 5.0


@dataclass(frozen=True)
class PoolLimits:
    max_open: int = MAX_OPEN_CONNECTIONS
    max_idle: int = MAX_IDLE_CONNECTIONS
    max_lifetime: int = MAX_CONNECTION_LIFETIME


DEFAULT_POOL_LIMITS = PoolLimits()

# One physical connection that is never recycled (in-memory databases).
SINGLE_CONNECTION_LIMITS = PoolLimits(max_open=1, max_idle=1, max_lifetime=-1)


def create_pool(
    creator: Callable[[], Any],
    limits: PoolLimits = DEFAULT_POOL_LIMITS,
    checkout_timeout: float = 10.0,
) -> QueuePool:
    """Build a bounded pool around a zero-argument DBAPI connect callable."""
    logger.debug(
        f"Creating pool (max_open={limits.max_open}, max_idle={limits.max_idle}, "
        f"max_lifetime={limits.max_lifetime}s)"
    )
    return QueuePool(
        creator,
        pool_size=limits.max_idle,
        max_overflow=limits.max_open - limits.max_idle,
        timeout=checkout_timeout,
        recycle=limits.max_lifetime,
        reset_on_return="rollback",
    )


__all__ = [
    "DEFAULT_POOL_LIMITS",
    "MAX_CONNECTION_LIFETIME",
    "MAX_IDLE_CONNECTIONS",
    "MAX_OPEN_CONNECTIONS",
    "PING_TIMEOUT",
    "PoolLimits",
    "SINGLE_CONNECTION_LIMITS",
    "create_pool",
]
