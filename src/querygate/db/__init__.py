"""Database helpers for querygate."""

from querygate.db.connection import (
    ConnectionPool,
    DatabaseConnectionError,
    DatabaseQueryError,
    HealthcheckResult,
    PooledConnection,
    check_postgres_health,
    open_pool,
)
from querygate.db.executor import QUERY_TIMEOUT_SECONDS, TIMEOUT_MESSAGE, BoundedExecutor

__all__ = [
    "ConnectionPool",
    "DatabaseConnectionError",
    "DatabaseQueryError",
    "HealthcheckResult",
    "PooledConnection",
    "check_postgres_health",
    "open_pool",
    "QUERY_TIMEOUT_SECONDS",
    "TIMEOUT_MESSAGE",
    "BoundedExecutor",
]
