"""PostgreSQL connection pooling and health check utilities."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

import psycopg
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool, PoolTimeout

from querygate.errors import DatabaseUnavailable

logger = logging.getLogger(__name__)

READ_ONLY_OPTIONS = "-c default_transaction_read_only=on"
RESET_SESSION_SQL = "RESET ALL"


class DatabaseConnectionError(RuntimeError):
    """Raised when a PostgreSQL connection or health check fails."""


class DatabaseQueryError(RuntimeError):
    """Raised when PostgreSQL rejects a statement."""

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


@dataclass(frozen=True)
class HealthcheckResult:
    """Information returned by a successful PostgreSQL health check."""

    current_database: str
    current_user: str
    server_version: str
    transaction_read_only: bool


def _query_error(exc: psycopg.Error) -> DatabaseQueryError:
    message = exc.diag.message_primary or str(exc) or exc.__class__.__name__
    return DatabaseQueryError(message, code=exc.sqlstate)


async def reset_session(raw: psycopg.AsyncConnection) -> None:
    """Restore startup settings before a connection goes back to the pool.

    RESET ALL falls back to the connection options, so a session that changed
    ``default_transaction_read_only`` is read-only again for the next caller.
    """
    await raw.execute(RESET_SESSION_SQL)


class PooledConnection:
    """A single connection leased from the pool."""

    def __init__(self, raw: psycopg.AsyncConnection) -> None:
        self.raw = raw

    async def explain(self, sql: str) -> None:
        await self.fetch_all(f"EXPLAIN {sql}")

    async def fetch_all(
        self, sql: str, params: Mapping[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        try:
            async with self.raw.cursor(row_factory=dict_row) as cur:
                await cur.execute(sql, params)
                if cur.description is None:
                    return []
                return await cur.fetchall()
        except psycopg.Error as exc:
            raise _query_error(exc) from exc


class ConnectionPool:
    """Read-only asyncio pool over ``psycopg_pool.AsyncConnectionPool``."""

    def __init__(
        self,
        postgres_dsn: str,
        *,
        min_size: int = 1,
        max_size: int = 5,
        acquire_timeout: float = 10.0,
    ) -> None:
        self.acquire_timeout = acquire_timeout
        self._pool = AsyncConnectionPool(
            postgres_dsn,
            min_size=min_size,
            max_size=max_size,
            kwargs={
                "autocommit": True,
                "connect_timeout": 5,
                "options": READ_ONLY_OPTIONS,
            },
            reset=reset_session,
            open=False,
        )

    async def open(self) -> None:
        try:
            await self._pool.open(wait=True, timeout=self.acquire_timeout)
        except (PoolTimeout, psycopg.Error) as exc:
            raise DatabaseConnectionError(
                f"Could not connect to PostgreSQL with provided DSN: {exc}"
            ) from exc

    async def close(self) -> None:
        await self._pool.close()

    async def acquire(self) -> PooledConnection:
        try:
            raw = await self._pool.getconn(timeout=self.acquire_timeout)
        except (PoolTimeout, psycopg.Error) as exc:
            raise DatabaseUnavailable(f"Database connection unavailable: {exc}") from exc
        return PooledConnection(raw)

    async def release(self, conn: PooledConnection) -> None:
        await self._pool.putconn(conn.raw)


async def open_pool(
    postgres_dsn: str, *, min_size: int = 1, max_size: int = 5
) -> ConnectionPool:
    pool = ConnectionPool(postgres_dsn, min_size=min_size, max_size=max_size)
    await pool.open()
    return pool


async def check_postgres_health(pool: ConnectionPool) -> HealthcheckResult:
    """Run a lightweight database health check and verify read-only mode."""
    try:
        conn = await pool.acquire()
    except DatabaseUnavailable as exc:
        raise DatabaseConnectionError(str(exc)) from exc

    try:
        rows = await conn.fetch_all(
            """
            SELECT
              current_database() AS current_database,
              current_user AS current_user,
              current_setting('server_version') AS server_version,
              current_setting('transaction_read_only') AS transaction_read_only
            """
        )
    except DatabaseQueryError as exc:
        raise DatabaseConnectionError(f"PostgreSQL health check failed: {exc}") from exc
    finally:
        await pool.release(conn)

    if not rows:
        raise DatabaseConnectionError("PostgreSQL health check returned no data.")

    row = rows[0]
    transaction_read_only = row["transaction_read_only"] == "on"
    if not transaction_read_only:
        raise DatabaseConnectionError(
            "Connected successfully but session is not read-only."
        )

    return HealthcheckResult(
        current_database=row["current_database"],
        current_user=row["current_user"],
        server_version=row["server_version"],
        transaction_read_only=transaction_read_only,
    )
