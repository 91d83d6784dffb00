"""Dry-run and deadline-bounded execution of gated SQL."""

from __future__ import annotations

import asyncio
import logging
import time

from querygate.db.connection import ConnectionPool, DatabaseQueryError
from querygate.models.validation import ErrorKind, ValidationResult
from querygate.sql.validator import SQLCheckResult

logger = logging.getLogger(__name__)

QUERY_TIMEOUT_SECONDS = 30.0
TIMEOUT_MESSAGE = "Query timeout (30s)"
SYNTAX_HINT = "Check your SQL syntax for typos or missing keywords"
EXECUTION_HINT = (
    "The query is syntactically correct but failed to execute. "
    "Check table/column names."
)


def elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


class BoundedExecutor:
    """Run ``EXPLAIN`` then the real query on one pooled connection.

    The connection is released exactly once on every path. When the deadline
    expires the awaiting task is cancelled, which makes psycopg send a
    server-side cancel for the running statement.
    """

    def __init__(
        self,
        pool: ConnectionPool,
        *,
        timeout_seconds: float = QUERY_TIMEOUT_SECONDS,
    ) -> None:
        self.pool = pool
        self.timeout_seconds = timeout_seconds

    async def run(
        self,
        check: SQLCheckResult,
        *,
        execute: bool = False,
        started: float | None = None,
    ) -> ValidationResult:
        started = time.perf_counter() if started is None else started
        sql = check.normalized_sql

        conn = await self.pool.acquire()
        try:
            try:
                await conn.explain(sql)
            except DatabaseQueryError as exc:
                logger.info("Dry-run rejected query (%s): %s", exc.code, exc)
                return ValidationResult(
                    is_valid=False,
                    syntax_valid=False,
                    execution_time_ms=elapsed_ms(started),
                    limited=check.limited,
                    error_kind=ErrorKind.SYNTAX,
                    error_message=str(exc),
                    error_code=exc.code,
                    suggestion=SYNTAX_HINT,
                    normalized_sql=sql,
                )

            try:
                rows = await asyncio.wait_for(
                    conn.fetch_all(sql), timeout=self.timeout_seconds
                )
            except asyncio.TimeoutError:
                logger.warning(
                    "Query exceeded %.1fs deadline: %s", self.timeout_seconds, sql
                )
                return ValidationResult(
                    is_valid=False,
                    syntax_valid=True,
                    execution_time_ms=elapsed_ms(started),
                    limited=check.limited,
                    error_kind=ErrorKind.TIMEOUT,
                    error_message=TIMEOUT_MESSAGE,
                    normalized_sql=sql,
                )
            except DatabaseQueryError as exc:
                logger.info("Query execution failed (%s): %s", exc.code, exc)
                return ValidationResult(
                    is_valid=False,
                    syntax_valid=True,
                    execution_time_ms=elapsed_ms(started),
                    limited=check.limited,
                    error_kind=ErrorKind.EXECUTION,
                    error_message=str(exc),
                    error_code=exc.code,
                    suggestion=EXECUTION_HINT,
                    normalized_sql=sql,
                )
        finally:
            await self.pool.release(conn)

        return ValidationResult(
            is_valid=True,
            syntax_valid=True,
            rows=rows if execute else None,
            row_count=len(rows) if execute else None,
            execution_time_ms=elapsed_ms(started),
            limited=check.limited,
            normalized_sql=sql,
        )
