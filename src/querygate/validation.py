"""SQL validation service: lexical gate, then dry-run and bounded execution."""

from __future__ import annotations

import logging
import time

from pydantic import ValidationError

from querygate.audit import AuditEntry, AuditLog, AuditStatus, record_safely
from querygate.context import RuntimeContextHolder
from querygate.db.executor import QUERY_TIMEOUT_SECONDS, BoundedExecutor, elapsed_ms
from querygate.errors import DatabaseUnavailable, InternalError, input_error
from querygate.models.validation import ErrorKind, ValidationRequest, ValidationResult
from querygate.sql.rules import DEFAULT_LIMIT, MAX_LIMIT
from querygate.sql.validator import check_sql

logger = logging.getLogger(__name__)

NO_DATABASE_MESSAGE = "Database connection not available"


class QueryValidator:
    """Validate untrusted SQL and optionally return its rows."""

    def __init__(
        self,
        holder: RuntimeContextHolder,
        audit_log: AuditLog,
        *,
        default_limit: int = DEFAULT_LIMIT,
        max_limit: int = MAX_LIMIT,
        timeout_seconds: float = QUERY_TIMEOUT_SECONDS,
        debug: bool = False,
    ) -> None:
        self.holder = holder
        self.audit_log = audit_log
        self.default_limit = default_limit
        self.max_limit = max_limit
        self.timeout_seconds = timeout_seconds
        self.debug = debug

    async def validate(self, sql: str, execute: bool = False) -> ValidationResult:
        started = time.perf_counter()
        try:
            request = ValidationRequest(sql=sql, execute=execute)
        except ValidationError as exc:
            raise input_error(exc) from exc

        check = check_sql(
            request.sql, default_limit=self.default_limit, max_limit=self.max_limit
        )
        if not check.is_valid:
            logger.info("Rejected SQL at the lexical gate: %s", check.violation)
            result = ValidationResult(
                is_valid=False,
                syntax_valid=False,
                execution_time_ms=elapsed_ms(started),
                error_kind=ErrorKind.INVALID_QUERY,
                error_message=check.violation,
            )
            await self._audit(request.sql, result)
            return result

        pool = self.holder.current().pool
        if pool is None:
            await self._audit_failure(
                request.sql, check.normalized_sql, started, NO_DATABASE_MESSAGE
            )
            raise DatabaseUnavailable(NO_DATABASE_MESSAGE)

        executor = BoundedExecutor(pool, timeout_seconds=self.timeout_seconds)
        try:
            result = await executor.run(
                check, execute=request.execute, started=started
            )
        except DatabaseUnavailable as exc:
            await self._audit_failure(
                request.sql, check.normalized_sql, started, str(exc)
            )
            raise
        except Exception as exc:
            logger.exception("Unexpected failure while validating SQL")
            await self._audit_failure(
                request.sql, check.normalized_sql, started, str(exc)
            )
            raise InternalError(
                "Failed to validate SQL query",
                detail=str(exc) if self.debug else None,
            ) from exc

        await self._audit(request.sql, result)
        return result

    async def _audit(self, sql: str, result: ValidationResult) -> None:
        if result.is_valid:
            status = AuditStatus.SUCCESS
        elif result.error_kind in (ErrorKind.INVALID_QUERY, ErrorKind.SYNTAX):
            status = AuditStatus.VALIDATION_ERROR
        else:
            status = AuditStatus.EXECUTION_ERROR
        await record_safely(
            self.audit_log,
            AuditEntry(
                prompt=sql,
                sql=result.normalized_sql,
                status=status,
                latency_ms=result.execution_time_ms,
                error_message=result.error_message,
            ),
        )

    async def _audit_failure(
        self, sql: str, normalized_sql: str, started: float, message: str
    ) -> None:
        await record_safely(
            self.audit_log,
            AuditEntry(
                prompt=sql,
                sql=normalized_sql,
                status=AuditStatus.EXECUTION_ERROR,
                latency_ms=elapsed_ms(started),
                error_message=message,
            ),
        )
