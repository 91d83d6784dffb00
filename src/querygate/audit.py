"""Best-effort audit trail for generation and validation requests."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Protocol

logger = logging.getLogger(__name__)


class AuditStatus(str, Enum):
    SUCCESS = "success"
    VALIDATION_ERROR = "validation_error"
    EXECUTION_ERROR = "execution_error"


@dataclass(frozen=True)
class AuditEntry:
    prompt: str
    sql: str | None
    status: AuditStatus
    latency_ms: int
    confidence: float | None = None
    error_message: str | None = None

    def to_dict(self) -> dict[str, object]:
        payload = asdict(self)
        payload["status"] = self.status.value
        return payload


class AuditLog(Protocol):
    async def record(self, entry: AuditEntry) -> None:
        ...


class LoggingAuditLog:
    """Write each audit entry to the ``querygate.audit`` logger."""

    def __init__(self, target: logging.Logger | None = None) -> None:
        self._logger = target or logger

    async def record(self, entry: AuditEntry) -> None:
        self._logger.info(
            "status=%s latency_ms=%d confidence=%s prompt=%r sql=%r error=%r",
            entry.status.value,
            entry.latency_ms,
            "-" if entry.confidence is None else f"{entry.confidence:.2f}",
            entry.prompt,
            entry.sql,
            entry.error_message,
        )


async def record_safely(audit_log: AuditLog, entry: AuditEntry) -> None:
    """Record ``entry``; audit failures never affect the caller's result."""
    try:
        await audit_log.record(entry)
    except Exception:
        logger.warning("Failed to record audit entry", exc_info=True)
