"""SQL safety gate utilities."""

from querygate.sql.rules import DEFAULT_LIMIT, MAX_LIMIT
from querygate.sql.validator import (
    SQLCheckResult,
    check_sql,
    normalize_limit_clause,
    strip_comments,
)

__all__ = [
    "DEFAULT_LIMIT",
    "MAX_LIMIT",
    "SQLCheckResult",
    "check_sql",
    "normalize_limit_clause",
    "strip_comments",
]
