"""Lexical SQL gate: read-only, single-statement, denylist-clean, LIMIT-bounded."""

from __future__ import annotations

from dataclasses import dataclass

from querygate.sql.rules import (
    ALLOWED_PREFIX,
    ANY_LIMIT,
    BLOCK_COMMENT,
    DEFAULT_LIMIT,
    FORBIDDEN_PATTERNS,
    HASH_COMMENT,
    INTEGER_LITERAL,
    LIMIT_CLAUSE,
    LINE_COMMENT,
    MAX_LIMIT,
    QUOTED_MASK,
    QUOTED_SPAN,
)


@dataclass(frozen=True)
class SQLCheckResult:
    """Outcome of the lexical gate.

    ``normalized_sql`` is the exact statement that is dry-run and executed
    when ``is_valid`` is true.
    """

    is_valid: bool
    sql: str
    normalized_sql: str = ""
    limited: bool = False
    violation: str | None = None


def strip_comments(sql: str) -> str:
    """Remove block, double-dash and hash comments."""
    without_blocks = BLOCK_COMMENT.sub(" ", sql)
    without_lines = LINE_COMMENT.sub("", without_blocks)
    return HASH_COMMENT.sub("", without_lines)


def find_forbidden_pattern(sql: str) -> str | None:
    for label, pattern in FORBIDDEN_PATTERNS:
        match = pattern.search(sql)
        if match:
            if label.endswith("keyword"):
                return f"{label} '{match.group(1).upper()}'"
            return label
    return None


def mask_quoted_spans(sql: str) -> str:
    """Blank out string literals and quoted identifiers, keeping offsets."""
    return QUOTED_SPAN.sub(lambda match: QUOTED_MASK * len(match.group(0)), sql)


def _bounded_limit(value: str | None, default_limit: int, max_limit: int) -> str | None:
    """Replacement LIMIT clause, or ``None`` when ``value`` is already in range."""
    if value is None or not INTEGER_LITERAL.fullmatch(value):
        return f"LIMIT {default_limit}"
    limit = int(value)
    if limit < 1:
        return "LIMIT 1"
    if limit > max_limit:
        return f"LIMIT {max_limit}"
    return None


def normalize_limit_clause(
    sql: str,
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int = MAX_LIMIT,
) -> tuple[str, bool]:
    """Bound the row count of ``sql``.

    Returns the rewritten statement and whether a LIMIT had to be appended.
    A LIMIT without an integer argument (``LIMIT give``, ``LIMIT ALL``) is
    replaced by the default; integers outside ``[1, max_limit]`` are clamped.
    Quoted text is never treated as a LIMIT clause.
    """
    masked = mask_quoted_spans(sql)
    if not ANY_LIMIT.search(masked):
        return f"{sql} LIMIT {default_limit}", True

    pieces: list[str] = []
    cursor = 0
    for match in LIMIT_CLAUSE.finditer(masked):
        replacement = _bounded_limit(match.group(1), default_limit, max_limit)
        if replacement is None:
            continue
        pieces.append(sql[cursor : match.start()])
        pieces.append(replacement)
        cursor = match.end()
    pieces.append(sql[cursor:])
    return "".join(pieces), False


def check_sql(
    sql: str,
    *,
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int = MAX_LIMIT,
) -> SQLCheckResult:
    """Run the ordered safety gate; the first failing stage short-circuits."""
    trimmed = strip_comments(sql).strip()
    if not trimmed:
        return SQLCheckResult(
            is_valid=False, sql=sql, violation="Empty queries are not allowed."
        )

    if not trimmed.lower().startswith(ALLOWED_PREFIX):
        return SQLCheckResult(
            is_valid=False, sql=sql, violation="Only SELECT statements are allowed."
        )

    semicolon = trimmed.find(";")
    if semicolon != -1 and semicolon < len(trimmed) - 1:
        return SQLCheckResult(
            is_valid=False,
            sql=sql,
            violation="Multiple statements are not allowed.",
        )

    forbidden = find_forbidden_pattern(trimmed)
    if forbidden:
        return SQLCheckResult(
            is_valid=False,
            sql=sql,
            violation=f"Forbidden SQL detected: {forbidden}.",
        )

    statement = trimmed.removesuffix(";").rstrip()
    normalized_sql, limited = normalize_limit_clause(
        statement, default_limit=default_limit, max_limit=max_limit
    )
    return SQLCheckResult(
        is_valid=True,
        sql=sql,
        normalized_sql=normalized_sql,
        limited=limited,
    )
