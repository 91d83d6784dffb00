"""SQL safety rules for the lexical validation gate."""

from __future__ import annotations

import re

DEFAULT_LIMIT = 50
MAX_LIMIT = 500

BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
LINE_COMMENT = re.compile(r"--[^\n]*")
HASH_COMMENT = re.compile(r"#[^\n]*")

ALLOWED_PREFIX = "select"

# (label, pattern) pairs; the label is reported back to the caller.
FORBIDDEN_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    (
        "data definition/manipulation keyword",
        re.compile(
            r"\b(drop|delete|truncate|alter|create|grant|revoke|insert|update"
            r"|call|exec|execute)\b",
            re.IGNORECASE,
        ),
    ),
    (
        "UNION SELECT",
        re.compile(
            r"\bunion\b\s*(?:(?:all|distinct)\b\s*)?\(*\s*select\b", re.IGNORECASE
        ),
    ),
    ("INTO OUTFILE", re.compile(r"\binto\s+outfile\b", re.IGNORECASE)),
    ("LOAD_FILE()", re.compile(r"\bload_file\s*\(", re.IGNORECASE)),
    ("SLEEP()", re.compile(r"\bsleep\s*\(", re.IGNORECASE)),
    ("PG_SLEEP()", re.compile(r"\bpg_sleep\s*\(", re.IGNORECASE)),
    ("BENCHMARK()", re.compile(r"\bbenchmark\s*\(", re.IGNORECASE)),
    ("SET_CONFIG()", re.compile(r"\bset_config\s*\(", re.IGNORECASE)),
    ("information_schema access", re.compile(r"\binformation_schema\.", re.IGNORECASE)),
)

ANY_LIMIT = re.compile(r"\blimit\b", re.IGNORECASE)
LIMIT_CLAUSE = re.compile(r"\blimit\b(?:\s+([^\s;,)]+))?", re.IGNORECASE)
INTEGER_LITERAL = re.compile(r"-?[0-9]+")

# String literals and quoted identifiers, with doubled-quote escapes.
QUOTED_SPAN = re.compile(r"'(?:[^']|'')*'|\"(?:[^\"]|\"\")*\"")
QUOTED_MASK = "*"
