"""Pattern catalog loading and deterministic pattern matching."""

from querygate.patterns.catalog import (
    CatalogError,
    QueryPattern,
    Rules,
    load_rules,
    parse_rules,
)
from querygate.patterns.matcher import (
    STOPWORDS,
    PatternMatch,
    match_prompt,
    sanitize_prompt,
    tokenize,
)

__all__ = [
    "CatalogError",
    "QueryPattern",
    "Rules",
    "load_rules",
    "parse_rules",
    "STOPWORDS",
    "PatternMatch",
    "match_prompt",
    "sanitize_prompt",
    "tokenize",
]
