"""Deterministic keyword scoring and template filling."""

from __future__ import annotations

import itertools
import re
from dataclasses import dataclass, field
from typing import Iterable

from querygate.errors import NoPatternMatch, ValueExtractionFailure
from querygate.patterns.catalog import QueryPattern, Rules

STOPWORDS = frozenset({"the", "and", "or", "in", "at", "to", "for", "of", "with", "by"})
DENSITY_WEIGHT = 0.5

_NON_WORD = re.compile(r"[^\w\s]")
_WORD = re.compile(r"\w+")
_PLACEHOLDER = re.compile(r"\?")


@dataclass(frozen=True)
class PatternScore:
    pattern: QueryPattern
    score: float
    extracted_values: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class PatternMatch:
    pattern: QueryPattern
    sql: str
    confidence: float
    extracted_values: list[str] = field(default_factory=list)


def sanitize_prompt(prompt: str) -> str:
    return _NON_WORD.sub("", prompt.strip().lower())


def tokenize(prompt: str) -> list[str]:
    return _WORD.findall(sanitize_prompt(prompt))


def score_pattern(tokens: list[str], pattern: QueryPattern) -> PatternScore:
    keywords = set(pattern.keywords)
    hits = 0
    extracted: list[str] = []
    for keyword in pattern.keywords:
        try:
            index = tokens.index(keyword)
        except ValueError:
            continue
        hits += 1
        if index + 1 < len(tokens) and tokens[index + 1] not in keywords:
            extracted.append(tokens[index + 1])
        elif index > 0 and tokens[index - 1] not in keywords:
            extracted.append(tokens[index - 1])

    density = hits / len(pattern.keywords)
    return PatternScore(
        pattern=pattern,
        score=hits + DENSITY_WEIGHT * density,
        extracted_values=extracted,
    )


def find_best_pattern(
    tokens: list[str], patterns: Iterable[QueryPattern]
) -> PatternScore | None:
    """Return the highest scoring pattern; ties keep the earliest one."""
    best: PatternScore | None = None
    for pattern in patterns:
        candidate = score_pattern(tokens, pattern)
        if best is None or candidate.score > best.score:
            best = candidate
    if best is None or best.score == 0:
        return None
    return best


def candidate_values(tokens: list[str], keywords: Iterable[str]) -> list[str]:
    excluded = set(keywords)
    return [
        token
        for token in tokens
        if token not in excluded and len(token) > 1 and token not in STOPWORDS
    ]


def fill_template(pattern: QueryPattern, tokens: list[str]) -> str:
    """Replace ``?`` placeholders left to right, cycling through the values."""
    if pattern.placeholder_count == 0:
        return pattern.template

    values = candidate_values(tokens, pattern.keywords)
    if not values:
        raise ValueExtractionFailure(
            "Could not extract a value from the prompt to complete the query.",
            template=pattern.template,
            keywords=list(pattern.keywords),
            suggestion=(
                "Try including specific values like state names, categories, "
                "or IDs in your query."
            ),
        )

    counter = itertools.count()
    return _PLACEHOLDER.sub(
        lambda _match: values[next(counter) % len(values)], pattern.template
    )


def no_match_error(rules: Rules) -> NoPatternMatch:
    keywords = rules.all_keywords[:5]
    return NoPatternMatch(
        "Could not find a matching query pattern for the prompt.",
        suggestion=(
            "Try rephrasing your query or use keywords like: " + ", ".join(keywords)
        ),
        available_patterns=[
            pattern.summary() for pattern in rules.query_patterns[:3]
        ],
    )


def match_prompt(prompt: str, rules: Rules) -> PatternMatch:
    """Turn ``prompt`` into SQL using the best scoring catalog template."""
    tokens = tokenize(prompt)
    best = find_best_pattern(tokens, rules.query_patterns)
    if best is None:
        raise no_match_error(rules)

    sql = fill_template(best.pattern, tokens)
    confidence = min(best.score / len(best.pattern.keywords), 1.0)
    return PatternMatch(
        pattern=best.pattern,
        sql=sql,
        confidence=confidence,
        extracted_values=best.extracted_values,
    )
