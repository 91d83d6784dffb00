"""Rules file loading: the pattern catalog and its companion schema map."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from querygate.schema.supplier import SchemaError, SchemaMap, parse_schema_map

DEFAULT_RULES_RESOURCE = "default_rules.json"


class CatalogError(RuntimeError):
    """Raised when the rules file cannot be loaded or is malformed."""


class QueryPattern(BaseModel):
    """Single keyword-scored SQL template."""

    model_config = ConfigDict(frozen=True)

    intent: str = Field(min_length=1)
    template: str = Field(min_length=1)
    description: str = ""
    keywords: tuple[str, ...] = Field(min_length=1)
    examples: tuple[str, ...] = ()

    @field_validator("keywords")
    @classmethod
    def normalize_keywords(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        normalized = tuple(item.strip().lower() for item in value if item.strip())
        if not normalized:
            raise ValueError("pattern needs at least one non-empty keyword.")
        return normalized

    @property
    def placeholder_count(self) -> int:
        return self.template.count("?")

    def summary(self) -> dict[str, object]:
        return {"description": self.description, "keywords": list(self.keywords[:3])}


@dataclass(frozen=True)
class Rules:
    """Pattern catalog plus the schema map shipped alongside it."""

    query_patterns: tuple[QueryPattern, ...] = ()
    schema: SchemaMap = field(default_factory=dict)

    @property
    def all_keywords(self) -> list[str]:
        return [keyword for pattern in self.query_patterns for keyword in pattern.keywords]

    def find(self, intent: str) -> QueryPattern | None:
        for pattern in self.query_patterns:
            if pattern.intent == intent:
                return pattern
        return None


def parse_rules(payload: Any) -> Rules:
    if not isinstance(payload, dict):
        raise CatalogError("Rules file must contain a JSON object.")

    patterns_payload = payload.get("query_patterns")
    if not isinstance(patterns_payload, list):
        raise CatalogError("Rules file is missing a valid 'query_patterns' list.")

    patterns: list[QueryPattern] = []
    seen: set[str] = set()
    for index, item in enumerate(patterns_payload):
        try:
            pattern = QueryPattern.model_validate(item)
        except ValidationError as exc:
            messages = "; ".join(
                f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}"
                for err in exc.errors()
            )
            raise CatalogError(f"Pattern #{index} is invalid: {messages}") from exc
        if pattern.intent in seen:
            raise CatalogError(f"Duplicate pattern intent: '{pattern.intent}'.")
        seen.add(pattern.intent)
        patterns.append(pattern)

    try:
        schema = parse_schema_map(payload.get("schema", {}))
    except SchemaError as exc:
        raise CatalogError(str(exc)) from exc

    return Rules(query_patterns=tuple(patterns), schema=schema)


def load_rules(path: Path | None = None) -> Rules:
    """Load rules from ``path``, or the packaged defaults when omitted."""
    try:
        if path is None:
            raw = (
                resources.files("querygate.patterns")
                .joinpath(DEFAULT_RULES_RESOURCE)
                .read_text(encoding="utf-8")
            )
        else:
            raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CatalogError(f"Could not read rules file '{path}': {exc}") from exc

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise CatalogError(f"Rules file is not valid JSON: {exc}") from exc

    return parse_rules(payload)
