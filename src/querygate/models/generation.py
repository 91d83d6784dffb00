"""Typed generation contracts shared by the AI and pattern-matching paths."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

MAX_PROMPT_LENGTH = 500


class _Contract(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GenerationSource(str, Enum):
    AI = "ai"
    PATTERN_MATCHING = "pattern_matching"


class GenerationRequest(_Contract):
    """Incoming natural-language generation request."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True
    )

    prompt: str = Field(min_length=1, max_length=MAX_PROMPT_LENGTH)
    use_ai: bool = Field(default=True, alias="useAI")

    @field_validator("prompt")
    @classmethod
    def validate_prompt(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("prompt cannot be blank.")
        return normalized


class MatchedPattern(_Contract):
    intent: str
    description: str
    keywords: list[str] = Field(default_factory=list)


class AIGeneration(BaseModel):
    """Structured output contract expected from generative backends."""

    sql: str = Field(min_length=1)
    confidence: float = Field(ge=0.0, le=1.0)
    reasoning: str = ""
    tables_used: list[str] = Field(default_factory=list)


class GenerationResult(_Contract):
    """Normalized generation response for both generation paths."""

    sql: str
    confidence: float = Field(ge=0.0, le=1.0)
    source: GenerationSource
    matched_pattern: MatchedPattern
    extracted_values: list[str] = Field(default_factory=list)
    reasoning: str | None = None
    tables_used: list[str] = Field(default_factory=list)
    ai_enabled: bool = False
