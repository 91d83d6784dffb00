"""Typed SQL validation contracts."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ErrorKind(str, Enum):
    INVALID_QUERY = "invalid_query"
    SYNTAX = "syntax"
    EXECUTION = "execution"
    TIMEOUT = "timeout"


class ValidationRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    sql: str = Field(min_length=1)
    execute: bool = False

    @field_validator("sql")
    @classmethod
    def validate_sql(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("sql cannot be blank.")
        return value


class ValidationResult(BaseModel):
    """Safety and execution verdict for a single SQL string."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    is_valid: bool
    syntax_valid: bool
    rows: list[dict[str, Any]] | None = None
    row_count: int | None = None
    execution_time_ms: int = 0
    limited: bool = False
    error_kind: ErrorKind | None = None
    error_message: str | None = None
    error_code: str | None = None
    suggestion: str | None = None
    normalized_sql: str | None = None
