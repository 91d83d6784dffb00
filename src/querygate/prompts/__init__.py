"""Prompt builders for querygate."""

from querygate.prompts.sql_generation import (
    PromptBuildError,
    PromptBundle,
    build_sql_generation_prompt,
    describe_schema,
)

__all__ = [
    "PromptBuildError",
    "PromptBundle",
    "build_sql_generation_prompt",
    "describe_schema",
]
