"""Error taxonomy surfaced by the generation and validation pipelines."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pydantic import ValidationError


class QueryGateError(RuntimeError):
    """Base class for errors surfaced to querygate callers."""


class InputError(QueryGateError, ValueError):
    """Raised when a prompt or SQL string fails request validation."""


class NoPatternMatch(QueryGateError):
    """Raised when no catalog pattern matches the prompt."""

    def __init__(
        self,
        message: str,
        *,
        suggestion: str,
        available_patterns: list[dict[str, object]],
    ) -> None:
        super().__init__(message)
        self.suggestion = suggestion
        self.available_patterns = available_patterns


class ValueExtractionFailure(QueryGateError):
    """Raised when a matched template has placeholders but no usable values."""

    def __init__(
        self,
        message: str,
        *,
        template: str,
        keywords: list[str],
        suggestion: str,
    ) -> None:
        super().__init__(message)
        self.template = template
        self.keywords = keywords
        self.suggestion = suggestion


class DatabaseUnavailable(QueryGateError):
    """Raised when no database pool is configured or reachable."""

    syntax_valid = True


class InternalError(QueryGateError):
    """Raised for unexpected failures; detail is elided outside debug mode."""

    def __init__(self, message: str, *, detail: str | None = None) -> None:
        super().__init__(message)
        self.detail = detail


def input_error(exc: ValidationError) -> InputError:
    """Flatten a request ``ValidationError`` into one ``InputError`` line."""
    messages = [
        f"{'.'.join(str(loc) for loc in err['loc']) or 'request'}: {err['msg']}"
        for err in exc.errors()
    ]
    return InputError("Invalid request: " + "; ".join(messages))
