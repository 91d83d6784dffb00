"""Request and response contracts."""

from querygate.models.generation import (
    MAX_PROMPT_LENGTH,
    AIGeneration,
    GenerationRequest,
    GenerationResult,
    GenerationSource,
    MatchedPattern,
)
from querygate.models.validation import (
    ErrorKind,
    ValidationRequest,
    ValidationResult,
)

__all__ = [
    "MAX_PROMPT_LENGTH",
    "AIGeneration",
    "GenerationRequest",
    "GenerationResult",
    "GenerationSource",
    "MatchedPattern",
    "ErrorKind",
    "ValidationRequest",
    "ValidationResult",
]
