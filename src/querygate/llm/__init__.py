"""LLM adapters and factory helpers."""

from __future__ import annotations

import httpx

from querygate.config import Settings
from querygate.llm.anthropic_adapter import AnthropicAdapter
from querygate.llm.base import LLMError, LLMGenerator, parse_generation
from querygate.llm.decode import LenientDecodeError, lenient_json_loads
from querygate.llm.openai_adapter import OpenAIAdapter
from querygate.llm.service import (
    AVAILABLE_MODELS,
    AIProvider,
    AIService,
    AIServiceConfig,
    ProviderSettings,
)


def default_provider(settings: Settings) -> AIProvider:
    """Explicit AI_PROVIDER wins, then whichever backend has a key."""
    if settings.ai_provider:
        return AIProvider(settings.ai_provider)
    if settings.anthropic_api_key:
        return AIProvider.ANTHROPIC
    if settings.openai_api_key:
        return AIProvider.OPENAI
    return AIProvider.ANTHROPIC


def ai_config_from_settings(settings: Settings) -> AIServiceConfig:
    return AIServiceConfig(
        provider=default_provider(settings),
        openai=ProviderSettings(
            enabled=bool(settings.openai_api_key),
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            temperature=settings.openai_temperature,
            max_tokens=settings.openai_max_tokens,
        ),
        anthropic=ProviderSettings(
            enabled=bool(settings.anthropic_api_key),
            api_key=settings.anthropic_api_key,
            model=settings.anthropic_model,
            temperature=settings.anthropic_temperature,
            max_tokens=settings.anthropic_max_tokens,
        ),
    )


def create_ai_service(
    settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None
) -> AIService:
    """Create the provider registry for current settings."""
    return AIService(
        ai_config_from_settings(settings),
        timeout_seconds=settings.ai_timeout_seconds,
        transport=transport,
    )


__all__ = [
    "AVAILABLE_MODELS",
    "AIProvider",
    "AIService",
    "AIServiceConfig",
    "AnthropicAdapter",
    "LLMError",
    "LLMGenerator",
    "LenientDecodeError",
    "OpenAIAdapter",
    "ProviderSettings",
    "ai_config_from_settings",
    "create_ai_service",
    "default_provider",
    "lenient_json_loads",
    "parse_generation",
]
