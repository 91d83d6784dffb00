"""Provider registry that routes SQL generation to the configured backend."""

from __future__ import annotations

import logging
from enum import Enum

import httpx
from pydantic import BaseModel, ConfigDict, Field

from querygate.llm.anthropic_adapter import AnthropicAdapter
from querygate.llm.base import LLMGenerator
from querygate.llm.openai_adapter import OpenAIAdapter
from querygate.models.generation import AIGeneration
from querygate.schema.supplier import SchemaMap

logger = logging.getLogger(__name__)


class AIProvider(str, Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


AVAILABLE_MODELS: dict[AIProvider, tuple[str, ...]] = {
    AIProvider.ANTHROPIC: (
        "claude-sonnet-4-20250514",
        "claude-3-5-sonnet-20241022",
        "claude-3-5-haiku-20241022",
        "claude-3-opus-20240229",
        "claude-3-sonnet-20240229",
        "claude-3-haiku-20240307",
    ),
    AIProvider.OPENAI: (
        "gpt-4-turbo-preview",
        "gpt-4",
        "gpt-3.5-turbo",
        "gpt-4o",
        "gpt-4o-mini",
    ),
}


class ProviderSettings(BaseModel):
    """Connection settings for one generative backend."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    api_key: str = Field(default="", repr=False)
    model: str = Field(min_length=1)
    temperature: float = Field(ge=0.0, le=2.0)
    max_tokens: int = Field(gt=0)

    @property
    def usable(self) -> bool:
        return self.enabled and bool(self.api_key.strip())


class AIServiceConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    provider: AIProvider
    openai: ProviderSettings
    anthropic: ProviderSettings

    def redacted(self) -> dict[str, object]:
        """Config as a plain dict with API keys replaced by a presence flag."""
        payload = self.model_dump(mode="json")
        for name in (AIProvider.OPENAI.value, AIProvider.ANTHROPIC.value):
            section = payload[name]
            section["api_key_set"] = bool(section.pop("api_key"))
        return payload


class AIService:
    """Routes generation requests to the active provider's adapter.

    Reconfiguration builds fresh adapters and swaps them in with a single
    assignment, so an in-flight ``generate`` keeps the adapter it started with.
    """

    def __init__(
        self,
        config: AIServiceConfig,
        *,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout_seconds = timeout_seconds
        self._transport = transport
        self._config = config
        self._adapters = self._build_adapters(config)

    def _build_adapters(
        self, config: AIServiceConfig
    ) -> dict[AIProvider, LLMGenerator]:
        adapters: dict[AIProvider, LLMGenerator] = {}
        if config.openai.usable:
            adapters[AIProvider.OPENAI] = OpenAIAdapter(
                api_key=config.openai.api_key,
                model=config.openai.model,
                temperature=config.openai.temperature,
                max_tokens=config.openai.max_tokens,
                timeout_seconds=self._timeout_seconds,
                transport=self._transport,
            )
        if config.anthropic.usable:
            adapters[AIProvider.ANTHROPIC] = AnthropicAdapter(
                api_key=config.anthropic.api_key,
                model=config.anthropic.model,
                temperature=config.anthropic.temperature,
                max_tokens=config.anthropic.max_tokens,
                timeout_seconds=self._timeout_seconds,
                transport=self._transport,
            )
        return adapters

    @property
    def provider(self) -> AIProvider:
        return self._config.provider

    @property
    def enabled(self) -> bool:
        """True when the active provider is enabled and has credentials."""
        return self.provider in self._adapters

    def get_config(self) -> AIServiceConfig:
        return self._config

    def update_config(self, config: AIServiceConfig) -> None:
        adapters = self._build_adapters(config)
        self._config, self._adapters = config, adapters
        logger.info(
            "AI configuration updated provider=%s enabled=%s",
            config.provider.value,
            self.enabled,
        )

    def set_provider(self, provider: AIProvider | str) -> None:
        self.update_config(
            self._config.model_copy(update={"provider": AIProvider(provider)})
        )

    async def generate(
        self, question: str, schema: SchemaMap
    ) -> AIGeneration | None:
        adapter = self._adapters.get(self.provider)
        if adapter is None:
            return None
        return await adapter.generate(question, schema)

    async def test_connection(self) -> bool:
        adapter = self._adapters.get(self.provider)
        if adapter is None:
            return False
        return await adapter.test_connection()

    @staticmethod
    def available_models(provider: AIProvider | str) -> list[str]:
        return list(AVAILABLE_MODELS[AIProvider(provider)])
