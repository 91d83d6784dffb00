"""Anthropic implementation of the LLM generator interface."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx

from querygate.llm.base import LLMError, LLMGenerator, post_json

ANTHROPIC_VERSION = "2023-06-01"


@dataclass(frozen=True)
class AnthropicAdapter(LLMGenerator):
    """Generate SQL payloads using the Anthropic Messages API."""

    api_key: str
    model: str
    temperature: float = 0.3
    max_tokens: int = 1000
    base_url: str = "https://api.anthropic.com/v1"
    timeout_seconds: float = 30.0
    transport: httpx.AsyncBaseTransport | None = field(
        default=None, repr=False, compare=False
    )

    label = "Anthropic"

    async def _send(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        max_tokens: int,
        json_mode: bool = True,
    ) -> str:
        # The Messages API has no JSON mode; the system prompt carries the contract.
        body: dict[str, Any] = {
            "model": self.model,
            "max_tokens": max_tokens,
            "temperature": self.temperature,
            "messages": [{"role": "user", "content": user_prompt}],
        }
        if system_prompt:
            body["system"] = system_prompt

        payload = await post_json(
            self.label,
            self.base_url.rstrip("/") + "/messages",
            headers={
                "x-api-key": self.api_key,
                "anthropic-version": ANTHROPIC_VERSION,
                "content-type": "application/json",
            },
            body=body,
            timeout_seconds=self.timeout_seconds,
            transport=self.transport,
        )
        return self._extract_text(payload)

    @staticmethod
    def _extract_text(payload: dict[str, object]) -> str:
        content = payload.get("content")
        if not isinstance(content, list) or not content:
            raise LLMError("Anthropic response is missing content blocks.")

        first = content[0]
        if not isinstance(first, dict) or first.get("type") != "text":
            raise LLMError("Unexpected response type from Anthropic.")

        text = first.get("text")
        if not isinstance(text, str) or not text.strip():
            raise LLMError("Anthropic message text is empty.")
        return text
