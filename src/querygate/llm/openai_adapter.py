"""OpenAI implementation of the LLM generator interface."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx

from querygate.llm.base import LLMError, LLMGenerator, post_json


@dataclass(frozen=True)
class OpenAIAdapter(LLMGenerator):
    """Generate SQL payloads using the OpenAI Chat Completions API."""

    api_key: str
    model: str
    temperature: float = 0.2
    max_tokens: int = 2000
    base_url: str = "https://api.openai.com/v1"
    timeout_seconds: float = 30.0
    transport: httpx.AsyncBaseTransport | None = field(
        default=None, repr=False, compare=False
    )

    label = "OpenAI"

    async def _send(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        max_tokens: int,
        json_mode: bool = True,
    ) -> str:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": user_prompt})

        body: dict[str, Any] = {
            "model": self.model,
            "temperature": self.temperature,
            "max_tokens": max_tokens,
            "messages": messages,
        }
        if json_mode:
            body["response_format"] = {"type": "json_object"}

        payload = await post_json(
            self.label,
            self.base_url.rstrip("/") + "/chat/completions",
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            body=body,
            timeout_seconds=self.timeout_seconds,
            transport=self.transport,
        )
        return self._extract_message_content(payload)

    @staticmethod
    def _extract_message_content(payload: dict[str, object]) -> str:
        choices = payload.get("choices")
        if not isinstance(choices, list) or not choices:
            raise LLMError("OpenAI response is missing choices.")

        first = choices[0]
        if not isinstance(first, dict):
            raise LLMError("OpenAI response has invalid choice format.")

        message = first.get("message")
        if not isinstance(message, dict):
            raise LLMError("OpenAI response is missing message content.")

        content = message.get("content")
        if not isinstance(content, str) or not content.strip():
            raise LLMError("OpenAI message content is empty.")
        return content
