"""Provider-independent LLM interface for SQL generation."""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from typing import Any

import httpx

from querygate.llm.decode import LenientDecodeError, lenient_json_loads
from querygate.models.generation import AIGeneration
from querygate.prompts.sql_generation import build_sql_generation_prompt
from querygate.schema.supplier import SchemaMap

logger = logging.getLogger(__name__)


class LLMError(RuntimeError):
    """Raised when LLM generation fails or returns invalid output."""


def parse_generation(content: str) -> AIGeneration:
    """Decode backend text into the generation contract, clamping confidence."""
    try:
        payload = lenient_json_loads(content)
    except LenientDecodeError as exc:
        raise LLMError(str(exc)) from exc

    if not isinstance(payload, dict):
        raise LLMError("LLM response content was not a JSON object.")

    sql = payload.get("sql")
    if not isinstance(sql, str) or not sql.strip():
        raise LLMError("LLM response is missing a non-empty 'sql' field.")

    confidence = payload.get("confidence")
    if (
        isinstance(confidence, bool)
        or not isinstance(confidence, (int, float))
        or math.isnan(confidence)
    ):
        raise LLMError("LLM response 'confidence' is not numeric.")

    reasoning = payload.get("reasoning")
    tables_used = payload.get("tables_used")
    return AIGeneration(
        sql=sql.strip(),
        confidence=max(0.0, min(1.0, float(confidence))),
        reasoning=reasoning if isinstance(reasoning, str) else "",
        tables_used=(
            [str(item) for item in tables_used] if isinstance(tables_used, list) else []
        ),
    )


async def post_json(
    label: str,
    url: str,
    *,
    headers: dict[str, str],
    body: dict[str, Any],
    timeout_seconds: float,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[str, Any]:
    """POST a JSON body and return the decoded JSON object, or raise LLMError."""
    try:
        async with httpx.AsyncClient(
            timeout=timeout_seconds, transport=transport
        ) as client:
            response = await client.post(url, headers=headers, json=body)
            response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise LLMError(
            f"{label} request failed with HTTP {exc.response.status_code}: "
            f"{exc.response.text}"
        ) from exc
    except httpx.TimeoutException as exc:
        raise LLMError(f"{label} request timed out.") from exc
    except httpx.HTTPError as exc:
        raise LLMError(f"{label} request failed: {exc}") from exc

    try:
        payload = response.json()
    except ValueError as exc:
        raise LLMError(f"{label} response was not valid JSON.") from exc
    if not isinstance(payload, dict):
        raise LLMError(f"{label} response has an unexpected shape.")
    return payload


class LLMGenerator(ABC):
    """Abstract LLM adapter interface.

    Subclasses only implement ``_send``; ``generate`` owns prompt building,
    lenient decoding and the unavailable-on-any-failure boundary.
    """

    label = "LLM"
    max_tokens: int

    @abstractmethod
    async def _send(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        max_tokens: int,
        json_mode: bool = True,
    ) -> str:
        """Send one request and return the raw text of the reply."""

    async def generate(
        self, question: str, schema: SchemaMap
    ) -> AIGeneration | None:
        """Generate SQL for ``question``; ``None`` means the backend is unavailable."""
        try:
            prompt = build_sql_generation_prompt(question, schema)
            content = await self._send(
                prompt.system_prompt, prompt.user_prompt, max_tokens=self.max_tokens
            )
            return parse_generation(content)
        except Exception as exc:
            logger.warning("%s generation unavailable: %s", self.label, exc)
            return None

    async def test_connection(self) -> bool:
        try:
            await self._send("", "Test connection", max_tokens=5, json_mode=False)
        except LLMError as exc:
            logger.warning("%s connection test failed: %s", self.label, exc)
            return False
        return True
