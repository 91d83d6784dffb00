"""Natural-language to SQL orchestration across the AI and pattern paths."""

from __future__ import annotations

import logging
import time

from pydantic import ValidationError

from querygate.audit import AuditEntry, AuditLog, AuditStatus, record_safely
from querygate.context import RuntimeContext, RuntimeContextHolder
from querygate.db.executor import elapsed_ms
from querygate.errors import (
    InternalError,
    NoPatternMatch,
    ValueExtractionFailure,
    input_error,
)
from querygate.llm.service import AIService
from querygate.models.generation import (
    GenerationRequest,
    GenerationResult,
    GenerationSource,
    MatchedPattern,
)
from querygate.patterns.matcher import match_prompt

logger = logging.getLogger(__name__)

AI_INTENT = "ai_generated"
AI_DESCRIPTION = "AI-generated SQL query"


class QueryGenerator:
    """Try the AI backend first when allowed, then fall back to the catalog.

    Every terminal outcome is audited once. ``NoPatternMatch`` and
    ``ValueExtractionFailure`` reach the caller unchanged; anything else
    unexpected surfaces as ``InternalError``.
    """

    def __init__(
        self,
        holder: RuntimeContextHolder,
        ai_service: AIService,
        audit_log: AuditLog,
        *,
        debug: bool = False,
    ) -> None:
        self.holder = holder
        self.ai_service = ai_service
        self.audit_log = audit_log
        self.debug = debug

    async def generate(self, prompt: str, use_ai: bool = True) -> GenerationResult:
        started = time.perf_counter()
        try:
            request = GenerationRequest(prompt=prompt, use_ai=use_ai)
        except ValidationError as exc:
            raise input_error(exc) from exc

        context = self.holder.current()
        try:
            result = await self._resolve(request, context)
        except (NoPatternMatch, ValueExtractionFailure) as exc:
            await record_safely(
                self.audit_log,
                AuditEntry(
                    prompt=request.prompt,
                    sql=None,
                    status=AuditStatus.VALIDATION_ERROR,
                    latency_ms=elapsed_ms(started),
                    error_message=str(exc),
                ),
            )
            raise
        except Exception as exc:
            logger.exception("Unexpected failure while generating SQL")
            await record_safely(
                self.audit_log,
                AuditEntry(
                    prompt=request.prompt,
                    sql=None,
                    status=AuditStatus.EXECUTION_ERROR,
                    latency_ms=elapsed_ms(started),
                    error_message=str(exc),
                ),
            )
            raise InternalError(
                "Failed to generate SQL query",
                detail=str(exc) if self.debug else None,
            ) from exc

        await record_safely(
            self.audit_log,
            AuditEntry(
                prompt=request.prompt,
                sql=result.sql,
                status=AuditStatus.SUCCESS,
                latency_ms=elapsed_ms(started),
                confidence=result.confidence,
            ),
        )
        return result

    async def _resolve(
        self, request: GenerationRequest, context: RuntimeContext
    ) -> GenerationResult:
        ai_enabled = self.ai_service.enabled
        if request.use_ai and ai_enabled:
            generation = await self.ai_service.generate(
                request.prompt, context.schema.current()
            )
            if generation is not None:
                return GenerationResult(
                    sql=generation.sql,
                    confidence=generation.confidence,
                    source=GenerationSource.AI,
                    matched_pattern=MatchedPattern(
                        intent=AI_INTENT,
                        description=generation.reasoning or AI_DESCRIPTION,
                    ),
                    reasoning=generation.reasoning,
                    tables_used=generation.tables_used,
                    ai_enabled=True,
                )
            logger.info("AI generation unavailable, falling back to pattern matching")

        match = match_prompt(request.prompt, context.catalog)
        return GenerationResult(
            sql=match.sql,
            confidence=match.confidence,
            source=GenerationSource.PATTERN_MATCHING,
            matched_pattern=MatchedPattern(
                intent=match.pattern.intent,
                description=match.pattern.description,
                keywords=list(match.pattern.keywords),
            ),
            extracted_values=match.extracted_values,
            ai_enabled=ai_enabled,
        )
