"""Wiring of settings, catalog, pool and services into one runtime."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from querygate.audit import AuditLog, LoggingAuditLog
from querygate.config import Settings
from querygate.context import RuntimeContext, RuntimeContextHolder
from querygate.db.connection import open_pool
from querygate.errors import DatabaseUnavailable
from querygate.generation import QueryGenerator
from querygate.llm import AIService, create_ai_service
from querygate.patterns.catalog import load_rules
from querygate.schema.introspect import introspect_schema_map
from querygate.schema.supplier import SchemaMap, StaticSchemaSupplier
from querygate.validation import QueryValidator

logger = logging.getLogger(__name__)


@dataclass
class Runtime:
    settings: Settings
    holder: RuntimeContextHolder
    ai_service: AIService
    generator: QueryGenerator
    validator: QueryValidator

    async def close(self) -> None:
        pool = self.holder.current().pool
        if pool is not None:
            await pool.close()


async def build_runtime(
    settings: Settings,
    *,
    connect: bool = True,
    audit_log: AuditLog | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Runtime:
    """Load the rules file, open a pool when a DSN is set, and wire services.

    With ``connect=False`` no pool is opened even if ``POSTGRES_DSN`` is set,
    which keeps generation usable without a reachable database.
    """
    rules = load_rules(settings.rules_path)
    pool = None
    if connect and settings.database_configured:
        pool = await open_pool(
            settings.postgres_dsn,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
        )

    holder = RuntimeContextHolder(
        RuntimeContext(
            schema=StaticSchemaSupplier(rules.schema), catalog=rules, pool=pool
        )
    )
    audit_log = audit_log or LoggingAuditLog()
    ai_service = create_ai_service(settings, transport=transport)
    logger.info(
        "Runtime ready patterns=%d tables=%d database=%s ai_provider=%s ai_enabled=%s",
        len(rules.query_patterns),
        len(rules.schema),
        pool is not None,
        ai_service.provider.value,
        ai_service.enabled,
    )
    return Runtime(
        settings=settings,
        holder=holder,
        ai_service=ai_service,
        generator=QueryGenerator(
            holder, ai_service, audit_log, debug=settings.debug
        ),
        validator=QueryValidator(
            holder,
            audit_log,
            default_limit=settings.default_limit,
            max_limit=settings.max_limit,
            debug=settings.debug,
        ),
    )


async def refresh_schema(
    holder: RuntimeContextHolder, *, include_schemas: list[str] | None = None
) -> SchemaMap:
    """Replace the schema supplier with a live introspection of the database."""
    pool = holder.current().pool
    if pool is None:
        raise DatabaseUnavailable("Database connection not available")

    schema = await introspect_schema_map(pool, include_schemas=include_schemas)
    holder.reconfigure(schema=StaticSchemaSupplier(schema))
    return schema
