"""Process-scoped runtime state shared by the generation and validation services."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass

from querygate.db.connection import ConnectionPool
from querygate.patterns.catalog import Rules
from querygate.schema.supplier import SchemaSupplier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuntimeContext:
    schema: SchemaSupplier
    catalog: Rules
    pool: ConnectionPool | None = None


class RuntimeContextHolder:
    """Hands out the current context and swaps in replacements atomically."""

    def __init__(self, context: RuntimeContext) -> None:
        self._context = context

    def current(self) -> RuntimeContext:
        return self._context

    def reconfigure(self, **changes: object) -> RuntimeContext:
        """Replace selected fields; callers holding the old snapshot keep it."""
        updated = dataclasses.replace(self._context, **changes)
        self._context = updated
        logger.info("Runtime context reconfigured: %s", ", ".join(sorted(changes)))
        return updated
