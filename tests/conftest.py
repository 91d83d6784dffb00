import asyncio

import pytest

from querygate.context import RuntimeContext, RuntimeContextHolder
from querygate.db.connection import DatabaseQueryError
from querygate.errors import DatabaseUnavailable
from querygate.patterns.catalog import load_rules
from querygate.schema.supplier import StaticSchemaSupplier

ENV_VARS = (
    "POSTGRES_DSN",
    "RULES_PATH",
    "AI_PROVIDER",
    "AI_TIMEOUT_SECONDS",
    "OPENAI_API_KEY",
    "OPENAI_MODEL",
    "OPENAI_TEMPERATURE",
    "OPENAI_MAX_TOKENS",
    "ANTHROPIC_API_KEY",
    "ANTHROPIC_MODEL",
    "ANTHROPIC_TEMPERATURE",
    "ANTHROPIC_MAX_TOKENS",
    "DEFAULT_LIMIT",
    "MAX_LIMIT",
    "POOL_MIN_SIZE",
    "POOL_MAX_SIZE",
    "DEBUG",
    "LOG_LEVEL",
)


class FakeConnection:
    """Scripted stand-in for a pooled psycopg connection."""

    def __init__(self, rows=None, explain_error=None, fetch_error=None, delay=0.0):
        self.rows = rows if rows is not None else []
        self.explain_error = explain_error
        self.fetch_error = fetch_error
        self.delay = delay
        self.statements = []

    async def explain(self, sql):
        self.statements.append(f"EXPLAIN {sql}")
        if self.explain_error is not None:
            raise self.explain_error

    async def fetch_all(self, sql, params=None):
        self.statements.append(sql)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fetch_error is not None:
            raise self.fetch_error
        if callable(self.rows):
            return self.rows(sql, params)
        return list(self.rows)


class FakePool:
    """Counts acquires and releases so leaks show up in assertions."""

    def __init__(self, conn=None, unavailable=False):
        self.conn = conn or FakeConnection()
        self.unavailable = unavailable
        self.acquired = 0
        self.released = 0
        self.closed = False

    async def acquire(self):
        if self.unavailable:
            raise DatabaseUnavailable("Database connection unavailable: pool exhausted")
        self.acquired += 1
        return self.conn

    async def release(self, conn):
        assert conn is self.conn
        self.released += 1

    async def close(self):
        self.closed = True


class RecordingAuditLog:
    def __init__(self):
        self.entries = []

    async def record(self, entry):
        self.entries.append(entry)


class FailingAuditLog:
    async def record(self, entry):
        raise RuntimeError("audit sink is down")


def syntax_error(message="syntax error at or near \"FORM\""):
    return DatabaseQueryError(message, code="42601")


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def rules():
    return load_rules()


@pytest.fixture
def audit_log():
    return RecordingAuditLog()


@pytest.fixture
def make_holder(rules):
    def _make(pool=None, catalog=None, schema=None):
        catalog = catalog or rules
        return RuntimeContextHolder(
            RuntimeContext(
                schema=StaticSchemaSupplier(catalog.schema if schema is None else schema),
                catalog=catalog,
                pool=pool,
            )
        )

    return _make
