"""PostgreSQL schema introspection into a ``SchemaMap``."""

from __future__ import annotations

from querygate.db.connection import ConnectionPool, DatabaseQueryError
from querygate.db.queries import COLUMNS_QUERY, TABLES_QUERY
from querygate.errors import DatabaseUnavailable
from querygate.schema.supplier import SchemaMap, TableDescription


class IntrospectionError(RuntimeError):
    """Raised when schema introspection fails."""


def _table_key(schema_name: str, table_name: str, default_schema: str) -> str:
    if schema_name == default_schema:
        return table_name
    return f"{schema_name}.{table_name}"


async def introspect_schema_map(
    pool: ConnectionPool,
    *,
    default_schema: str = "public",
    include_schemas: list[str] | None = None,
) -> SchemaMap:
    """Read tables, views and their columns into an ordered schema map.

    Tables in ``default_schema`` are keyed by bare name; others are
    schema-qualified.
    """
    target_schemas = sorted(
        {schema.strip() for schema in include_schemas or [default_schema] if schema.strip()}
        - {"pg_catalog", "information_schema"}
    )
    if not target_schemas:
        raise IntrospectionError("No target schemas selected for introspection.")

    try:
        conn = await pool.acquire()
    except DatabaseUnavailable as exc:
        raise IntrospectionError(str(exc)) from exc

    try:
        params = {"schemas": target_schemas}
        table_rows = await conn.fetch_all(TABLES_QUERY, params)
        column_rows = await conn.fetch_all(COLUMNS_QUERY, params)
    except DatabaseQueryError as exc:
        raise IntrospectionError(f"Schema introspection failed: {exc}") from exc
    finally:
        await pool.release(conn)

    columns: dict[str, list[str]] = {}
    for row in column_rows:
        key = _table_key(row["table_schema"], row["table_name"], default_schema)
        columns.setdefault(key, []).append(row["column_name"])

    schema: SchemaMap = {}
    for row in table_rows:
        key = _table_key(row["table_schema"], row["table_name"], default_schema)
        schema[key] = TableDescription(
            columns=columns.get(key, []),
            description=row["table_description"] or "",
        )
    return schema
