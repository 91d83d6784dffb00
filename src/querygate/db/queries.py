"""Catalog queries used to build a schema map from a live database."""

# Ordinary, partitioned and foreign tables plus plain and materialized views.
RELATION_KINDS = "('r', 'p', 'f', 'v', 'm')"

TABLES_QUERY = f"""
SELECT
  n.nspname AS table_schema,
  c.relname AS table_name,
  obj_description(c.oid, 'pg_class') AS table_description
FROM pg_catalog.pg_class AS c
JOIN pg_catalog.pg_namespace AS n
  ON n.oid = c.relnamespace
WHERE n.nspname = ANY(%(schemas)s)
  AND c.relkind IN {RELATION_KINDS}
ORDER BY n.nspname, c.relname;
"""

COLUMNS_QUERY = f"""
SELECT
  n.nspname AS table_schema,
  c.relname AS table_name,
  a.attname AS column_name
FROM pg_catalog.pg_attribute AS a
JOIN pg_catalog.pg_class AS c
  ON c.oid = a.attrelid
JOIN pg_catalog.pg_namespace AS n
  ON n.oid = c.relnamespace
WHERE n.nspname = ANY(%(schemas)s)
  AND c.relkind IN {RELATION_KINDS}
  AND a.attnum > 0
  AND NOT a.attisdropped
ORDER BY n.nspname, c.relname, a.attnum;
"""
