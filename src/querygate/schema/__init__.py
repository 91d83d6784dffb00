"""Schema map types, suppliers and PostgreSQL introspection."""

from querygate.schema.introspect import IntrospectionError, introspect_schema_map
from querygate.schema.supplier import (
    SchemaError,
    SchemaMap,
    SchemaSupplier,
    StaticSchemaSupplier,
    TableDescription,
    parse_schema_map,
    schema_map_to_dict,
)

__all__ = [
    "IntrospectionError",
    "introspect_schema_map",
    "SchemaError",
    "SchemaMap",
    "SchemaSupplier",
    "StaticSchemaSupplier",
    "TableDescription",
    "parse_schema_map",
    "schema_map_to_dict",
]
