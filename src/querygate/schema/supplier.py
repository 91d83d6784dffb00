"""Schema map types and the supplier interface consumed by the pipelines."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol


class SchemaError(RuntimeError):
    """Raised when a schema map payload is malformed."""


@dataclass(frozen=True)
class TableDescription:
    columns: list[str] = field(default_factory=list)
    description: str = ""

    def to_dict(self) -> dict[str, object]:
        return {"columns": list(self.columns), "description": self.description}


SchemaMap = dict[str, TableDescription]


class SchemaSupplier(Protocol):
    def current(self) -> SchemaMap:
        """Return the schema snapshot for the active database."""


class StaticSchemaSupplier:
    """Serve a fixed schema map, e.g. the one shipped in the rules file."""

    def __init__(self, schema: SchemaMap) -> None:
        self._schema = dict(schema)

    def current(self) -> SchemaMap:
        return dict(self._schema)


def parse_schema_map(payload: Any) -> SchemaMap:
    """Build a schema map from its JSON representation."""
    if not isinstance(payload, dict):
        raise SchemaError("Schema must be an object keyed by table name.")

    schema: SchemaMap = {}
    for table_name, table_value in payload.items():
        if not isinstance(table_value, dict):
            raise SchemaError(f"Table '{table_name}' has invalid structure.")
        columns = table_value.get("columns", [])
        if not isinstance(columns, list) or not all(
            isinstance(item, str) for item in columns
        ):
            raise SchemaError(f"Table '{table_name}' has invalid 'columns'.")
        description = table_value.get("description") or ""
        if not isinstance(description, str):
            raise SchemaError(f"Table '{table_name}' has invalid 'description'.")
        schema[str(table_name)] = TableDescription(
            columns=list(columns), description=description
        )
    return schema


def schema_map_to_dict(schema: SchemaMap) -> dict[str, dict[str, object]]:
    return {table_name: table.to_dict() for table_name, table in schema.items()}
