"""Prompt builder for schema-grounded NL-to-SQL generation requests."""

from __future__ import annotations

import json
from dataclasses import dataclass

from querygate.schema.supplier import SchemaMap


class PromptBuildError(RuntimeError):
    """Raised when SQL generation prompt building cannot proceed safely."""


@dataclass(frozen=True)
class PromptBundle:
    """Inspectable prompt bundle used by the LLM adapters."""

    question: str
    schema_listing: str
    output_contract_json: str
    system_prompt: str
    user_prompt: str


_OUTPUT_CONTRACT = {
    "type": "object",
    "required": ["sql", "confidence", "reasoning", "tables_used"],
    "properties": {
        "sql": {
            "type": "string",
            "description": "A single PostgreSQL SELECT query on one line. No markdown.",
        },
        "confidence": {
            "type": "number",
            "minimum": 0.0,
            "maximum": 1.0,
            "description": "Estimated confidence in the SQL interpretation.",
        },
        "reasoning": {
            "type": "string",
            "description": "Brief plain-text explanation of joins, filters and logic.",
        },
        "tables_used": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Tables referenced by the SQL.",
        },
    },
}


def describe_schema(schema: SchemaMap) -> str:
    """Serialize a schema map as one ``table: col, col (description)`` line per table."""
    lines = []
    for table_name, table in schema.items():
        line = f"{table_name}: {', '.join(table.columns)}"
        if table.description:
            line += f" ({table.description})"
        lines.append(line)
    return "\n".join(lines)


def build_sql_generation_prompt(question: str, schema: SchemaMap) -> PromptBundle:
    """Build prompts constrained to the supplied schema."""
    normalized_question = question.strip()
    if not normalized_question:
        raise PromptBuildError("Question cannot be empty.")
    if not schema:
        raise PromptBuildError("Schema is empty; nothing to ground the query on.")

    schema_listing = describe_schema(schema)
    output_contract_json = json.dumps(_OUTPUT_CONTRACT, indent=2, sort_keys=True)

    system_prompt = (
        "You are an expert SQL query generator for PostgreSQL. "
        "Convert natural language requests into SQL using only the schema below.\n\n"
        f"Database schema:\n{schema_listing}\n\n"
        "Rules:\n"
        "1. Only use tables and columns that exist in the schema.\n"
        "2. Generate exactly one read-only SELECT statement.\n"
        "3. Never emit INSERT/UPDATE/DELETE/DDL or multiple statements.\n"
        "4. Join through linking tables for many-to-many relationships.\n"
        "5. Add ORDER BY for 'top', 'most' or 'best' requests.\n"
        "6. Always end with a numeric LIMIT, e.g. LIMIT 20.\n"
        "7. Use short, meaningful table aliases.\n\n"
        "Confidence scoring: 0.9-1.0 clear schema mapping; 0.7-0.8 minor "
        "ambiguity; 0.5-0.6 requires assumptions; below 0.5 high uncertainty.\n\n"
        f"Response contract (JSON Schema-like):\n{output_contract_json}\n\n"
        "Return ONLY the JSON object. No markdown, no code fences, no extra text. "
        "Keep every string on one line without literal newlines."
    )

    user_prompt = (
        f'Natural language request: "{normalized_question}"\n\n'
        "Respond with the JSON object containing sql, confidence, reasoning "
        "and tables_used."
    )

    return PromptBundle(
        question=normalized_question,
        schema_listing=schema_listing,
        output_contract_json=output_contract_json,
        system_prompt=system_prompt,
        user_prompt=user_prompt,
    )
