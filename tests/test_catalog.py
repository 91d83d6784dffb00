import json

import pytest

from querygate.patterns.catalog import CatalogError, load_rules, parse_rules
from querygate.schema.supplier import TableDescription


def test_packaged_rules_load_with_schema(rules):
    assert len(rules.query_patterns) == 8
    assert rules.query_patterns[0].intent == "users_by_state"
    assert list(rules.schema) == ["users", "products", "orders"]
    assert isinstance(rules.schema["users"], TableDescription)
    assert "state" in rules.schema["users"].columns


def test_keywords_are_lowercased_and_trimmed_in_order():
    rules = parse_rules(
        {
            "query_patterns": [
                {"intent": "x", "template": "SELECT 1", "keywords": [" Users ", "STATE"]}
            ]
        }
    )

    pattern = rules.query_patterns[0]
    assert pattern.keywords == ("users", "state")
    assert pattern.examples == ()
    assert pattern.placeholder_count == 0


def test_all_keywords_follow_catalog_order(rules):
    assert rules.all_keywords[:5] == ["users", "customers", "state", "from", "live"]


def test_pattern_without_keywords_is_rejected():
    with pytest.raises(CatalogError, match="Pattern #0 is invalid"):
        parse_rules(
            {"query_patterns": [{"intent": "x", "template": "SELECT 1", "keywords": []}]}
        )


def test_duplicate_intents_are_rejected():
    pattern = {"intent": "dup", "template": "SELECT 1", "keywords": ["a"]}
    with pytest.raises(CatalogError, match="Duplicate pattern intent"):
        parse_rules({"query_patterns": [pattern, pattern]})


def test_missing_pattern_list_is_rejected():
    with pytest.raises(CatalogError, match="query_patterns"):
        parse_rules({"schema": {}})


def test_invalid_schema_is_reported_as_catalog_error():
    with pytest.raises(CatalogError, match="invalid 'columns'"):
        parse_rules({"query_patterns": [], "schema": {"users": {"columns": "id"}}})


def test_load_rules_from_custom_path(tmp_path):
    path = tmp_path / "rules.json"
    path.write_text(
        json.dumps(
            {
                "schema": {"t": {"columns": ["id"], "description": "T"}},
                "query_patterns": [
                    {"intent": "all_t", "template": "SELECT id FROM t", "keywords": ["t"]}
                ],
            }
        ),
        encoding="utf-8",
    )

    rules = load_rules(path)

    assert rules.find("all_t").template == "SELECT id FROM t"
    assert rules.find("missing") is None
    assert rules.schema["t"].description == "T"


def test_load_rules_reports_unreadable_and_malformed_files(tmp_path):
    with pytest.raises(CatalogError, match="Could not read rules file"):
        load_rules(tmp_path / "missing.json")

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(CatalogError, match="not valid JSON"):
        load_rules(broken)
