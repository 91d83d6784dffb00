import json

from querygate.cli import main


def test_no_command_prints_help(clean_env, capsys):
    assert main([]) == 0
    assert "usage: querygate" in capsys.readouterr().out


def test_config_check_redacts_keys(clean_env, capsys):
    clean_env.setenv("OPENAI_API_KEY", "sk-secret")

    assert main(["config-check"]) == 0

    out = capsys.readouterr().out
    assert "OPENAI_API_KEY: ***" in out
    assert "sk-secret" not in out
    assert "RULES_PATH: (packaged default)" in out


def test_invalid_configuration_exits_with_two(clean_env, capsys):
    clean_env.setenv("POSTGRES_DSN", "mysql://root@localhost/app")

    assert main(["config-check"]) == 2
    assert "Configuration error" in capsys.readouterr().err


def test_healthcheck_requires_dsn(clean_env, capsys):
    assert main(["healthcheck"]) == 2
    assert "POSTGRES_DSN is required" in capsys.readouterr().err


def test_patterns_lists_catalog(clean_env, capsys):
    assert main(["patterns"]) == 0

    out = capsys.readouterr().out
    assert "Query patterns (8):" in out
    assert "- users_by_state: Find users who live in a given state" in out


def test_generate_with_pattern_matching(clean_env, capsys):
    assert main(["generate", "users from california", "--no-ai"]) == 0

    out = capsys.readouterr().out
    assert "- source: pattern_matching" in out
    payload = json.loads(out.split("JSON payload:\n", 1)[1])
    assert payload["matchedPattern"]["intent"] == "users_by_state"
    assert "LOWER('california')" in payload["sql"]


def test_generate_without_match_prints_suggestion(clean_env, capsys):
    assert main(["generate", "tell me a joke"]) == 1

    err = capsys.readouterr().err
    assert "Try rephrasing your query or use keywords like: users" in err
    assert "Find users who live in a given state" in err


def test_validate_rejects_unsafe_sql_without_database(clean_env, capsys):
    assert main(["validate", "DROP TABLE users"]) == 1

    out = capsys.readouterr().out
    assert "- kind: invalid_query" in out
    assert "Only SELECT statements are allowed." in out


def test_validate_safe_sql_needs_database(clean_env, capsys):
    assert main(["validate", "SELECT 1"]) == 1
    assert "Database unavailable" in capsys.readouterr().err


def test_validate_blank_sql_is_invalid_input(clean_env, capsys):
    assert main(["validate", "   "]) == 1
    assert "Invalid input" in capsys.readouterr().err


def test_providers_lists_models_without_keys(clean_env, capsys):
    clean_env.setenv("ANTHROPIC_API_KEY", "ak-secret")

    assert main(["providers"]) == 0

    out = capsys.readouterr().out
    assert "Active provider: anthropic (enabled: True)" in out
    assert "- gpt-4o-mini" in out
    assert "- claude-sonnet-4-20250514" in out
    assert '"api_key_set": true' in out
    assert "ak-secret" not in out


def test_schema_prints_rules_schema(clean_env, capsys):
    assert main(["schema"]) == 0

    out = capsys.readouterr().out
    assert "Schema map (3 table(s)):" in out
    payload = json.loads(out.split("\n", 1)[1])
    assert payload["orders"]["columns"][:2] == ["id", "user_id"]


def test_schema_introspection_needs_database(clean_env, capsys):
    assert main(["schema", "--introspect"]) == 1
    assert "Database unavailable" in capsys.readouterr().err
