from pathlib import Path

import pytest

from querygate.config import ConfigError, Settings, load_settings


def test_defaults_without_environment(clean_env):
    settings = load_settings()

    assert settings.postgres_dsn == ""
    assert settings.database_configured is False
    assert settings.rules_path is None
    assert settings.ai_provider is None
    assert settings.default_limit == 50
    assert settings.max_limit == 500
    assert settings.openai_model == "gpt-4o-mini"
    assert settings.anthropic_model == "claude-3-5-haiku-20241022"
    assert settings.debug is False
    assert settings.log_level == "INFO"


def test_environment_values_are_parsed(clean_env):
    clean_env.setenv("POSTGRES_DSN", " postgresql://reader:pw@localhost:5432/app ")
    clean_env.setenv("RULES_PATH", "/etc/querygate/rules.json")
    clean_env.setenv("AI_PROVIDER", "OpenAI")
    clean_env.setenv("DEFAULT_LIMIT", "25")
    clean_env.setenv("MAX_LIMIT", "100")
    clean_env.setenv("DEBUG", "true")
    clean_env.setenv("LOG_LEVEL", "debug")

    settings = load_settings()

    assert settings.postgres_dsn == "postgresql://reader:pw@localhost:5432/app"
    assert settings.rules_path == Path("/etc/querygate/rules.json")
    assert settings.ai_provider == "openai"
    assert (settings.default_limit, settings.max_limit) == (25, 100)
    assert settings.debug is True
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    ("name", "value", "fragment"),
    [
        ("POSTGRES_DSN", "mysql://root@localhost/app", "postgres_dsn"),
        ("AI_PROVIDER", "mistral", "ai_provider"),
        ("OPENAI_TEMPERATURE", "3.5", "openai_temperature"),
        ("DEFAULT_LIMIT", "0", "default_limit"),
        ("LOG_LEVEL", "LOUD", "log_level"),
    ],
)
def test_invalid_values_raise_config_error(clean_env, name, value, fragment):
    clean_env.setenv(name, value)

    with pytest.raises(ConfigError) as exc_info:
        load_settings()

    message = str(exc_info.value)
    assert message.startswith("Invalid configuration values:")
    assert f"- {fragment}:" in message


def test_default_limit_cannot_exceed_max_limit(clean_env):
    clean_env.setenv("DEFAULT_LIMIT", "600")

    with pytest.raises(ConfigError, match="DEFAULT_LIMIT cannot exceed MAX_LIMIT"):
        load_settings()


def test_database_requirement_message():
    with pytest.raises(ConfigError, match="POSTGRES_DSN is required"):
        Settings().validate_database_requirements()

    Settings(postgres_dsn="postgres://localhost/app").validate_database_requirements()
