"""Command-line entrypoint for querygate."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from querygate import __version__
from querygate.app import Runtime, build_runtime, refresh_schema
from querygate.config import ConfigError, Settings, load_settings
from querygate.db.connection import (
    DatabaseConnectionError,
    check_postgres_health,
    open_pool,
)
from querygate.errors import (
    DatabaseUnavailable,
    InputError,
    InternalError,
    NoPatternMatch,
    ValueExtractionFailure,
)
from querygate.llm import AIProvider, AIService
from querygate.patterns.catalog import CatalogError, load_rules
from querygate.schema.introspect import IntrospectionError
from querygate.schema.supplier import schema_map_to_dict

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="querygate",
        description=(
            "Turn natural language into read-only SQL and validate untrusted "
            "SQL against a PostgreSQL database."
        ),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging regardless of LOG_LEVEL.",
    )

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser(
        "config-check",
        help="Validate environment configuration for querygate.",
    )
    subparsers.add_parser(
        "healthcheck",
        help="Check PostgreSQL connectivity with a read-only session.",
    )
    subparsers.add_parser(
        "patterns",
        help="List the query patterns in the active rules file.",
    )
    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate SQL from a natural-language prompt.",
    )
    generate_parser.add_argument("prompt", help="Natural language question.")
    generate_parser.add_argument(
        "--no-ai",
        action="store_true",
        help="Skip the AI provider and use pattern matching only.",
    )
    generate_parser.add_argument(
        "--introspect",
        action="store_true",
        help="Ground AI generation in the live database schema.",
    )
    generate_parser.add_argument(
        "--schema",
        action="append",
        default=None,
        help="Schema(s) to introspect with --introspect. Repeat for multiple schemas.",
    )
    schema_parser = subparsers.add_parser(
        "schema",
        help="Show the schema map used to ground AI generation.",
    )
    schema_parser.add_argument(
        "--introspect",
        action="store_true",
        help="Read the schema from PostgreSQL instead of the rules file.",
    )
    schema_parser.add_argument(
        "--schema",
        action="append",
        default=None,
        help="Schema(s) to introspect with --introspect. Repeat for multiple schemas.",
    )
    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate a SQL statement with the safety gate and a dry run.",
    )
    validate_parser.add_argument("sql", help="SQL statement to validate.")
    validate_parser.add_argument(
        "--execute",
        action="store_true",
        help="Return result rows in addition to the verdict.",
    )
    providers_parser = subparsers.add_parser(
        "providers",
        help="Show AI provider configuration and available models.",
    )
    providers_parser.add_argument(
        "--test",
        action="store_true",
        help="Send a minimal request to the active provider.",
    )
    return parser


def configure_logging(settings: Settings | None, verbose: bool) -> None:
    if verbose:
        level = logging.DEBUG
    elif settings is not None:
        level = getattr(logging, settings.log_level)
    else:
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)


def _print_json(payload: object) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True, default=str))


def _redacted(value: str) -> str:
    return "***" if value else "(not set)"


async def _healthcheck(settings: Settings) -> int:
    settings.validate_database_requirements()
    pool = await open_pool(
        settings.postgres_dsn,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
    )
    try:
        result = await check_postgres_health(pool)
    finally:
        await pool.close()

    print("PostgreSQL healthcheck succeeded:")
    print(f"- database: {result.current_database}")
    print(f"- user: {result.current_user}")
    print(f"- server_version: {result.server_version}")
    print(f"- transaction_read_only: {result.transaction_read_only}")
    return 0


async def _generate(runtime: Runtime, args: argparse.Namespace) -> int:
    if args.introspect:
        schema = await refresh_schema(runtime.holder, include_schemas=args.schema)
        print(f"Introspected {len(schema)} table(s) for AI grounding.", file=sys.stderr)

    try:
        result = await runtime.generator.generate(args.prompt, use_ai=not args.no_ai)
    except NoPatternMatch as exc:
        print(f"SQL generation failed:\n{exc}", file=sys.stderr)
        print(exc.suggestion, file=sys.stderr)
        for pattern in exc.available_patterns:
            print(
                f"- {pattern['description']} "
                f"(keywords: {', '.join(pattern['keywords'])})",
                file=sys.stderr,
            )
        return 1
    except ValueExtractionFailure as exc:
        print(f"SQL generation failed:\n{exc}", file=sys.stderr)
        print(exc.suggestion, file=sys.stderr)
        return 1

    print("SQL generation succeeded:")
    print(f"- source: {result.source.value}")
    print(f"- confidence: {result.confidence:.3f}")
    print(f"- pattern: {result.matched_pattern.intent}")
    print("\nSQL:")
    print(result.sql)
    print("\nJSON payload:")
    _print_json(result.model_dump(mode="json", by_alias=True))
    return 0


async def _schema(runtime: Runtime, args: argparse.Namespace) -> int:
    if args.introspect:
        schema = await refresh_schema(runtime.holder, include_schemas=args.schema)
    else:
        schema = runtime.holder.current().schema.current()

    print(f"Schema map ({len(schema)} table(s)):")
    _print_json(schema_map_to_dict(schema))
    return 0


async def _validate(runtime: Runtime, args: argparse.Namespace) -> int:
    result = await runtime.validator.validate(args.sql, execute=args.execute)
    if result.is_valid:
        print("SQL validation succeeded:")
        print(f"- limit_added: {'yes' if result.limited else 'no'}")
        print(f"- execution_time_ms: {result.execution_time_ms}")
    else:
        print("SQL validation failed:")
        print(f"- kind: {result.error_kind.value if result.error_kind else '(none)'}")
        print(f"- message: {result.error_message}")
        if result.suggestion:
            print(f"- suggestion: {result.suggestion}")
    print("\nJSON payload:")
    _print_json(result.model_dump(mode="json", by_alias=True))
    return 0 if result.is_valid else 1


async def _providers(runtime: Runtime, args: argparse.Namespace) -> int:
    service = runtime.ai_service
    print("AI provider configuration:")
    _print_json(service.get_config().redacted())
    print(f"\nActive provider: {service.provider.value} (enabled: {service.enabled})")
    for provider in AIProvider:
        print(f"\n{provider.value} models:")
        for model in AIService.available_models(provider):
            print(f"- {model}")

    if args.test:
        ok = await service.test_connection()
        print(f"\nConnection test: {'ok' if ok else 'failed'}")
        return 0 if ok else 1
    return 0


async def _run_with_runtime(settings: Settings, args: argparse.Namespace) -> int:
    connect = args.command == "validate" or (
        args.command in ("generate", "schema") and args.introspect
    )
    runtime = await build_runtime(settings, connect=connect)
    try:
        if args.command == "generate":
            return await _generate(runtime, args)
        if args.command == "validate":
            return await _validate(runtime, args)
        if args.command == "schema":
            return await _schema(runtime, args)
        return await _providers(runtime, args)
    finally:
        await runtime.close()


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        settings = load_settings()
    except ConfigError as exc:
        configure_logging(None, args.verbose)
        print(f"Configuration error:\n{exc}", file=sys.stderr)
        return 2
    configure_logging(settings, args.verbose)

    if args.command == "config-check":
        print("Configuration loaded successfully:")
        print(f"- POSTGRES_DSN: {settings.postgres_dsn or '(not set)'}")
        print(f"- RULES_PATH: {settings.rules_path or '(packaged default)'}")
        print(f"- AI_PROVIDER: {settings.ai_provider or '(auto)'}")
        print(f"- OPENAI_API_KEY: {_redacted(settings.openai_api_key)}")
        print(f"- OPENAI_MODEL: {settings.openai_model}")
        print(f"- ANTHROPIC_API_KEY: {_redacted(settings.anthropic_api_key)}")
        print(f"- ANTHROPIC_MODEL: {settings.anthropic_model}")
        print(f"- DEFAULT_LIMIT: {settings.default_limit}")
        print(f"- MAX_LIMIT: {settings.max_limit}")
        print(f"- DEBUG: {settings.debug}")
        return 0

    if args.command == "patterns":
        try:
            rules = load_rules(settings.rules_path)
        except CatalogError as exc:
            print(f"Rules file could not be loaded:\n{exc}", file=sys.stderr)
            return 1

        print(f"Query patterns ({len(rules.query_patterns)}):")
        for pattern in rules.query_patterns:
            print(f"- {pattern.intent}: {pattern.description}")
            print(f"  keywords: {', '.join(pattern.keywords)}")
            for example in pattern.examples:
                print(f"  example: {example}")
        return 0

    try:
        if args.command == "healthcheck":
            return asyncio.run(_healthcheck(settings))
        return asyncio.run(_run_with_runtime(settings, args))
    except ConfigError as exc:
        print(f"Configuration error:\n{exc}", file=sys.stderr)
        return 2
    except CatalogError as exc:
        print(f"Rules file could not be loaded:\n{exc}", file=sys.stderr)
        return 2
    except DatabaseConnectionError as exc:
        print(f"Database connection failed:\n{exc}", file=sys.stderr)
        return 1
    except (DatabaseUnavailable, IntrospectionError) as exc:
        print(f"Database unavailable:\n{exc}", file=sys.stderr)
        return 1
    except InputError as exc:
        print(f"Invalid input:\n{exc}", file=sys.stderr)
        return 1
    except InternalError as exc:
        print(f"Internal error: {exc}", file=sys.stderr)
        if exc.detail:
            print(exc.detail, file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
