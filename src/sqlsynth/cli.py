"""Command-line entrypoint for sqlsynth."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Callable

from sqlsynth import __version__
from sqlsynth.config import ConfigError, Settings, load_settings
from sqlsynth.db.connection import DatabaseConnectionError, check_connection
from sqlsynth.db.executor import PostgresQueryExecutor, QueryExecutionError
from sqlsynth.db.introspect import PostgresSchemaProvider, SchemaUnavailableError
from sqlsynth.llm.base import (
    LLMError,
    MissingCredentialError,
    ProviderId,
    UnsupportedProviderError,
)
from sqlsynth.llm.config_store import ProviderConfigStore
from sqlsynth.llm.dispatcher import ProviderDispatcher
from sqlsynth.pipeline import SynthesisPipeline
from sqlsynth.prompts.sql_generation import build_prompt
from sqlsynth.schema.cache import (
    CachedSchemaSnapshot,
    CacheError,
    load_schema_cache,
    refresh_schema_cache,
)
from sqlsynth.schema.model import EmptySchemaError, SchemaModelError
from sqlsynth.sql.validator import validate_references

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sqlsynth",
        description=(
            "Turn natural language questions into SQL grounded in a "
            "PostgreSQL schema, with a check of the tables and columns used."
        ),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: SQLSYNTH_LOG_LEVEL or WARNING).",
    )

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser(
        "config-check",
        help="Validate environment configuration and show provider status.",
    )
    subparsers.add_parser(
        "healthcheck",
        help="Check PostgreSQL connectivity with a read-only session.",
    )
    for name, help_text in (
        ("introspect-schema", "Inspect PostgreSQL tables and columns."),
        ("refresh-schema", "Refresh local schema cache from PostgreSQL introspection."),
    ):
        schema_parser = subparsers.add_parser(name, help=help_text)
        schema_parser.add_argument(
            "--schema",
            default=None,
            help="Database schema to introspect (default: DEFAULT_SCHEMA).",
        )
    subparsers.add_parser(
        "show-cache",
        help="Show metadata from the local schema cache file.",
    )
    prompt_parser = subparsers.add_parser(
        "build-prompt",
        help="Print the SQL-generation prompt built from the schema cache.",
    )
    prompt_parser.add_argument("question", help="Natural language question.")
    generate_parser = subparsers.add_parser(
        "generate-sql",
        help="Generate SQL with the selected provider and check its references.",
    )
    generate_parser.add_argument("question", help="Natural language question.")
    generate_parser.add_argument(
        "--provider",
        default=None,
        help="Provider id: "
        + ", ".join(item.value for item in ProviderId)
        + " (default: DEFAULT_PROVIDER).",
    )
    generate_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as a JSON object.",
    )
    validate_parser = subparsers.add_parser(
        "validate-sql",
        help="Check a SQL statement's alias-qualified columns against the schema cache.",
    )
    validate_parser.add_argument("sql", help="SQL statement to check.")
    run_parser = subparsers.add_parser(
        "run-sql",
        help="Execute one SQL statement on a read-only session and print rows as JSON.",
    )
    run_parser.add_argument("sql", help="SQL statement to execute.")
    run_parser.add_argument(
        "--max-rows",
        type=int,
        default=100,
        help="Maximum number of rows to fetch (default: 100).",
    )
    return parser


def _config_check(args: argparse.Namespace, settings: Settings) -> int:
    store = ProviderConfigStore.from_settings(settings)
    print("Configuration loaded successfully:")
    print(f"- POSTGRES_DSN: {'(set)' if settings.postgres_dsn else '(not set)'}")
    print(f"- DEFAULT_PROVIDER: {settings.default_provider.value}")
    print(f"- DEFAULT_SCHEMA: {settings.default_schema}")
    print(f"- SCHEMA_CACHE_PATH: {settings.schema_cache_path}")
    print(f"- LLM_TIMEOUT_SECONDS: {settings.llm_timeout_seconds:g}")
    print("Providers:")
    for provider, summary in store.summary().items():
        key_state = "***" if summary["has_api_key"] else "(not set)"
        print(f"- {provider}: model={summary['model_name']} api_key={key_state}")
    return 0


def _healthcheck(args: argparse.Namespace, settings: Settings) -> int:
    result = check_connection(settings.require_postgres_dsn())
    print("PostgreSQL healthcheck succeeded:")
    print(f"- database: {result.current_database}")
    print(f"- user: {result.current_user}")
    print(f"- server_version: {result.server_version}")
    print(f"- transaction_read_only: {result.transaction_read_only}")
    return 0


def _introspect_schema(args: argparse.Namespace, settings: Settings) -> int:
    provider = PostgresSchemaProvider(
        settings.require_postgres_dsn(),
        schema_name=args.schema or settings.default_schema,
    )
    schema = provider.fetch_schema()
    print("Schema introspection succeeded:")
    print(f"- schema: {provider.schema_name}")
    print(f"- tables: {len(schema)}")
    print(f"- columns: {schema.column_count}")
    for table_name in schema:
        print(f"  - {table_name} ({len(schema.columns(table_name))} columns)")
    return 0


def _refresh_schema(args: argparse.Namespace, settings: Settings) -> int:
    cached = refresh_schema_cache(
        settings.require_postgres_dsn(),
        settings.schema_cache_path,
        schema_name=args.schema or settings.default_schema,
    )
    print("Schema cache refresh succeeded:")
    _print_cache_summary(settings, cached)
    return 0


def _show_cache(args: argparse.Namespace, settings: Settings) -> int:
    cached = load_schema_cache(settings.schema_cache_path)
    print("Schema cache loaded:")
    _print_cache_summary(settings, cached)
    return 0


def _print_cache_summary(settings: Settings, cached: CachedSchemaSnapshot) -> None:
    print(f"- cache_path: {settings.schema_cache_path}")
    print(f"- cache_format_version: {cached.cache_format_version}")
    print(f"- generated_at: {cached.generated_at}")
    print(f"- database: {cached.database or '(unknown)'}")
    print(f"- tables: {', '.join(cached.schema.table_names) or '(none)'}")


def _build_prompt(args: argparse.Namespace, settings: Settings) -> int:
    cached = load_schema_cache(settings.schema_cache_path)
    cached.schema.require_tables()
    print(build_prompt(cached.schema, args.question))
    return 0


def _generate_sql(args: argparse.Namespace, settings: Settings) -> int:
    cached = load_schema_cache(settings.schema_cache_path)
    pipeline = SynthesisPipeline(
        ProviderConfigStore.from_settings(settings),
        ProviderDispatcher(timeout_seconds=settings.llm_timeout_seconds),
    )
    result = pipeline.synthesize(
        args.question,
        cached.schema,
        args.provider or settings.default_provider,
    )

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return 0

    print("SQL generation succeeded:")
    print(result.sql)
    report = result.validation_report
    if report.has_issues:
        print("\nWarnings (generated SQL may reference unknown schema objects):")
        for issue in report.issues:
            print(f"- {issue.message}")
    return 0


def _validate_sql(args: argparse.Namespace, settings: Settings) -> int:
    cached = load_schema_cache(settings.schema_cache_path)
    report = validate_references(args.sql, cached.schema)
    if report.has_issues:
        print("SQL reference check found issues:")
        for issue in report.issues:
            print(f"- {issue.message}")
        return 1

    print("SQL reference check found no issues.")
    return 0


def _run_sql(args: argparse.Namespace, settings: Settings) -> int:
    executor = PostgresQueryExecutor(
        settings.require_postgres_dsn(),
        max_rows=args.max_rows,
    )
    result = executor.execute(args.sql)
    print(json.dumps(result.to_dict(), indent=2))
    return 0


_COMMANDS: dict[str, Callable[[argparse.Namespace, Settings], int]] = {
    "config-check": _config_check,
    "healthcheck": _healthcheck,
    "introspect-schema": _introspect_schema,
    "refresh-schema": _refresh_schema,
    "show-cache": _show_cache,
    "build-prompt": _build_prompt,
    "generate-sql": _generate_sql,
    "validate-sql": _validate_sql,
    "run-sql": _run_sql,
}

# Ordered: subclasses before their bases.
_FAILURES: tuple[tuple[type[Exception], str, int], ...] = (
    (ConfigError, "Configuration error", 2),
    (UnsupportedProviderError, "Configuration error", 2),
    (MissingCredentialError, "Configuration error", 2),
    (EmptySchemaError, "Empty schema", 1),
    (SchemaModelError, "Invalid schema", 1),
    (CacheError, "Schema cache error", 1),
    (SchemaUnavailableError, "Schema introspection failed", 1),
    (DatabaseConnectionError, "Database connection failed", 1),
    (QueryExecutionError, "Query execution failed", 1),
    (LLMError, "SQL generation failed", 1),
)
_HANDLED_ERRORS = tuple(error_type for error_type, _, _ in _FAILURES)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        settings = load_settings()
    except ConfigError as exc:
        print(f"Configuration error:\n{exc}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=args.log_level or settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )

    handler = _COMMANDS[args.command]
    try:
        return handler(args, settings)
    except _HANDLED_ERRORS as exc:
        heading, code = next(
            (heading, code)
            for error_type, heading, code in _FAILURES
            if isinstance(exc, error_type)
        )
        logger.debug("%s failed", args.command, exc_info=True)
        print(f"{heading}:\n{exc}", file=sys.stderr)
        return code


if __name__ == "__main__":
    sys.exit(main())
