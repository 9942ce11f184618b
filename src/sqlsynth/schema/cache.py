"""Schema cache persistence and refresh routines."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from sqlsynth.db.introspect import PostgresSchemaProvider, SchemaUnavailableError
from sqlsynth.schema.model import EmptySchemaError, SchemaModel, SchemaModelError

CACHE_FORMAT_VERSION = "1.0"

logger = logging.getLogger(__name__)


class CacheError(RuntimeError):
    """Raised when schema cache operations fail."""


@dataclass(frozen=True)
class CachedSchemaSnapshot:
    """Versioned schema cache representation."""

    cache_format_version: str
    generated_at: str
    database: str
    schema: SchemaModel

    def to_dict(self) -> dict[str, object]:
        return {
            "cache_format_version": self.cache_format_version,
            "generated_at": self.generated_at,
            "database": self.database,
            "tables": self.schema.to_dict(),
        }


def _now_iso() -> str:
    return datetime.now(tz=UTC).replace(microsecond=0).isoformat()


def _parse_tables(payload: dict[str, Any]) -> SchemaModel:
    tables_payload = payload.get("tables")
    if not isinstance(tables_payload, dict):
        raise CacheError("Cached schema is missing a valid 'tables' object.")

    for table_name, columns in tables_payload.items():
        if not isinstance(columns, list) or not all(
            isinstance(item, dict) for item in columns
        ):
            raise CacheError(f"Table '{table_name}' has invalid 'columns' structure.")

    try:
        return SchemaModel.from_mapping(tables_payload)
    except SchemaModelError as exc:
        raise CacheError(f"Cached schema is invalid: {exc}") from exc


def save_schema_cache(
    cache_path: Path,
    schema: SchemaModel,
    *,
    database: str = "",
) -> CachedSchemaSnapshot:
    """Persist a schema model to cache JSON with format metadata."""
    try:
        cache_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise CacheError(f"Failed to create cache directory: {exc}") from exc

    cached = CachedSchemaSnapshot(
        cache_format_version=CACHE_FORMAT_VERSION,
        generated_at=_now_iso(),
        database=database,
        schema=schema,
    )
    try:
        # Keys are not sorted so table and column order survive the round trip.
        cache_path.write_text(
            json.dumps(cached.to_dict(), indent=2) + "\n",
            encoding="utf-8",
        )
    except OSError as exc:
        raise CacheError(f"Failed to write schema cache file: {exc}") from exc

    logger.info(
        "Wrote schema cache %s (%d tables, %d columns)",
        cache_path,
        len(schema),
        schema.column_count,
    )
    return cached


def load_schema_cache(cache_path: Path) -> CachedSchemaSnapshot:
    """Load and validate cached schema JSON."""
    if not cache_path.exists():
        raise CacheError(f"Schema cache file does not exist: {cache_path}")

    try:
        payload = json.loads(cache_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise CacheError(f"Schema cache file is not valid JSON: {exc}") from exc
    except OSError as exc:
        raise CacheError(f"Failed to read schema cache file: {exc}") from exc

    if not isinstance(payload, dict):
        raise CacheError("Schema cache payload root must be a JSON object.")

    cache_format_version = payload.get("cache_format_version")
    if cache_format_version != CACHE_FORMAT_VERSION:
        raise CacheError(
            "Unsupported schema cache format version: "
            f"{cache_format_version!r}. Expected {CACHE_FORMAT_VERSION!r}."
        )

    generated_at = payload.get("generated_at")
    if not isinstance(generated_at, str) or not generated_at.strip():
        raise CacheError("Schema cache is missing a valid 'generated_at' value.")

    database = payload.get("database", "")
    if not isinstance(database, str):
        raise CacheError("Schema cache has an invalid 'database' value.")

    return CachedSchemaSnapshot(
        cache_format_version=cache_format_version,
        generated_at=generated_at,
        database=database,
        schema=_parse_tables(payload),
    )


def refresh_schema_cache(
    postgres_dsn: str,
    cache_path: Path,
    schema_name: str = "public",
) -> CachedSchemaSnapshot:
    """Introspect PostgreSQL schema and persist local cache."""
    provider = PostgresSchemaProvider(postgres_dsn, schema_name=schema_name)
    try:
        schema = provider.fetch_schema()
        database = provider.current_database()
    except EmptySchemaError:
        raise
    except (SchemaUnavailableError, SchemaModelError) as exc:
        raise CacheError(str(exc)) from exc

    return save_schema_cache(cache_path, schema, database=database)
