"""PostgreSQL schema provider producing SchemaModel snapshots."""

from __future__ import annotations

import logging

import psycopg

from sqlsynth.db.connection import DatabaseConnectionError, connect_readonly
from sqlsynth.db.queries import CURRENT_DATABASE_QUERY, SCHEMA_COLUMNS_QUERY
from sqlsynth.schema.model import IntrospectionRow, SchemaModel, build_schema_model

logger = logging.getLogger(__name__)


class SchemaUnavailableError(RuntimeError):
    """Raised when no database connection is available for introspection."""


class PostgresSchemaProvider:
    """Fetch a SchemaModel for one PostgreSQL schema."""

    def __init__(self, postgres_dsn: str | None, schema_name: str = "public") -> None:
        self.postgres_dsn = postgres_dsn
        self.schema_name = schema_name.strip() or "public"

    def fetch_schema(self) -> SchemaModel:
        """Introspect tables and columns; raises EmptySchemaError on zero tables."""
        rows = self._fetch_rows()
        schema = build_schema_model(rows)
        logger.info(
            "Introspected schema %r: %d tables, %d columns",
            self.schema_name,
            len(schema),
            schema.column_count,
        )
        return schema

    def current_database(self) -> str:
        row = self._run(CURRENT_DATABASE_QUERY, None)
        return str(row[0][0]) if row else ""

    def _fetch_rows(self) -> list[IntrospectionRow]:
        return [
            IntrospectionRow(*row)
            for row in self._run(SCHEMA_COLUMNS_QUERY, {"schema": self.schema_name})
        ]

    def _run(self, query: str, params: dict[str, str] | None) -> list[tuple]:
        if not self.postgres_dsn:
            raise SchemaUnavailableError("No active database connection (POSTGRES_DSN is not set).")
        try:
            with connect_readonly(self.postgres_dsn) as conn:
                with conn.cursor() as cur:
                    cur.execute(query, params)
                    return cur.fetchall()
        except DatabaseConnectionError as exc:
            raise SchemaUnavailableError(str(exc)) from exc
        except psycopg.Error as exc:
            raise SchemaUnavailableError(f"Schema introspection failed: {exc}") from exc
