"""Read-only SQL execution returning transport-safe rows."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any
from uuid import UUID

import psycopg

from sqlsynth.db.connection import DatabaseConnectionError, connect_readonly
from sqlsynth.sql.parser import SQLParseError, parse_single_statement

logger = logging.getLogger(__name__)

INT8_OID = 20
INT8_ARRAY_OID = 1016


class QueryExecutionError(RuntimeError):
    """Raised when SQL is rejected before execution or fails in the database."""


@dataclass(frozen=True)
class QueryResult:
    rows: list[dict[str, Any]] = field(default_factory=list)
    row_count: int = 0
    fields: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {"rows": self.rows, "rowCount": self.row_count, "fields": self.fields}


def to_transport_value(value: Any, type_oid: int | None = None) -> Any:
    """Reduce a driver value to a JSON-friendly primitive.

    64-bit integer columns become decimal strings so they survive consumers
    that store numbers as doubles.
    """
    if value is None or isinstance(value, (bool, str, float)):
        return value
    if isinstance(value, int):
        return str(value) if type_oid == INT8_OID else value
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    if isinstance(value, (Decimal, UUID, timedelta)):
        return str(value)
    if isinstance(value, dict):
        return {str(key): to_transport_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        element_oid = INT8_OID if type_oid in (INT8_OID, INT8_ARRAY_OID) else type_oid
        return [to_transport_value(item, element_oid) for item in value]
    return str(value)


class PostgresQueryExecutor:
    """Run one statement per call on a read-only session."""

    def __init__(self, postgres_dsn: str, *, max_rows: int | None = None) -> None:
        self.postgres_dsn = postgres_dsn
        self.max_rows = max_rows

    def execute(self, sql: str) -> QueryResult:
        try:
            parse_single_statement(sql)
        except SQLParseError as exc:
            raise QueryExecutionError(str(exc)) from exc

        try:
            with connect_readonly(self.postgres_dsn) as conn:
                with conn.cursor() as cur:
                    cur.execute(sql)
                    if cur.description is None:
                        return QueryResult(row_count=max(cur.rowcount, 0))
                    columns = [(col.name, col.type_code) for col in cur.description]
                    raw_rows = (
                        cur.fetchmany(self.max_rows) if self.max_rows else cur.fetchall()
                    )
                    row_count = cur.rowcount if cur.rowcount >= 0 else len(raw_rows)
        except DatabaseConnectionError as exc:
            raise QueryExecutionError(str(exc)) from exc
        except psycopg.Error as exc:
            raise QueryExecutionError(f"Query failed: {exc}") from exc

        rows = [
            {
                name: to_transport_value(value, type_oid)
                for (name, type_oid), value in zip(columns, raw)
            }
            for raw in raw_rows
        ]
        logger.info("Query returned %d rows (%d fetched)", row_count, len(rows))
        return QueryResult(
            rows=rows,
            row_count=row_count,
            fields=[{"name": name, "type_oid": type_oid} for name, type_oid in columns],
        )
