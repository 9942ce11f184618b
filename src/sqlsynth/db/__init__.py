"""Database collaborators: schema provider and query executor."""

from sqlsynth.db.connection import (
    DatabaseConnectionError,
    HealthcheckResult,
    check_connection,
    connect_readonly,
)
from sqlsynth.db.executor import (
    PostgresQueryExecutor,
    QueryExecutionError,
    QueryResult,
    to_transport_value,
)
from sqlsynth.db.introspect import PostgresSchemaProvider, SchemaUnavailableError

__all__ = [
    "DatabaseConnectionError",
    "HealthcheckResult",
    "PostgresQueryExecutor",
    "PostgresSchemaProvider",
    "QueryExecutionError",
    "QueryResult",
    "SchemaUnavailableError",
    "check_connection",
    "connect_readonly",
    "to_transport_value",
]
