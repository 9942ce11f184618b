"""PostgreSQL connection helpers shared by the schema provider and executor."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

import psycopg

logger = logging.getLogger(__name__)

APPLICATION_NAME = "sqlsynth"


class DatabaseConnectionError(RuntimeError):
    """Raised when a PostgreSQL connection cannot be opened or used."""


@dataclass(frozen=True)
class HealthcheckResult:
    current_database: str
    current_user: str
    server_version: str
    transaction_read_only: bool


@contextmanager
def connect_readonly(
    postgres_dsn: str,
    *,
    connect_timeout: int = 5,
) -> Iterator[psycopg.Connection]:
    """Open a connection whose transactions default to read-only."""
    if not postgres_dsn:
        raise DatabaseConnectionError("No PostgreSQL DSN configured.")

    try:
        conn = psycopg.connect(
            postgres_dsn,
            connect_timeout=connect_timeout,
            application_name=APPLICATION_NAME,
            options="-c default_transaction_read_only=on",
        )
    except psycopg.Error as exc:
        raise DatabaseConnectionError(
            f"Could not connect to PostgreSQL with provided DSN: {exc}"
        ) from exc

    with conn:
        yield conn


def check_connection(postgres_dsn: str) -> HealthcheckResult:
    """Run a trivial query to confirm the database is reachable."""
    try:
        with connect_readonly(postgres_dsn) as conn:
            row = conn.execute(
                """
                SELECT
                  current_database(),
                  current_user,
                  current_setting('server_version'),
                  current_setting('transaction_read_only')
                """
            ).fetchone()
    except psycopg.Error as exc:
        raise DatabaseConnectionError(f"PostgreSQL connection test failed: {exc}") from exc

    if row is None:
        raise DatabaseConnectionError("PostgreSQL connection test returned no data.")

    database, user, server_version, read_only = row
    logger.info("Connected to %s as %s (server %s)", database, user, server_version)
    return HealthcheckResult(
        current_database=database,
        current_user=user,
        server_version=server_version,
        transaction_read_only=read_only == "on",
    )
