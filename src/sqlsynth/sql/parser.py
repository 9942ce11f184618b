"""SQL parsing helpers backed by SQLGlot."""

from __future__ import annotations

from sqlglot import exp, parse
from sqlglot.errors import ParseError


class SQLParseError(RuntimeError):
    """Raised when SQL cannot be parsed into exactly one statement."""


def parse_single_statement(sql: str, dialect: str = "postgres") -> exp.Expression:
    """Parse `sql` and require exactly one statement."""
    normalized = sql.strip()
    if not normalized:
        raise SQLParseError("SQL cannot be empty.")

    try:
        statements = [item for item in parse(normalized, read=dialect) if item is not None]
    except ParseError as exc:
        raise SQLParseError(f"Invalid SQL: {exc}") from exc

    if not statements:
        raise SQLParseError("SQL cannot be empty.")
    if len(statements) > 1:
        raise SQLParseError(
            f"Expected a single SQL statement, found {len(statements)}."
        )
    return statements[0]
