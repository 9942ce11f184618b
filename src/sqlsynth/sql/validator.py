"""Heuristic check that alias-qualified column references exist in the schema.

This is not a SQL parser. It looks for ``FROM <table> [AS] <alias>`` and
``JOIN <table> [AS] <alias>`` clauses, then checks every ``alias.column``
occurrence against the schema. Unaliased tables and unqualified columns are
never checked, so some mistakes go unreported; in exchange the checker does
not flag references it cannot attribute to a table.

Results are advisory. The SQL text is never modified or rejected here.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum

from sqlsynth.schema.model import SchemaModel

logger = logging.getLogger(__name__)

# Words that may follow a table name but are never aliases.
_RESERVED_FOLLOWERS = frozenset(
    {
        "AND", "AS", "CROSS", "ELSE", "END", "EXCEPT", "FETCH", "FOR", "FULL",
        "GROUP", "HAVING", "INNER", "INTERSECT", "INTO", "JOIN", "LATERAL",
        "LEFT", "LIMIT", "NATURAL", "NOT", "OFFSET", "ON", "OR", "ORDER",
        "OUTER", "RETURNING", "RIGHT", "SELECT", "SET", "TABLESAMPLE", "THEN",
        "UNION", "USING", "VALUES", "WHEN", "WHERE", "WINDOW", "WITH",
    }
)


def _table_ref_pattern(keyword: str) -> re.Pattern[str]:
    # The alias sits in a lookahead so a keyword read as a candidate alias
    # (e.g. the JOIN in "FROM a JOIN b x") is not consumed.
    return re.compile(
        rf"\b{keyword}\s+"
        r'(?:"?[A-Za-z_][\w$]*"?\.)?'
        r'("?[A-Za-z_][\w$]*"?)'
        r"(?=(?:\s+(?:AS\s+)?([A-Za-z_]\w*))?)",
        re.IGNORECASE,
    )


_FROM_RE = _table_ref_pattern("FROM")
_JOIN_RE = _table_ref_pattern("JOIN")


class IssueKind(str, Enum):
    UNKNOWN_TABLE = "unknown_table"
    UNKNOWN_COLUMN = "unknown_column"


@dataclass(frozen=True)
class ValidationIssue:
    kind: IssueKind
    table_name: str
    column_name: str | None = None

    @property
    def message(self) -> str:
        if self.kind is IssueKind.UNKNOWN_TABLE:
            return f'Table "{self.table_name}" not found in schema'
        return f'Column "{self.column_name}" not found in table "{self.table_name}"'

    def to_dict(self) -> dict[str, object]:
        return {
            "kind": self.kind.value,
            "table": self.table_name,
            "column": self.column_name,
            "message": self.message,
        }


@dataclass(frozen=True)
class ValidationReport:
    """Issues in discovery order."""

    issues: tuple[ValidationIssue, ...] = field(default_factory=tuple)

    @property
    def has_issues(self) -> bool:
        return len(self.issues) > 0

    def to_dict(self) -> dict[str, object]:
        return {
            "has_issues": self.has_issues,
            "issues": [issue.to_dict() for issue in self.issues],
        }


def extract_aliases(sql: str) -> dict[str, str]:
    """Map alias -> table name for FROM/JOIN clauses that declare an alias."""
    aliases: dict[str, str] = {}
    for pattern in (_FROM_RE, _JOIN_RE):
        for match in pattern.finditer(sql):
            table_name = match.group(1).replace('"', "")
            alias = match.group(2)
            if not alias or alias.upper() in _RESERVED_FOLLOWERS:
                continue
            if alias != table_name:
                aliases[alias] = table_name
    return aliases


def _column_ref_pattern(alias: str) -> re.Pattern[str]:
    return re.compile(
        rf'(?<![\w."]){re.escape(alias)}\.(?:"([^"]+)"|([A-Za-z_][\w$]*))'
    )


def _scan(sql: str, schema: SchemaModel) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    aliases = extract_aliases(sql)
    logger.debug("Detected table aliases: %s", aliases)

    for alias, table_name in aliases.items():
        for match in _column_ref_pattern(alias).finditer(sql):
            column_name = match.group(1) or match.group(2)
            if table_name not in schema:
                issues.append(ValidationIssue(IssueKind.UNKNOWN_TABLE, table_name))
            elif not schema.has_column(table_name, column_name):
                issues.append(
                    ValidationIssue(IssueKind.UNKNOWN_COLUMN, table_name, column_name)
                )
    return issues


def validate_references(sql: str, schema: SchemaModel) -> ValidationReport:
    """Report alias-qualified references to tables or columns not in `schema`.

    Never raises: if scanning fails on unexpected input, an empty report is
    returned and the failure is logged.
    """
    try:
        issues = _scan(sql, schema)
    except (re.error, TypeError, ValueError) as exc:
        logger.warning("Reference validation skipped: %s", exc)
        return ValidationReport()

    for issue in issues:
        logger.warning("Generated SQL may have issues: %s", issue.message)
    return ValidationReport(issues=tuple(issues))
