"""SQL parsing and schema reference validation."""

from sqlsynth.sql.parser import SQLParseError, parse_single_statement
from sqlsynth.sql.validator import (
    IssueKind,
    ValidationIssue,
    ValidationReport,
    extract_aliases,
    validate_references,
)

__all__ = [
    "IssueKind",
    "SQLParseError",
    "ValidationIssue",
    "ValidationReport",
    "extract_aliases",
    "parse_single_statement",
    "validate_references",
]
