"""Prompt builder for deterministic NL-to-SQL generation requests."""

from __future__ import annotations

from sqlsynth.schema.model import ColumnInfo, SchemaModel

DEFAULT_DIALECT = "PostgreSQL"

_PROMPT_TEMPLATE = """\
You are a precise {dialect} expert who translates natural language queries into SQL.

{dialect_upper} DATABASE SCHEMA:
{schema_context}

TASK:
Convert this natural language query to {dialect} SQL:
"{question}"

IMPORTANT GUIDELINES:
1. Use ONLY tables and columns that exist in the provided schema
2. Double check that EVERY column you reference actually exists in the specified tables
3. Use proper table and column names EXACTLY as shown in the schema (case-sensitive)
4. If a requested column doesn't exist, do not invent it - use columns that are available
5. Do not add qualifying columns (such as an "id") that aren't listed in the schema
6. Pay special attention to table names and use them exactly as given (they might be singular or plural)
7. If joining tables, ensure the join columns actually exist in both tables
8. Return ONLY the executable SQL query with no explanations or markdown

SQL QUERY:
"""


def format_column(column: ColumnInfo) -> str:
    parts = [f"Type: {column.data_type}", "Nullable" if column.nullable else "NOT NULL"]
    if column.is_primary_key:
        parts.append("PRIMARY KEY")
    if column.is_foreign_key:
        parts.append("FOREIGN KEY")
    return f"{column.name} ({', '.join(parts)})"


def format_table(table_name: str, columns: tuple[ColumnInfo, ...]) -> str:
    lines = [f"TABLE: {table_name}"]
    primary_keys = [column.name for column in columns if column.is_primary_key]
    foreign_keys = [column.name for column in columns if column.is_foreign_key]
    if primary_keys:
        lines.append(f"PRIMARY KEY(S): {', '.join(primary_keys)}")
    if foreign_keys:
        lines.append(f"FOREIGN KEY(S): {', '.join(foreign_keys)}")
    lines.append("COLUMNS:")
    lines.extend(f"    - {format_column(column)}" for column in columns)
    return "\n".join(lines)


def describe_schema(schema: SchemaModel) -> str:
    """Render every table in schema order, blocks separated by a blank line."""
    return "\n\n".join(
        format_table(table_name, columns) for table_name, columns in schema.tables.items()
    )


def build_prompt(
    schema: SchemaModel,
    question: str,
    *,
    dialect: str = DEFAULT_DIALECT,
) -> str:
    """Build the instruction text sent to the language model.

    Pure and deterministic: equal inputs always produce identical text.
    """
    return _PROMPT_TEMPLATE.format(
        dialect=dialect,
        dialect_upper=dialect.upper(),
        schema_context=describe_schema(schema),
        question=question,
    )
