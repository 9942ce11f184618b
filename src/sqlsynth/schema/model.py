"""Immutable in-memory representation of a relational schema snapshot."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping, Sequence


class SchemaModelError(ValueError):
    """Raised when schema data violates table/column uniqueness."""


class EmptySchemaError(SchemaModelError):
    """Raised when no tables are known, so SQL cannot be synthesized."""


@dataclass(frozen=True)
class ColumnInfo:
    name: str
    data_type: str
    nullable: bool = True
    default: str | None = None
    is_primary_key: bool = False
    is_foreign_key: bool = False

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "type": self.data_type,
            "nullable": self.nullable,
            "default": self.default,
            "isPrimaryKey": self.is_primary_key,
            "isForeignKey": self.is_foreign_key,
        }


@dataclass(frozen=True)
class IntrospectionRow:
    """One column as reported by a schema provider."""

    table_name: str
    column_name: str
    data_type: str
    nullable: bool
    default: str | None
    is_primary_key: bool
    is_foreign_key: bool


@dataclass(frozen=True)
class SchemaModel:
    """Mapping of table name to its ordered columns.

    Table iteration order is the order tables were supplied in; column order
    within a table follows the database ordinal position.
    """

    tables: Mapping[str, tuple[ColumnInfo, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        normalized: dict[str, tuple[ColumnInfo, ...]] = {}
        for table_name, columns in self.tables.items():
            columns = tuple(columns)
            seen: set[str] = set()
            for column in columns:
                if column.name in seen:
                    raise SchemaModelError(
                        f"Duplicate column '{column.name}' in table '{table_name}'."
                    )
                seen.add(column.name)
            normalized[table_name] = columns
        object.__setattr__(self, "tables", MappingProxyType(normalized))

    def __iter__(self) -> Iterator[str]:
        return iter(self.tables)

    def __len__(self) -> int:
        return len(self.tables)

    def __contains__(self, table_name: object) -> bool:
        return table_name in self.tables

    @property
    def is_empty(self) -> bool:
        return not self.tables

    @property
    def table_names(self) -> list[str]:
        return list(self.tables)

    @property
    def column_count(self) -> int:
        return sum(len(columns) for columns in self.tables.values())

    def columns(self, table_name: str) -> tuple[ColumnInfo, ...]:
        return self.tables[table_name]

    def column_names(self, table_name: str) -> list[str]:
        return [column.name for column in self.tables[table_name]]

    def has_column(self, table_name: str, column_name: str) -> bool:
        columns = self.tables.get(table_name)
        if columns is None:
            return False
        return any(column.name == column_name for column in columns)

    def require_tables(self) -> None:
        """Raise EmptySchemaError when the snapshot has no tables."""
        if self.is_empty:
            raise EmptySchemaError("No database schema information available.")

    def to_dict(self) -> dict[str, list[dict[str, object]]]:
        return {
            table_name: [column.to_dict() for column in columns]
            for table_name, columns in self.tables.items()
        }

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Sequence[Mapping[str, Any]]]) -> SchemaModel:
        """Build a model from `{table: [{name, type, nullable, ...}, ...]}`."""
        tables: dict[str, tuple[ColumnInfo, ...]] = {}
        for table_name, columns in payload.items():
            if not isinstance(table_name, str) or not table_name:
                raise SchemaModelError("Table names must be non-empty strings.")
            tables[table_name] = tuple(_column_from_mapping(table_name, item) for item in columns)
        return cls(tables=tables)


def _column_from_mapping(table_name: str, item: Mapping[str, Any]) -> ColumnInfo:
    name = item.get("name")
    data_type = item.get("type", item.get("data_type"))
    if not isinstance(name, str) or not name:
        raise SchemaModelError(f"Table '{table_name}' has a column without a name.")
    if not isinstance(data_type, str):
        raise SchemaModelError(f"Column '{table_name}.{name}' is missing a type.")
    default = item.get("default")
    return ColumnInfo(
        name=name,
        data_type=data_type,
        nullable=bool(item.get("nullable", True)),
        default=None if default is None else str(default),
        is_primary_key=bool(item.get("isPrimaryKey", item.get("is_primary_key", False))),
        is_foreign_key=bool(item.get("isForeignKey", item.get("is_foreign_key", False))),
    )


def build_schema_model(
    rows: Iterable[IntrospectionRow | Sequence[Any]],
) -> SchemaModel:
    """Group introspection rows by table, keeping native column order."""
    tables: dict[str, list[ColumnInfo]] = {}
    for raw in rows:
        row = raw if isinstance(raw, IntrospectionRow) else IntrospectionRow(*raw)
        tables.setdefault(row.table_name, []).append(
            ColumnInfo(
                name=row.column_name,
                data_type=row.data_type,
                nullable=bool(row.nullable),
                default=None if row.default is None else str(row.default),
                is_primary_key=bool(row.is_primary_key),
                is_foreign_key=bool(row.is_foreign_key),
            )
        )

    if not tables:
        raise EmptySchemaError("Schema provider returned no tables.")
    return SchemaModel(tables={name: tuple(columns) for name, columns in tables.items()})
