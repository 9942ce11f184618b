"""Schema model types.

The on-disk cache lives in `sqlsynth.schema.cache`; it is not re-exported
here because it depends on the database layer.
"""

from sqlsynth.schema.model import (
    ColumnInfo,
    EmptySchemaError,
    IntrospectionRow,
    SchemaModel,
    SchemaModelError,
    build_schema_model,
)

__all__ = [
    "ColumnInfo",
    "EmptySchemaError",
    "IntrospectionRow",
    "SchemaModel",
    "SchemaModelError",
    "build_schema_model",
]
