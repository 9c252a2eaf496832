"""Live schema introspection."""

from schema_probe.introspection.schema_introspector import (
    ActualSchema,
    ColumnInfo,
    IntrospectionError,
    SchemaIntrospector,
    build_actual_schema,
)

__all__ = [
    "ActualSchema",
    "ColumnInfo",
    "IntrospectionError",
    "SchemaIntrospector",
    "build_actual_schema",
]
