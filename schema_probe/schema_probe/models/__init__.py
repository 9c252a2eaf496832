"""Domain models for the schema probe."""

from schema_probe.models.schema_definition import (
    ADDED_FIELDS,
    BASE_FIELDS,
    USERS_BASE_SCHEMA,
    USERS_SCHEMA,
    FieldSpec,
    SchemaDefinition,
)

__all__ = [
    "ADDED_FIELDS",
    "BASE_FIELDS",
    "FieldSpec",
    "SchemaDefinition",
    "USERS_BASE_SCHEMA",
    "USERS_SCHEMA",
]
